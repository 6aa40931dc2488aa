import pytest
from fastapi.testclient import TestClient

from config import get_settings
from main import app


@pytest.fixture(autouse=True)
def settings_env(tmp_path, monkeypatch):
    """Point every test at its own database with cheap bcrypt rounds"""
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "portal.db"))
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db():
    from database import init_database
    init_database()


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


def register(client, name, email, password, role, **profile):
    body = {"name": name, "email": email, "password": password, "role": role, **profile}
    return client.post("/api/auth/register", json=body)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient(client):
    response = register(client, "Pat Patient", "pat@h.com", "patient1", "patient", age=30)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def other_patient(client):
    response = register(client, "Olive Other", "olive@h.com", "patient2", "patient")
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def provider(client):
    response = register(client, "Dr Who", "dr@h.com", "secret1", "provider")
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def other_provider(client):
    response = register(client, "Dr Other", "other.dr@h.com", "secret2", "provider")
    assert response.status_code == 201
    return response.json()
