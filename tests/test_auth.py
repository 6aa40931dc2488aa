import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError as SettingsError

import auth
from config import get_settings
from conftest import bearer, register
from errors import Conflict, InvalidCredentials, ValidationError
from main import app
from security import verify_token


class TestRegister:
    def test_register_then_login(self, client):
        response = register(client, "Pat", "x@x.com", "rightpw", "patient")
        assert response.status_code == 201

        response = client.post("/api/auth/login", json={"email": "x@x.com", "password": "rightpw", "role": "patient"})
        assert response.status_code == 200
        payload = response.json()
        assert payload["token_type"] == "bearer"
        assert payload["user"]["email"] == "x@x.com"
        assert verify_token(payload["access_token"]).principal.role == "patient"

    def test_register_issues_token(self, client):
        response = register(client, "Dr Who", "dr@h.com", "secret1", "provider")
        payload = response.json()
        assert payload["message"] == "Registration successful"
        assert payload["expires_in"] == 3600

        claims = verify_token(payload["access_token"])
        assert claims.principal.subject_id == payload["user"]["id"]
        assert claims.principal.email == "dr@h.com"
        assert claims.principal.role == "provider"

    def test_response_never_exposes_password(self, client):
        response = register(client, "Pat", "pat@h.com", "patient1", "patient")
        body = response.text
        assert "patient1" not in body
        assert "password" not in body
        assert "$2b$" not in body

    def test_profile_attributes_are_stored(self, client):
        response = register(client, "Pat", "pat@h.com", "patient1", "patient", age=41, blood_type="O+")
        user = response.json()["user"]
        assert user["age"] == 41
        assert user["blood_type"] == "O+"

    @pytest.mark.parametrize("second_role", ["patient", "provider"])
    def test_duplicate_email_conflicts(self, client, second_role):
        assert register(client, "Pat", "dup@h.com", "patient1", "patient").status_code == 201

        response = register(client, "Again", "dup@h.com", "another1", second_role)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_email_is_case_sensitive(self, client):
        assert register(client, "Pat", "Case@h.com", "patient1", "patient").status_code == 201
        assert register(client, "Pat", "case@h.com", "patient1", "patient").status_code == 201

    @pytest.mark.parametrize("missing", ["name", "email", "password", "role"])
    def test_missing_field(self, client, missing):
        body = {"name": "Pat", "email": "pat@h.com", "password": "patient1", "role": "patient"}
        del body[missing]
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_invalid_role(self, client):
        response = register(client, "Admin", "admin@h.com", "admin123", "admin")
        assert response.status_code == 400

    def test_short_password(self, client):
        response = register(client, "Pat", "pat@h.com", "12345", "patient")
        assert response.status_code == 400
        assert "at least 6" in response.json()["detail"]

    def test_password_over_bcrypt_limit(self, client):
        response = register(client, "Pat", "long@h.com", "p" * 100, "patient")
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_multibyte_password_limit_counts_bytes(self, client):
        # 40 characters, 80 bytes
        response = register(client, "Pat", "long@h.com", "\u00e9" * 40, "patient")
        assert response.status_code == 400

    def test_password_at_bcrypt_limit(self, client):
        response = register(client, "Pat", "edge@h.com", "p" * 72, "patient")
        assert response.status_code == 201

    def test_malformed_body_is_validation_error(self, client):
        response = client.post("/api/auth/register", json={"name": "Pat", "age": "not a number"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_unique_violation_at_write_is_conflict(self, client, monkeypatch):
        """A racing registration that passes the pre-check still gets Conflict"""
        assert register(client, "Pat", "race@h.com", "patient1", "patient").status_code == 201
        monkeypatch.setattr(auth, "get_user_by_email", lambda email: None)

        with pytest.raises(Conflict):
            auth.register_user("Pat", "race@h.com", "patient1", "patient")


class TestLogin:
    def _login(self, client, email, password, role):
        return client.post("/api/auth/login", json={"email": email, "password": password, "role": role})

    def test_unknown_identity(self, client):
        response = self._login(client, "x@x.com", "rightpw", "patient")
        assert response.status_code == 401
        assert response.json() == {"error": "invalid_credentials", "detail": "Invalid credentials"}

    def test_role_is_part_of_the_key(self, client):
        register(client, "Pat", "x@x.com", "rightpw", "provider")
        unknown = self._login(client, "nobody@x.com", "rightpw", "patient")
        wrong_role = self._login(client, "x@x.com", "rightpw", "patient")
        assert wrong_role.status_code == 401
        assert wrong_role.json() == unknown.json()

    def test_wrong_password_matches_unknown_identity(self, client):
        register(client, "Pat", "x@x.com", "rightpw", "patient")
        unknown = self._login(client, "nobody@x.com", "rightpw", "patient")
        wrong_password = self._login(client, "x@x.com", "wrongpw", "patient")
        assert wrong_password.status_code == unknown.status_code == 401
        assert wrong_password.json() == unknown.json()

    def test_over_long_password_is_invalid_credentials(self, client):
        register(client, "Pat", "x@x.com", "rightpw", "patient")
        unknown = self._login(client, "nobody@x.com", "rightpw", "patient")
        for email in ("x@x.com", "nobody@x.com"):
            response = self._login(client, email, "p" * 100, "patient")
            assert response.status_code == 401
            assert response.json() == unknown.json()

    def test_missing_field(self, client):
        response = client.post("/api/auth/login", json={"email": "x@x.com", "password": "rightpw"})
        assert response.status_code == 400

    def test_login_response_has_no_hash(self, client):
        register(client, "Pat", "x@x.com", "rightpw", "patient")
        response = self._login(client, "x@x.com", "rightpw", "patient")
        assert "password_hash" not in response.json()["user"]

    def test_seeded_provider_can_login(self, client):
        response = self._login(client, "rishi@healthcare.com", "rishi123", "provider")
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Dr Rishi Cheekatla"


class TestAuthService:
    def test_login_errors(self, db):
        with pytest.raises(ValidationError):
            auth.login_user("", "pw", "patient")
        with pytest.raises(InvalidCredentials):
            auth.login_user("ghost@h.com", "whatever", "patient")

    def test_register_returns_user_and_token(self, db):
        user, token = auth.register_user("Pat", "svc@h.com", "patient1", "patient")
        assert "password_hash" not in user
        assert verify_token(token).principal.subject_id == user["id"]


class TestVerify:
    def test_verify_returns_identity(self, client, patient):
        response = client.get("/api/auth/verify", headers=bearer(patient["access_token"]))
        assert response.status_code == 200
        assert response.json()["user"]["id"] == patient["user"]["id"]


class TestStartupConfiguration:
    def test_missing_secret_fails_startup(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY")
        get_settings.cache_clear()
        with pytest.raises(SettingsError):
            with TestClient(app):
                pass

    def test_missing_token_lifetime_fails_startup(self, monkeypatch):
        monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES")
        get_settings.cache_clear()
        with pytest.raises(SettingsError):
            with TestClient(app):
                pass
