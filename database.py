import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from config import PATIENT, PROVIDER, get_settings
from errors import Unavailable

logger = logging.getLogger(__name__)

# Columns callers may read back; password_hash is only used by the auth service
PUBLIC_USER_FIELDS = (
    "id", "name", "email", "role", "age", "blood_type", "disease",
    "phone", "date_of_birth", "address", "created_at",
)
PROFILE_FIELDS = ("name", "age", "blood_type", "disease", "phone", "date_of_birth", "address")
WELLNESS_FIELDS = (
    "steps", "heart_rate", "systolic", "diastolic", "weight", "height",
    "calories_burned", "sleep_hours", "notes",
)


class UniqueViolation(Exception):
    """Raised when an insert collides with a UNIQUE constraint"""


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_database():
    """Initialize SQLite database with tables"""
    with get_db() as conn:
        cursor = conn.cursor()

        # Users table
        cursor.execute(f'''
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                role TEXT NOT NULL CHECK (role IN ('{PATIENT}', '{PROVIDER}')),
                age INTEGER,
                blood_type TEXT,
                disease TEXT,
                phone TEXT,
                date_of_birth TEXT,
                address TEXT,
                created_at TEXT NOT NULL
            )
        ''')

        # Appointments table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS appointments (
                id TEXT PRIMARY KEY,
                patient_id TEXT NOT NULL,
                doctor_id TEXT NOT NULL,
                name TEXT NOT NULL,
                email TEXT NOT NULL,
                phone TEXT NOT NULL,
                department TEXT NOT NULL,
                date TEXT NOT NULL,
                message TEXT,
                created_at TEXT NOT NULL
            )
        ''')

        # Prescriptions table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS prescriptions (
                id TEXT PRIMARY KEY,
                patient_id TEXT NOT NULL,
                doctor_id TEXT NOT NULL,
                medicines TEXT NOT NULL,
                diagnosis TEXT,
                notes TEXT,
                created_at TEXT NOT NULL
            )
        ''')

        # Wellness table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS wellness (
                id TEXT PRIMARY KEY,
                patient_id TEXT NOT NULL,
                steps INTEGER,
                heart_rate INTEGER,
                systolic INTEGER,
                diastolic INTEGER,
                weight REAL,
                height REAL,
                calories_burned INTEGER,
                sleep_hours REAL,
                notes TEXT,
                recorded_at TEXT NOT NULL
            )
        ''')

        conn.commit()
    logger.info("Database ready at %s", get_settings().database_path)


@contextmanager
def get_db():
    """Database connection context manager"""
    try:
        conn = sqlite3.connect(get_settings().database_path)
    except sqlite3.OperationalError as exc:
        raise Unavailable("Storage unavailable") from exc
    conn.row_factory = sqlite3.Row  # Enable dict-like access
    try:
        yield conn
    except sqlite3.OperationalError as exc:
        logger.error("Storage error: %s", exc)
        raise Unavailable("Storage unavailable") from exc
    finally:
        conn.close()


def _public_user(row) -> dict:
    user = dict(row)
    return {field: user.get(field) for field in PUBLIC_USER_FIELDS}


# Users

def get_user_by_email(email: str):
    """Get user by email from database"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE email = ?", (email,))
        user = cursor.fetchone()
        return dict(user) if user else None


def get_user_by_email_and_role(email: str, role: str):
    """Get user by the (email, role) pair used as the login key"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE email = ? AND role = ?", (email, role))
        user = cursor.fetchone()
        return dict(user) if user else None


def get_user_by_id(user_id: str):
    """Get user by ID from database, without the password hash"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        user = cursor.fetchone()
        return _public_user(user) if user else None


def create_user(name: str, email: str, password_hash: str, role: str, **profile) -> dict:
    """Create a new user in the database and return its public fields"""
    user = {field: profile.get(field) for field in PROFILE_FIELDS}
    user.update(
        id=_new_id(),
        name=name,
        email=email,
        password_hash=password_hash,
        role=role,
        created_at=_now(),
    )
    columns = ", ".join(user)
    placeholders = ", ".join("?" for _ in user)

    with get_db() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                f"INSERT INTO users ({columns}) VALUES ({placeholders})",
                tuple(user.values()),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc):
                raise UniqueViolation(email) from exc
            raise
        conn.commit()

    return _public_user(user)


def update_user_profile(user_id: str, changes: dict):
    """Update profile attributes; identity fields are never touched"""
    changes = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    if changes:
        assignments = ", ".join(f"{field} = ?" for field in changes)
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*changes.values(), user_id),
            )
            conn.commit()
    return get_user_by_id(user_id)


def list_users_by_role(role: str):
    """List public fields of every user with the given role"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM users WHERE role = ? ORDER BY name", (role,))
        return [_public_user(row) for row in cursor.fetchall()]


# Appointments

_APPOINTMENT_SELECT = '''
    SELECT a.*, d.name AS doctor_name, p.name AS patient_name
    FROM appointments a
    LEFT JOIN users d ON d.id = a.doctor_id
    LEFT JOIN users p ON p.id = a.patient_id
'''


def create_appointment(patient_id: str, doctor_id: str, details: dict) -> dict:
    """Create a new appointment"""
    appointment_id = _new_id()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO appointments
                (id, patient_id, doctor_id, name, email, phone, department, date, message, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            appointment_id, patient_id, doctor_id,
            details["name"], details["email"], details["phone"],
            details["department"], details["date"], details.get("message"),
            _now(),
        ))
        conn.commit()
    return get_appointment(appointment_id)


def get_appointment(appointment_id: str):
    """Get a single appointment by ID"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(_APPOINTMENT_SELECT + " WHERE a.id = ?", (appointment_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def list_appointments(filters: dict):
    """List appointments matching column filters, newest first"""
    where = " AND ".join(f"a.{column} = ?" for column in filters) or "1 = 1"
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            _APPOINTMENT_SELECT + f" WHERE {where} ORDER BY a.created_at DESC",
            tuple(filters.values()),
        )
        return [dict(row) for row in cursor.fetchall()]


def delete_appointment(appointment_id: str):
    """Delete an appointment"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
        conn.commit()


# Prescriptions

_PRESCRIPTION_SELECT = '''
    SELECT r.*, d.name AS doctor_name, p.name AS patient_name
    FROM prescriptions r
    LEFT JOIN users d ON d.id = r.doctor_id
    LEFT JOIN users p ON p.id = r.patient_id
'''


def _prescription(row) -> dict:
    prescription = dict(row)
    prescription["medicines"] = json.loads(prescription["medicines"])
    return prescription


def create_prescription(patient_id: str, doctor_id: str, medicines: list,
                        diagnosis: str = None, notes: str = None) -> dict:
    """Create a new prescription"""
    prescription_id = _new_id()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO prescriptions (id, patient_id, doctor_id, medicines, diagnosis, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (prescription_id, patient_id, doctor_id, json.dumps(medicines), diagnosis, notes, _now()))
        conn.commit()

        # Return the created prescription
        cursor.execute(_PRESCRIPTION_SELECT + " WHERE r.id = ?", (prescription_id,))
        return _prescription(cursor.fetchone())


def list_prescriptions(filters: dict):
    """List prescriptions matching column filters, newest first"""
    where = " AND ".join(f"r.{column} = ?" for column in filters) or "1 = 1"
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            _PRESCRIPTION_SELECT + f" WHERE {where} ORDER BY r.created_at DESC",
            tuple(filters.values()),
        )
        return [_prescription(row) for row in cursor.fetchall()]


# Wellness

def create_wellness_record(patient_id: str, metrics: dict) -> dict:
    """Store a wellness snapshot for a patient"""
    record = {field: metrics.get(field) for field in WELLNESS_FIELDS}
    record.update(id=_new_id(), patient_id=patient_id, recorded_at=_now())
    columns = ", ".join(record)
    placeholders = ", ".join("?" for _ in record)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"INSERT INTO wellness ({columns}) VALUES ({placeholders})",
            tuple(record.values()),
        )
        conn.commit()
    return record


def list_wellness_records(patient_id: str, limit: int = None):
    """Get wellness records for a patient, newest first"""
    query = "SELECT * FROM wellness WHERE patient_id = ? ORDER BY recorded_at DESC, rowid DESC"
    params = (patient_id,)
    if limit is not None:
        query += " LIMIT ?"
        params += (limit,)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]
