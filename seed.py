"""Idempotent provisioning of known identities.

Providers are reconciled on every application start before traffic is
accepted. Sample patients are only created when this module is run directly:

    python seed.py
"""

import logging

from config import PATIENT, PROVIDER
from database import UniqueViolation, create_user, get_user_by_email, init_database
from security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = [
    {"name": "Dr Rishi Cheekatla", "email": "rishi@healthcare.com", "password": "rishi123"},
    {"name": "Dr HemaSri", "email": "hemasri@healthcare.com", "password": "hema123"},
    {"name": "Dr Purvi", "email": "purvi@healthcare.com", "password": "purvi123"},
    {"name": "Dr Akshaya", "email": "akshaya@healthcare.com", "password": "akshaya123"},
]

SAMPLE_PATIENTS = [
    {"name": "John Smith", "email": "john.smith@email.com", "blood_type": "O+", "disease": "Hypertension", "age": 45},
    {"name": "Sarah Johnson", "email": "sarah.j@email.com", "blood_type": "A+", "disease": "Diabetes Type 2", "age": 52},
    {"name": "Michael Brown", "email": "michael.b@email.com", "blood_type": "B+", "disease": "Asthma", "age": 38},
    {"name": "Emily Davis", "email": "emily.d@email.com", "blood_type": "AB+", "disease": "None", "age": 29},
    {"name": "David Wilson", "email": "david.w@email.com", "blood_type": "O-", "disease": "Arthritis", "age": 61},
    {"name": "Jessica Martinez", "email": "jessica.m@email.com", "blood_type": "A-", "disease": "Migraine", "age": 34},
    {"name": "Robert Taylor", "email": "robert.t@email.com", "blood_type": "B-", "disease": "High Cholesterol", "age": 48},
    {"name": "Lisa Anderson", "email": "lisa.a@email.com", "blood_type": "AB-", "disease": "None", "age": 27},
    {"name": "James Thomas", "email": "james.t@email.com", "blood_type": "O+", "disease": "Thyroid", "age": 55},
    {"name": "Maria Garcia", "email": "maria.g@email.com", "blood_type": "A+", "disease": "Anemia", "age": 42},
]
SAMPLE_PATIENT_PASSWORD = "patient123"


def upsert_identities(identities, role: str) -> int:
    """Create any identity whose email is not yet stored; return how many were created"""
    created = 0
    for identity in identities:
        identity = dict(identity)
        if get_user_by_email(identity["email"]):
            continue
        password = identity.pop("password")
        try:
            create_user(password_hash=hash_password(password), role=role, **identity)
        except UniqueViolation:
            # Another process provisioned it first
            continue
        created += 1
    return created


def seed_providers() -> int:
    created = upsert_identities(DEFAULT_PROVIDERS, PROVIDER)
    logger.info("Providers seeded (%d new)", created)
    return created


def seed_patients() -> int:
    patients = [dict(p, password=SAMPLE_PATIENT_PASSWORD) for p in SAMPLE_PATIENTS]
    created = upsert_identities(patients, PATIENT)
    logger.info("Sample patients seeded (%d new, %d total)", created, len(patients))
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
    seed_providers()
    seed_patients()
