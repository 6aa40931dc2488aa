"""Resource authorization rules.

Every role and ownership decision made by the routers lives here. Rules
assume the caller is already authenticated and check the role first, then
ownership. A failed rule raises ``Forbidden``.
"""

from errors import Forbidden
from security import Principal


def require_provider(principal: Principal, action: str = "perform this action"):
    """Only providers may continue"""
    if not principal.is_provider:
        raise Forbidden(f"Access denied. Only providers may {action}.")


# Appointments

def appointment_filter(principal: Principal) -> dict:
    """Column filter restricting appointment listings to the caller's own"""
    if principal.is_provider:
        return {"doctor_id": principal.subject_id}
    return {"patient_id": principal.subject_id}


def can_access_appointment(principal: Principal, appointment: dict) -> bool:
    column, owner_id = next(iter(appointment_filter(principal).items()))
    return appointment[column] == owner_id


def ensure_can_access_appointment(principal: Principal, appointment: dict):
    """View and cancel are limited to the booking patient and the assigned doctor"""
    if not can_access_appointment(principal, appointment):
        raise Forbidden("You do not have access to this appointment")


# Prescriptions

def prescription_filter(principal: Principal) -> dict:
    """Providers see every prescription, patients only their own"""
    if principal.is_provider:
        return {}
    return {"patient_id": principal.subject_id}


def prescribing_doctor(principal: Principal) -> str:
    """Doctor id recorded on a new prescription"""
    require_provider(principal, "create prescriptions")
    return principal.subject_id


# Patient roster and wellness

def ensure_can_list_patients(principal: Principal):
    require_provider(principal, "view the patient roster")


def ensure_can_read_wellness(principal: Principal, patient_id: str):
    """Providers read anyone's wellness data, patients only their own"""
    if principal.is_provider:
        return
    if principal.subject_id != patient_id:
        raise Forbidden("Access denied. Only providers may view other patients' wellness data.")


def ensure_can_write_wellness(principal: Principal, patient_id: str):
    """Only the patient may record their own wellness data"""
    if not principal.is_patient:
        raise Forbidden("Access denied. Only patients may record wellness data.")
    if principal.subject_id != patient_id:
        raise Forbidden("Patients may only record their own wellness data")
