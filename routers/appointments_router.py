from typing import List

from fastapi import APIRouter, Depends
from models import Appointment, AppointmentCreate
from auth import get_current_principal
from database import create_appointment, delete_appointment, get_appointment, list_appointments
from errors import NotFound, ValidationError
from permissions import appointment_filter, ensure_can_access_appointment
from security import Principal

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])

REQUIRED_FIELDS = ("name", "email", "phone", "department", "date", "doctor_id")


def _load_appointment(appointment_id: str, principal: Principal) -> dict:
    appointment = get_appointment(appointment_id)
    if not appointment:
        raise NotFound("Appointment not found")
    ensure_can_access_appointment(principal, appointment)
    return appointment


@router.post("", response_model=Appointment, status_code=201)
def book_appointment(
    request: AppointmentCreate,
    principal: Principal = Depends(get_current_principal)
):
    """Book an appointment with any doctor"""
    details = request.model_dump()
    missing = [field for field in REQUIRED_FIELDS if not details.get(field)]
    if missing:
        raise ValidationError(f"All fields are required (missing: {', '.join(missing)})")

    return create_appointment(principal.subject_id, details.pop("doctor_id"), details)


@router.get("", response_model=List[Appointment])
def get_appointments(principal: Principal = Depends(get_current_principal)):
    """Providers see their assigned appointments, patients the ones they booked"""
    return list_appointments(appointment_filter(principal))


@router.get("/{appointment_id}", response_model=Appointment)
def get_single_appointment(
    appointment_id: str,
    principal: Principal = Depends(get_current_principal)
):
    return _load_appointment(appointment_id, principal)


@router.delete("/{appointment_id}")
def cancel_appointment(
    appointment_id: str,
    principal: Principal = Depends(get_current_principal)
):
    """Cancel an appointment"""
    _load_appointment(appointment_id, principal)
    delete_appointment(appointment_id)
    return {"message": "Appointment cancelled"}
