import logging
from typing import List

from fastapi import APIRouter, Depends
from models import Prescription, PrescriptionCreate
from auth import get_current_principal
from database import create_prescription, list_prescriptions
from errors import ValidationError
from permissions import prescribing_doctor, prescription_filter
from security import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prescriptions", tags=["Prescriptions"])


@router.post("", response_model=Prescription, status_code=201)
def prescribe_medication(
    prescription: PrescriptionCreate,
    principal: Principal = Depends(get_current_principal)
):
    """Prescribe medication (providers only)"""
    doctor_id = prescribing_doctor(principal)
    if not prescription.patient_id:
        raise ValidationError("patient_id is required")

    new_prescription = create_prescription(
        prescription.patient_id,
        doctor_id,
        [medicine.model_dump() for medicine in prescription.medicines],
        prescription.diagnosis,
        prescription.notes,
    )
    logger.info("Provider %s issued prescription %s", doctor_id, new_prescription["id"])
    return new_prescription


@router.get("", response_model=List[Prescription])
def get_prescriptions(principal: Principal = Depends(get_current_principal)):
    """Providers see all prescriptions, patients their own"""
    return list_prescriptions(prescription_filter(principal))
