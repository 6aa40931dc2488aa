from fastapi import APIRouter, Depends
from models import WellnessCreate, WellnessHistory, WellnessLatest
from auth import get_current_principal
from database import create_wellness_record, list_wellness_records
from permissions import ensure_can_read_wellness, ensure_can_write_wellness
from security import Principal

router = APIRouter(prefix="/api/wellness", tags=["Wellness"])


def _as_response(record: dict) -> dict:
    """Nest the stored blood pressure columns"""
    record = dict(record)
    record["blood_pressure"] = {
        "systolic": record.pop("systolic", None),
        "diastolic": record.pop("diastolic", None),
    }
    return record


def _record(patient_id: str, metrics: WellnessCreate) -> dict:
    values = metrics.model_dump(exclude={"blood_pressure"})
    if metrics.blood_pressure:
        values.update(metrics.blood_pressure.model_dump())
    return _as_response(create_wellness_record(patient_id, values))


def _history(patient_id: str) -> WellnessHistory:
    records = list_wellness_records(patient_id)
    return WellnessHistory(wellness_data=[_as_response(r) for r in records])


def _latest(patient_id: str) -> WellnessLatest:
    records = list_wellness_records(patient_id, limit=1)
    return WellnessLatest(wellness=_as_response(records[0]) if records else None)


@router.post("/my-wellness", status_code=201)
def record_my_wellness(
    metrics: WellnessCreate,
    principal: Principal = Depends(get_current_principal)
):
    """Record the caller's own wellness metrics (patients only)"""
    ensure_can_write_wellness(principal, principal.subject_id)
    return {"message": "Wellness data saved", "wellness": _record(principal.subject_id, metrics)}


@router.get("/my-wellness", response_model=WellnessHistory)
def my_wellness_history(principal: Principal = Depends(get_current_principal)):
    ensure_can_read_wellness(principal, principal.subject_id)
    return _history(principal.subject_id)


@router.get("/my-wellness/latest", response_model=WellnessLatest)
def my_latest_wellness(principal: Principal = Depends(get_current_principal)):
    ensure_can_read_wellness(principal, principal.subject_id)
    return _latest(principal.subject_id)


@router.post("/patient/{patient_id}", status_code=201)
def record_patient_wellness(
    patient_id: str,
    metrics: WellnessCreate,
    principal: Principal = Depends(get_current_principal)
):
    """Record wellness metrics for a patient id; only that patient may write"""
    ensure_can_write_wellness(principal, patient_id)
    return {"message": "Wellness data saved", "wellness": _record(patient_id, metrics)}


@router.get("/patient/{patient_id}", response_model=WellnessHistory)
def patient_wellness_history(
    patient_id: str,
    principal: Principal = Depends(get_current_principal)
):
    """Wellness history of a patient (providers, or the patient themselves)"""
    ensure_can_read_wellness(principal, patient_id)
    return _history(patient_id)


@router.get("/patient/{patient_id}/latest", response_model=WellnessLatest)
def patient_latest_wellness(
    patient_id: str,
    principal: Principal = Depends(get_current_principal)
):
    ensure_can_read_wellness(principal, patient_id)
    return _latest(patient_id)
