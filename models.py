from pydantic import BaseModel
from typing import List, Optional


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    age: Optional[int] = None
    blood_type: Optional[str] = None
    disease: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    role: str
    age: Optional[int] = None
    blood_type: Optional[str] = None
    disease: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserPublic


class UserResponse(BaseModel):
    user: UserPublic


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None
    blood_type: Optional[str] = None
    disease: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None


class DoctorSummary(BaseModel):
    id: str
    name: str
    email: str


class AppointmentCreate(BaseModel):
    doctor_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    date: Optional[str] = None
    message: Optional[str] = None


class Appointment(BaseModel):
    id: str
    patient_id: str
    patient_name: Optional[str] = None
    doctor_id: str
    doctor_name: Optional[str] = None
    name: str
    email: str
    phone: str
    department: str
    date: str
    message: Optional[str] = None
    created_at: str


class Medicine(BaseModel):
    name: str
    tablets: Optional[int] = None
    frequency_per_day: Optional[int] = None
    duration_days: Optional[int] = None


class PrescriptionCreate(BaseModel):
    # Any doctor id in the body is ignored; the caller is always the doctor
    patient_id: Optional[str] = None
    medicines: List[Medicine] = []
    diagnosis: Optional[str] = None
    notes: Optional[str] = None


class Prescription(BaseModel):
    id: str
    patient_id: str
    patient_name: Optional[str] = None
    doctor_id: str
    doctor_name: Optional[str] = None
    medicines: List[Medicine]
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    created_at: str


class BloodPressure(BaseModel):
    systolic: Optional[int] = None
    diastolic: Optional[int] = None


class WellnessCreate(BaseModel):
    steps: Optional[int] = None
    heart_rate: Optional[int] = None
    blood_pressure: Optional[BloodPressure] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    calories_burned: Optional[int] = None
    sleep_hours: Optional[float] = None
    notes: Optional[str] = None


class WellnessRecord(BaseModel):
    id: str
    patient_id: str
    steps: Optional[int] = None
    heart_rate: Optional[int] = None
    blood_pressure: BloodPressure
    weight: Optional[float] = None
    height: Optional[float] = None
    calories_burned: Optional[int] = None
    sleep_hours: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: str


class WellnessHistory(BaseModel):
    wellness_data: List[WellnessRecord]


class WellnessLatest(BaseModel):
    wellness: Optional[WellnessRecord] = None
