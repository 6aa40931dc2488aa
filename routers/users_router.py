from typing import List

from fastapi import APIRouter, Depends
from models import DoctorSummary, ProfileUpdate, UserPublic, UserResponse
from auth import get_current_principal
from config import PATIENT, PROVIDER
from database import get_user_by_id, list_users_by_role, update_user_profile
from errors import NotFound, ValidationError
from permissions import ensure_can_list_patients
from security import Principal

router = APIRouter(prefix="/api", tags=["User Management"])


@router.get("/doctors", response_model=List[DoctorSummary])
def list_doctors():
    """Public provider directory for booking"""
    return list_users_by_role(PROVIDER)


@router.get("/users/profile", response_model=UserResponse)
def get_profile(principal: Principal = Depends(get_current_principal)):
    """Get current user profile"""
    user = get_user_by_id(principal.subject_id)
    if not user:
        raise NotFound("User not found")
    return UserResponse(user=user)


@router.put("/users/profile", response_model=UserResponse)
def update_profile(
    changes: ProfileUpdate,
    principal: Principal = Depends(get_current_principal)
):
    """Update profile attributes (email and role cannot change)"""
    if not get_user_by_id(principal.subject_id):
        raise NotFound("User not found")

    updates = changes.model_dump(exclude_unset=True)
    if "name" in updates and not updates["name"]:
        raise ValidationError("Name cannot be empty")

    user = update_user_profile(principal.subject_id, updates)
    return UserResponse(user=user)


@router.get("/users/patients", response_model=List[UserPublic])
def list_patients(principal: Principal = Depends(get_current_principal)):
    """Patient roster (providers only)"""
    ensure_can_list_patients(principal)
    return list_users_by_role(PATIENT)
