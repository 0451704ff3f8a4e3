"""
Users router - user management and doctor assignment endpoints.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → UserService → UserRepository → Database
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from models.user import Role
from schemas import UserCreate, UserResponse
from services import UserService
from core.auth import verify_api_key
from core.dependencies import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
    dependencies=[Depends(verify_api_key)],
)


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    summary="Create a new user",
    description="Create an admin, doctor or user (patient) account. Usernames must be unique."
)
async def create_user(
    user: UserCreate,
    user_service: UserService = Depends(get_user_service)
):
    """
    Create a new user.

    Raises 409 Conflict if the username is taken (DuplicateUserError,
    handled by the exception handlers registered in main.py).
    """
    return user_service.create_user(
        username=user.username,
        name=user.name,
        role=user.role,
        email=user.email,
    )


@router.get(
    "",
    response_model=List[UserResponse],
    summary="List users",
    description="All users sorted by name, optionally filtered by role."
)
async def list_users(
    role: Optional[Role] = Query(None, description="Only users with this role"),
    user_service: UserService = Depends(get_user_service)
):
    return user_service.get_users(role=role)


@router.get(
    "/doctors/{doctor_id}/patients",
    response_model=List[UserResponse],
    summary="List a doctor's patients",
    description="Patients assigned to the given doctor. 404 if no doctor has this id."
)
async def list_doctor_patients(
    doctor_id: int,
    user_service: UserService = Depends(get_user_service)
):
    return user_service.get_doctor_patients(doctor_id)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user"
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service)
):
    return user_service.get_user(user_id)


@router.put(
    "/{patient_id}/doctor/{doctor_id}",
    response_model=UserResponse,
    summary="Assign a doctor to a patient",
    description="404 if either user is unknown, 400 if the roles don't fit."
)
async def assign_doctor(
    patient_id: int,
    doctor_id: int,
    user_service: UserService = Depends(get_user_service)
):
    return user_service.assign_doctor(patient_id=patient_id, doctor_id=doctor_id)
