"""
Service layer for user operations.

This service contains business logic for user management and doctor
assignment, and orchestrates calls to the user repository.

Architecture:
    API Layer (routers) → UserService → UserRepository → Database

Dependency Injection:
    UserService receives its repository via constructor injection.
    Use core.dependencies.get_user_service() in routers with Depends().
"""
import logging
from typing import List, Optional

from repositories import UserRepository
from models.user import User, Role
from schemas import UserResponse
from core.datetime_utils import format_iso
from core.exceptions import UserNotFoundError, DuplicateUserError, InvalidRoleError

logger = logging.getLogger(__name__)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
        email=user.email,
        created_at=format_iso(user.created_at),
        doctor_id=user.doctor_id,
        patient_notes=user.patient_notes,
    )


class UserService:
    """
    Service layer for user operations.

    Handles user creation, lookups and doctor/patient assignment, including
    the role checks those operations require.
    """

    def __init__(self, user_repository: UserRepository):
        """
        Initialize the user service.

        Args:
            user_repository: UserRepository instance for data access.
                             Injected via core.dependencies.get_user_service().
        """
        self._repo = user_repository

    def create_user(
        self,
        username: str,
        name: str,
        role: Role = Role.USER,
        email: Optional[str] = None,
    ) -> UserResponse:
        """
        Create a new user.

        Raises:
            DuplicateUserError: If the username is already taken.
        """
        logger.info(f"Creating user: {username} (role={role.value})")

        # Repository returns None if the username already exists (UNIQUE constraint)
        user = self._repo.add(username=username, name=name, role=role, email=email)
        if user is None:
            logger.warning(f"User already exists: {username}")
            raise DuplicateUserError(username=username)

        logger.info(f"User created successfully: {username} (id={user.id})")
        return to_user_response(user)

    def get_users(self, role: Optional[Role] = None) -> List[UserResponse]:
        return [to_user_response(u) for u in self._repo.get_all(role=role)]

    def get_user(self, user_id: int) -> UserResponse:
        """
        Raises:
            UserNotFoundError: If no user with this id exists.
        """
        return to_user_response(self._get_or_raise(user_id))

    def get_doctor_patients(self, doctor_id: int) -> List[UserResponse]:
        """
        Patients assigned to a doctor.

        Raises:
            UserNotFoundError: If no doctor with this id exists.
        """
        doctor = self._repo.get_by_id(doctor_id)
        if doctor is None or doctor.role is not Role.DOCTOR:
            raise UserNotFoundError(user_id=doctor_id, expected_role=Role.DOCTOR.value)
        return [to_user_response(u) for u in self._repo.get_patients_for_doctor(doctor_id)]

    def assign_doctor(self, patient_id: int, doctor_id: int) -> UserResponse:
        """
        Assign a doctor to a patient.

        Raises:
            UserNotFoundError: If either user does not exist.
            InvalidRoleError: If the patient is not a 'user' account or the
                doctor is not a 'doctor' account.
        """
        patient = self._get_or_raise(patient_id)
        doctor = self._get_or_raise(doctor_id)

        if patient.role is not Role.USER:
            raise InvalidRoleError(
                detail=f"User {patient_id} is not a patient",
                user_id=patient_id,
                role=patient.role.value,
            )
        if doctor.role is not Role.DOCTOR:
            raise InvalidRoleError(
                detail=f"User {doctor_id} is not a doctor",
                user_id=doctor_id,
                role=doctor.role.value,
            )

        updated = self._repo.assign_doctor(patient_id=patient_id, doctor_id=doctor_id)
        if updated is None:
            raise UserNotFoundError(user_id=patient_id)
        return to_user_response(updated)

    def _get_or_raise(self, user_id: int) -> User:
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user
