"""
Domain model for users.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from core.datetime_utils import parse_datetime


class Role(str, Enum):
    """Access role of a user account."""
    ADMIN = "admin"
    DOCTOR = "doctor"
    USER = "user"


@dataclass
class User:
    """Model representing a user account, optionally assigned to a doctor."""

    id: int
    username: str
    name: str
    role: Role
    email: Optional[str]
    created_at: datetime
    doctor_id: Optional[int] = None
    patient_notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert user to dictionary for API responses."""
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "role": self.role.value,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
            "doctor_id": self.doctor_id,
            "patient_notes": self.patient_notes,
        }

    @classmethod
    def from_row(cls, row: tuple) -> 'User':
        """
        Create a User from a database row tuple.

        Args:
            row: Tuple of (id, username, name, role, email, created_at,
                doctor_id, patient_notes) from a users/patients join.
        """
        return cls(
            id=row[0],
            username=row[1],
            name=row[2],
            role=Role(row[3]),
            email=row[4],
            created_at=parse_datetime(row[5]),
            doctor_id=row[6],
            patient_notes=row[7],
        )
