"""
Pydantic schemas for user-related API operations.
"""
from typing import Optional

from pydantic import BaseModel, Field

from models.user import Role


class UserCreate(BaseModel):
    """Schema for creating a new user.

    Usernames must be unique. Accounts with the 'user' role are patients and
    can later be assigned to a doctor.
    """
    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Login name (must be unique)",
    )
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    role: Role = Field(Role.USER, description="Account role: admin, doctor or user")
    email: Optional[str] = Field(None, max_length=254, description="Contact email")

    class Config:
        json_schema_extra = {
            "example": {
                "username": "mrossi",
                "name": "Mario Rossi",
                "role": "user",
                "email": "mario.rossi@example.com"
            }
        }


class UserResponse(BaseModel):
    """Schema for user response, including the doctor assignment for patients."""
    id: int = Field(..., description="Unique user identifier")
    username: str
    name: str
    role: Role
    email: Optional[str] = None
    created_at: str = Field(..., description="ISO 8601 UTC timestamp of account creation")
    doctor_id: Optional[int] = Field(None, description="Assigned doctor (patients only)")
    patient_notes: Optional[str] = None

    class Config:
        from_attributes = True
