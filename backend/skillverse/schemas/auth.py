"""
Authentication schemas for Skillverse.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from skillverse.models.user import UserRole


class UserRegister(BaseModel):
    """Schema for user registration."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.LEARNER

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "learner@example.com",
                "password": "secret123",
                "full_name": "Ada Learner",
                "role": "learner",
            }
        }
    )


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Schema for user data returned by the API, including the points balance."""
    id: int
    email: str
    full_name: str
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    role: str
    is_active: bool
    points: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
