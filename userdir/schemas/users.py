"""
User and authentication schemas.

Field rules (email shape, name length, password length) are enforced by the
identity kernel so the HTTP API and the core report the same errors.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    """User registration request."""

    email: str
    name: str
    password: str


class UserLogin(BaseModel):
    """User login request."""

    email: str
    password: str


class UserProfileUpdate(BaseModel):
    """User profile update request. Omitted fields are left unchanged."""

    name: Optional[str] = None
    email: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Password change request."""

    current_password: str
    new_password: str


class UserResponse(BaseModel):
    """Public user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime


class UserEnvelope(BaseModel):
    """Single user wrapper."""

    user: UserResponse


class UserListResponse(BaseModel):
    """All users with a count."""

    users: List[UserResponse]
    count: int


class AuthResponse(BaseModel):
    """Registration/login response."""

    user: UserResponse
    token: str
    token_type: str = "bearer"
