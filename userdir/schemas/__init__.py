"""
Pydantic schemas for API request/response validation.
"""

from userdir.schemas.users import (
    AuthResponse,
    ChangePasswordRequest,
    UserCreate,
    UserEnvelope,
    UserListResponse,
    UserLogin,
    UserProfileUpdate,
    UserResponse,
)
from userdir.schemas.common import (
    ErrorResponse,
    HealthResponse,
    ServiceStats,
    StatsResponse,
    SuccessResponse,
    UserStats,
)

__all__ = [
    # Users
    "AuthResponse",
    "ChangePasswordRequest",
    "UserCreate",
    "UserEnvelope",
    "UserListResponse",
    "UserLogin",
    "UserProfileUpdate",
    "UserResponse",
    # Common
    "ErrorResponse",
    "HealthResponse",
    "ServiceStats",
    "StatsResponse",
    "SuccessResponse",
    "UserStats",
]
