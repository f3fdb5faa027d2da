"""
User account endpoints.

Identity errors raised by the service propagate to the application's
exception handler, which maps them to status codes.
"""

import logging

from fastapi import APIRouter, status

from userdir.api.deps import CurrentUser, Users
from userdir.kernel.errors import NotFoundError, ValidationError
from userdir.schemas.common import SuccessResponse
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

router = APIRouter()
logger = logging.getLogger(__name__)


def _user_not_found() -> NotFoundError:
    return NotFoundError("User not found")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, users: Users):
    """
    Register a new user account.

    Returns the public profile and an access token.
    """
    result = await users.register_user(
        email=data.email,
        name=data.name,
        password=data.password,
    )
    logger.info("User registered", extra={"user_id": result.user.id})
    return AuthResponse(user=UserResponse.model_validate(result.user), token=result.token)


@router.post("/login", response_model=AuthResponse)
async def login(data: UserLogin, users: Users):
    """Authenticate and return a fresh access token."""
    result = await users.authenticate_user(email=data.email, password=data.password)
    return AuthResponse(user=UserResponse.model_validate(result.user), token=result.token)


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(current: CurrentUser, users: Users):
    """Get the authenticated user's profile."""
    user = await users.get_user_by_id(current.user_id)
    if user is None:
        raise _user_not_found()
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(data: UserProfileUpdate, current: CurrentUser, users: Users):
    """Update name and/or email of the authenticated user."""
    user = await users.update_user(current.user_id, name=data.name, email=data.email)
    if user is None:
        raise _user_not_found()
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/change-password", response_model=SuccessResponse)
async def change_password(data: ChangePasswordRequest, current: CurrentUser, users: Users):
    """Change the authenticated user's password."""
    changed = await users.change_password(
        current.user_id,
        data.current_password,
        data.new_password,
    )
    if not changed:
        raise ValidationError("Password could not be changed")
    logger.info("Password changed", extra={"user_id": current.user_id})
    return SuccessResponse(message="Password changed successfully")


@router.delete("/profile", response_model=SuccessResponse)
async def delete_profile(current: CurrentUser, users: Users):
    """Delete the authenticated user's account."""
    if not await users.delete_user(current.user_id):
        raise _user_not_found()
    logger.info("User deleted", extra={"user_id": current.user_id})
    return SuccessResponse(message="User deleted successfully")


@router.get("", response_model=UserListResponse)
async def list_users(current: CurrentUser, users: Users):
    """List every user."""
    items = await users.get_all_users()
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in items],
        count=len(items),
    )


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, current: CurrentUser, users: Users):
    """Get a user by ID."""
    user = await users.get_user_by_id(user_id)
    if user is None:
        raise _user_not_found()
    return UserEnvelope(user=UserResponse.model_validate(user))
