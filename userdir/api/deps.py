"""
FastAPI dependencies for the service registry and authentication.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from userdir.kernel.container import ServiceRegistry
from userdir.kernel.errors import AuthError
from userdir.kernel.identity.user_service import TokenClaim, UserService

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> ServiceRegistry:
    """Registry built by the application factory."""
    return request.app.state.registry


Registry = Annotated[ServiceRegistry, Depends(get_registry)]


def get_user_service(registry: Registry) -> UserService:
    return registry.user_service


Users = Annotated[UserService, Depends(get_user_service)]


async def get_current_user(request: Request, registry: Registry) -> TokenClaim:
    """Get the caller's identity claim or raise AuthError (401)."""
    token = registry.token_service.extract_from_auth_header(
        request.headers.get("Authorization")
    )
    if not token:
        raise AuthError("Access token required")

    claim = registry.user_service.verify_token(token)
    if claim is None:
        logger.debug("Rejected invalid or expired token", extra={"path": request.url.path})
        raise AuthError("Invalid or expired token")

    # The account may have been deleted after the token was issued
    user = await registry.user_service.get_user_by_id(claim.user_id)
    if user is None:
        raise AuthError("User not found")

    return claim


async def get_current_user_optional(
    request: Request,
    registry: Registry,
) -> Optional[TokenClaim]:
    """Get the caller's identity claim if one is presented and valid, None otherwise."""
    token = registry.token_service.extract_from_auth_header(
        request.headers.get("Authorization")
    )
    claim = registry.user_service.verify_token(token) if token else None
    if claim is None:
        return None
    if await registry.user_service.get_user_by_id(claim.user_id) is None:
        return None
    return claim


CurrentUser = Annotated[TokenClaim, Depends(get_current_user)]
OptionalUser = Annotated[Optional[TokenClaim], Depends(get_current_user_optional)]
