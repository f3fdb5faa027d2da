"""
User service orchestrating registration, authentication and profile changes.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Mapping, Optional

from pydantic import BaseModel

from userdir.kernel.errors import AuthError, ConflictError, NotFoundError, ValidationError
from userdir.kernel.identity.interfaces import PasswordHasher, TokenService, UserRepository
from userdir.kernel.identity.password import MIN_PASSWORD_LENGTH
from userdir.kernel.models.user import PublicUser, normalize_email, normalize_name

INVALID_CREDENTIALS = "Invalid credentials"


class TokenClaim(BaseModel):
    """Identity claim embedded in issued tokens."""

    user_id: str
    email: str


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful registration or login."""

    user: PublicUser
    token: str


def _require_id(user_id: str) -> None:
    if not user_id:
        raise ValidationError("User ID is required")


def _validate_password(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


class UserService:
    """
    Service for user identity operations.

    Each call is independent. Hashing and comparison are CPU-bound and run
    in a worker thread so the event loop keeps serving other requests.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ):
        self.user_repository = user_repository
        self.password_hasher = password_hasher
        self.token_service = token_service

    async def register_user(self, email: str, name: str, password: str) -> AuthResult:
        """
        Register a new user and issue a token.

        Args:
            email: User's email address
            name: Display name
            password: Plain text password

        Returns:
            The public user and a fresh token

        Raises:
            ValidationError: Invalid email, name or password (checked in that order)
            ConflictError: If the email is already registered
        """
        normalize_email(email)
        normalize_name(name)
        _validate_password(password)

        if await self.user_repository.find_by_email(email):
            raise ConflictError("A user with this email already exists")

        password_hash = await asyncio.to_thread(self.password_hasher.hash, password)
        user = await self.user_repository.create(
            email=email,
            name=name,
            password_hash=password_hash,
        )
        return AuthResult(user=user, token=self._issue_token(user))

    async def authenticate_user(self, email: str, password: str) -> AuthResult:
        """
        Authenticate a user by email and password.

        Unknown email and wrong password raise the same AuthError so callers
        cannot probe which accounts exist. A hash made with an outdated work factor is replaced on success.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.user_repository.find_by_email_with_secret(email)
        if user is None:
            raise AuthError(INVALID_CREDENTIALS)

        matches = await asyncio.to_thread(
            self.password_hasher.compare, password, user.password_hash
        )
        if not matches:
            raise AuthError(INVALID_CREDENTIALS)

        if self.password_hasher.needs_rehash(user.password_hash):
            upgraded = await asyncio.to_thread(self.password_hasher.hash, password)
            await self.user_repository.update_password_hash(user.id, upgraded)

        public_user = user.to_public()
        return AuthResult(user=public_user, token=self._issue_token(public_user))

    async def get_user_by_id(self, user_id: str) -> Optional[PublicUser]:
        """Get a user by ID."""
        _require_id(user_id)
        return await self.user_repository.find_by_id(user_id)

    async def get_all_users(self) -> List[PublicUser]:
        return await self.user_repository.find_all()

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[PublicUser]:
        """
        Update user profile.

        Returns:
            Updated user or None if not found
        """
        _require_id(user_id)
        if email is not None:
            normalize_email(email)
        if name is not None:
            normalize_name(name)
        return await self.user_repository.update(user_id, name=name, email=email)

    async def delete_user(self, user_id: str) -> bool:
        _require_id(user_id)
        return await self.user_repository.delete(user_id)

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> bool:
        """
        Change a user's password.

        The stored hash is always re-read through the privileged lookup;
        nothing the caller supplies is trusted as a hash.

        Raises:
            ValidationError: If either password is missing, or the new one is
                too short
            NotFoundError: If the user does not exist
            AuthError: If the current password is wrong
        """
        _require_id(user_id)
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")

        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        full_user = await self.user_repository.find_by_email_with_secret(user.email)
        if full_user is None:
            raise NotFoundError("User not found")

        matches = await asyncio.to_thread(
            self.password_hasher.compare, current_password, full_user.password_hash
        )
        if not matches:
            raise AuthError("Current password is incorrect")

        _validate_password(new_password)
        new_hash = await asyncio.to_thread(self.password_hasher.hash, new_password)
        return await self.user_repository.update_password_hash(user_id, new_hash)

    def verify_token(self, token: str) -> Optional[TokenClaim]:
        """Decode a token into its identity claim, or None. Never raises."""
        claim = self.token_service.verify(token)
        if not isinstance(claim, Mapping):
            return None
        user_id = claim.get("user_id")
        email = claim.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            return None
        if not user_id or not email:
            return None
        return TokenClaim(user_id=user_id, email=email)

    def _issue_token(self, user: PublicUser) -> str:
        claim = TokenClaim(user_id=user.id, email=user.email)
        return self.token_service.issue(claim.model_dump())
