"""
Capability interfaces for the identity core.

Each has exactly one production implementation; tests substitute fakes
through the same seam.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, List, Mapping, Optional

from userdir.kernel.models.user import FullUser, PublicUser, RepositoryStats


class PasswordHasher(ABC):
    """One-way, salted password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a plain text password. Raises ValidationError if too short."""

    @abstractmethod
    def compare(self, password: str, hashed_password: str) -> bool:
        """Check a password against a stored hash. Never raises."""

    def needs_rehash(self, hashed_password: str) -> bool:
        """Whether a stored hash should be regenerated after a successful login."""
        return False


class TokenService(ABC):
    """Signed, time-bounded bearer tokens."""

    @abstractmethod
    def issue(
        self,
        claim: Mapping[str, Any],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Sign a claim into a token."""

    @abstractmethod
    def verify(self, token: str) -> Optional[dict]:
        """Return the embedded claim, or None if the token is not acceptable."""

    @abstractmethod
    def extract_from_auth_header(self, header: Optional[str]) -> Optional[str]:
        """Pull the token out of an ``Authorization: Bearer ...`` header."""


class UserRepository(ABC):
    """Authoritative store of user records."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[PublicUser]: ...

    @abstractmethod
    async def find_all(self) -> List[PublicUser]: ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[PublicUser]: ...

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool: ...

    @abstractmethod
    async def create(self, *, email: str, name: str, password_hash: str) -> PublicUser:
        """Store a new user. Raises ConflictError if the email is taken."""

    @abstractmethod
    async def update(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[PublicUser]:
        """Apply a partial update. Returns None for an unknown id."""

    @abstractmethod
    async def delete(self, user_id: str) -> bool: ...

    @abstractmethod
    async def find_by_email_with_secret(self, email: str) -> Optional[FullUser]:
        """Privileged lookup exposing the password hash."""

    @abstractmethod
    async def update_password_hash(self, user_id: str, password_hash: str) -> bool: ...

    @abstractmethod
    async def stats(self) -> RepositoryStats: ...
