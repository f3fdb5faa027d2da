"""
User model for identity management.

The repository owns mutable ``User`` records; everything handed out of it is
one of two immutable views. ``PublicUser`` never carries the password hash,
``FullUser`` does and stays inside the identity core.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from userdir.kernel.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_NAME_LENGTH = 2


def generate_user_id() -> str:
    """Generate a new opaque user identifier."""
    return str(uuid.uuid4())


def normalize_email(email: str) -> str:
    """Validate an email address and return its canonical (lower-cased) form."""
    if not isinstance(email, str):
        raise ValidationError("Invalid email format")
    candidate = email.strip()
    if not EMAIL_PATTERN.match(candidate):
        raise ValidationError("Invalid email format")
    return candidate.lower()


def normalize_name(name: str) -> str:
    """Validate a display name and return it trimmed."""
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        raise ValidationError(
            f"Name must be at least {MIN_NAME_LENGTH} characters"
        )
    return name.strip()


@dataclass(frozen=True)
class PublicUser:
    """User representation safe to return to any caller."""

    id: str
    email: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class FullUser:
    """Privileged user representation including the password hash."""

    id: str
    email: str
    name: str
    created_at: datetime
    password_hash: str

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
        )


class User:
    """User account record."""

    def __init__(
        self,
        email: str,
        name: str,
        password_hash: str,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id or generate_user_id()
        self.email = normalize_email(email)
        self.name = normalize_name(name)
        self._password_hash = self._check_hash(password_hash)
        self.created_at = created_at or datetime.now(timezone.utc)

    @staticmethod
    def _check_hash(password_hash: str) -> str:
        if not password_hash:
            raise ValidationError("Password hash must not be empty")
        return password_hash

    @property
    def password_hash(self) -> str:
        return self._password_hash

    def update_email(self, email: str) -> None:
        self.email = normalize_email(email)

    def update_name(self, name: str) -> None:
        self.name = normalize_name(name)

    def update_password_hash(self, password_hash: str) -> None:
        self._password_hash = self._check_hash(password_hash)

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
        )

    def to_full(self) -> FullUser:
        return FullUser(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            password_hash=self._password_hash,
        )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


@dataclass(frozen=True)
class RepositoryStats:
    """Aggregate counts over the user repository."""

    total_users: int
    created_today: int
