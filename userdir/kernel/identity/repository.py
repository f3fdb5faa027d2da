"""
In-memory user repository.

Records live in a dict keyed by id and are lost when the process exits.
Every check-then-mutate sequence runs under one lock with no awaits inside
it, so email uniqueness holds even when handlers run on worker threads.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from userdir.kernel.errors import ConflictError
from userdir.kernel.identity.interfaces import UserRepository
from userdir.kernel.models.user import (
    FullUser,
    PublicUser,
    RepositoryStats,
    User,
    normalize_email,
    normalize_name,
)

DUPLICATE_EMAIL_MESSAGE = "A user with this email already exists"


def _lookup_key(email: str) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


class InMemoryUserRepository(UserRepository):
    """Memory-resident, non-durable user store."""

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def _find_record_by_email(self, email: str) -> Optional[User]:
        key = _lookup_key(email)
        if not key:
            return None
        for user in self._users.values():
            if user.email == key:
                return user
        return None

    async def find_by_id(self, user_id: str) -> Optional[PublicUser]:
        with self._lock:
            user = self._users.get(user_id)
            return user.to_public() if user else None

    async def find_all(self) -> List[PublicUser]:
        with self._lock:
            return [user.to_public() for user in self._users.values()]

    async def find_by_email(self, email: str) -> Optional[PublicUser]:
        with self._lock:
            user = self._find_record_by_email(email)
            return user.to_public() if user else None

    async def exists_by_email(self, email: str) -> bool:
        with self._lock:
            return self._find_record_by_email(email) is not None

    async def create(self, *, email: str, name: str, password_hash: str) -> PublicUser:
        """
        Store a new user.

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If the normalized email is already registered
        """
        user = User(email=email, name=name, password_hash=password_hash)
        with self._lock:
            if self._find_record_by_email(user.email) is not None:
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
            self._users[user.id] = user
            return user.to_public()

    async def update(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[PublicUser]:
        """
        Apply a partial update to an existing user.

        Both fields are validated before either is written, so a failed
        update leaves the record untouched.

        Returns:
            Updated user or None if not found
        """
        new_email = normalize_email(email) if email is not None else None
        new_name = normalize_name(name) if name is not None else None

        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            if new_email is not None and new_email != user.email:
                existing = self._find_record_by_email(new_email)
                if existing is not None and existing.id != user.id:
                    raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
                user.update_email(new_email)

            if new_name is not None:
                user.update_name(new_name)

            return user.to_public()

    async def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    async def find_by_email_with_secret(self, email: str) -> Optional[FullUser]:
        """Privileged lookup used by authentication and password changes."""
        with self._lock:
            user = self._find_record_by_email(email)
            return user.to_full() if user else None

    async def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            user.update_password_hash(password_hash)
            return True

    async def stats(self) -> RepositoryStats:
        """Count all users and those created since local midnight."""
        midnight = datetime.now().astimezone().replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        with self._lock:
            created_today = sum(
                1 for user in self._users.values() if user.created_at >= midnight
            )
            return RepositoryStats(
                total_users=len(self._users),
                created_today=created_today,
            )
