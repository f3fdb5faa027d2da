"""
Kernel Data Models

Identity records and the public/privileged views handed out by the repository.
"""

from userdir.kernel.models.user import (
    EMAIL_PATTERN,
    FullUser,
    PublicUser,
    RepositoryStats,
    User,
    generate_user_id,
    normalize_email,
    normalize_name,
)

__all__ = [
    "EMAIL_PATTERN",
    "FullUser",
    "PublicUser",
    "RepositoryStats",
    "User",
    "generate_user_id",
    "normalize_email",
    "normalize_name",
]
