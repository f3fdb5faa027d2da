"""
Identity Core - Authentication and user management.
"""

from userdir.kernel.identity.interfaces import PasswordHasher, TokenService, UserRepository
from userdir.kernel.identity.password import BcryptPasswordHasher
from userdir.kernel.identity.tokens import JWTTokenService, parse_duration
from userdir.kernel.identity.repository import InMemoryUserRepository
from userdir.kernel.identity.user_service import AuthResult, TokenClaim, UserService

__all__ = [
    "PasswordHasher",
    "TokenService",
    "UserRepository",
    "BcryptPasswordHasher",
    "JWTTokenService",
    "parse_duration",
    "InMemoryUserRepository",
    "AuthResult",
    "TokenClaim",
    "UserService",
]
