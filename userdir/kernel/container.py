"""
Service registry wiring the identity core together.

The application factory builds one registry per process and shares it by
reference; tests construct isolated registries, optionally passing fakes
for any capability.
"""

from typing import Any, Dict, List, Optional

from userdir.config import Settings, get_settings
from userdir.kernel.errors import NotFoundError
from userdir.kernel.identity.interfaces import PasswordHasher, TokenService, UserRepository
from userdir.kernel.identity.password import BcryptPasswordHasher
from userdir.kernel.identity.repository import InMemoryUserRepository
from userdir.kernel.identity.tokens import JWTTokenService
from userdir.kernel.identity.user_service import UserService

PASSWORD_HASHER = "password_hasher"
TOKEN_SERVICE = "token_service"
USER_REPOSITORY = "user_repository"
USER_SERVICE = "user_service"


class ServiceRegistry:
    """
    Name to singleton-instance registry.

    Construction order is fixed: the hasher, token service and repository
    have no dependencies and come first; the user service is built from
    those three.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        password_hasher: Optional[PasswordHasher] = None,
        token_service: Optional[TokenService] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        self.settings = settings or get_settings()
        self._services: Dict[str, Any] = {}
        self._build(
            password_hasher=password_hasher,
            token_service=token_service,
            user_repository=user_repository,
        )

    def _build(
        self,
        password_hasher: Optional[PasswordHasher] = None,
        token_service: Optional[TokenService] = None,
        user_repository: Optional[UserRepository] = None,
    ) -> None:
        settings = self.settings
        if password_hasher is None:
            password_hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
        if token_service is None:
            token_service = JWTTokenService(
                secret_key=settings.jwt_secret,
                expires_in=settings.jwt_expires_in,
            )
        if user_repository is None:
            user_repository = InMemoryUserRepository()

        self._services[PASSWORD_HASHER] = password_hasher
        self._services[TOKEN_SERVICE] = token_service
        self._services[USER_REPOSITORY] = user_repository

        self._services[USER_SERVICE] = UserService(
            self.get(USER_REPOSITORY),
            self.get(PASSWORD_HASHER),
            self.get(TOKEN_SERVICE),
        )

    def get(self, name: str) -> Any:
        """Get a registered service. Raises NotFoundError if absent."""
        try:
            return self._services[name]
        except KeyError:
            raise NotFoundError(f"Service '{name}' is not registered") from None

    def register(self, name: str, instance: Any) -> None:
        """Register a service, replacing any existing entry."""
        self._services[name] = instance

    def replace(self, name: str, instance: Any) -> None:
        """Swap an existing service. Raises NotFoundError if absent."""
        if name not in self._services:
            raise NotFoundError(f"Service '{name}' does not exist to replace")
        self._services[name] = instance

    def has(self, name: str) -> bool:
        return name in self._services

    def list(self) -> List[str]:
        return list(self._services)

    def reset(self) -> None:
        """Drop every entry and rebuild the production graph from settings."""
        self._services.clear()
        self._build()

    @property
    def password_hasher(self) -> PasswordHasher:
        return self.get(PASSWORD_HASHER)

    @property
    def token_service(self) -> TokenService:
        return self.get(TOKEN_SERVICE)

    @property
    def user_repository(self) -> UserRepository:
        return self.get(USER_REPOSITORY)

    @property
    def user_service(self) -> UserService:
        return self.get(USER_SERVICE)
