"""
Pytest fixtures for user directory tests.
"""

from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from userdir.config import Settings
from userdir.kernel.container import ServiceRegistry
from userdir.kernel.errors import ValidationError
from userdir.kernel.identity.interfaces import PasswordHasher
from userdir.kernel.identity.password import BcryptPasswordHasher
from userdir.kernel.identity.repository import InMemoryUserRepository
from userdir.kernel.identity.tokens import JWTTokenService
from userdir.kernel.identity.user_service import UserService
from userdir.main import create_app

TEST_SECRET = "test-secret-key-for-testing-only"


class FakePasswordHasher(PasswordHasher):
    """Deterministic hasher that records every call."""

    def __init__(self) -> None:
        self.hashed: List[str] = []
        self.compared: List[str] = []

    def hash(self, password: str) -> str:
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")
        self.hashed.append(password)
        return f"fake${password[::-1]}"

    def compare(self, password: str, hashed_password: str) -> bool:
        self.compared.append(password)
        if not password or not hashed_password:
            return False
        return hashed_password == f"fake${password[::-1]}"


@pytest.fixture
def settings() -> Settings:
    """Settings with a cheap work factor and no demo account."""
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        jwt_expires_in="1h",
        bcrypt_rounds=4,
        seed_demo_user=False,
        environment="development",
    )


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def fake_hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


@pytest.fixture
def token_service() -> JWTTokenService:
    return JWTTokenService(secret_key=TEST_SECRET, expires_in="1h")


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def user_service(
    repository: InMemoryUserRepository,
    password_hasher: BcryptPasswordHasher,
    token_service: JWTTokenService,
) -> UserService:
    """User service backed by real bcrypt (4 rounds) and JWT."""
    return UserService(repository, password_hasher, token_service)


@pytest.fixture
def registry(settings: Settings) -> ServiceRegistry:
    return ServiceRegistry(settings)


@pytest.fixture
def app(settings: Settings, registry: ServiceRegistry) -> FastAPI:
    return create_app(settings=settings, registry=registry)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """In-process HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def ann() -> dict:
    """Registration payload used across tests."""
    return {"email": "a@b.com", "name": "Ann", "password": "secret1"}


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient, ann: dict) -> dict:
    """Register Ann through the API and return her bearer header."""
    response = await client.post("/api/users/register", json=ann)
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
