"""
User Directory

FastAPI application entry point.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from userdir.api.deps import OptionalUser, Registry
from userdir.api.middleware.request_log import RequestLogMiddleware
from userdir.api.v1 import router as api_v1_router
from userdir.config import Settings, get_settings
from userdir.kernel.container import ServiceRegistry
from userdir.kernel.errors import (
    AuthError,
    ConflictError,
    IdentityError,
    NotFoundError,
    ValidationError,
)
from userdir.logging_config import configure_logging
from userdir.schemas.common import HealthResponse, ServiceStats, StatsResponse, UserStats

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


def status_for(exc: IdentityError) -> int:
    """Map an identity error to its HTTP status code."""
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def seed_demo_user(registry: ServiceRegistry, settings: Settings) -> None:
    """Create the demo account unless it already exists."""
    users = registry.user_service
    if await registry.user_repository.exists_by_email(settings.demo_user_email):
        return
    try:
        await users.register_user(
            email=settings.demo_user_email,
            name=settings.demo_user_name,
            password=settings.demo_user_password,
        )
    except ConflictError:
        return
    logger.info("Demo user created: %s", settings.demo_user_email)


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ServiceRegistry] = None,
) -> FastAPI:
    """
    Build the application around one service registry.

    Args:
        settings: Configuration; defaults to the environment
        registry: Prebuilt registry, e.g. with test doubles
    """
    settings = settings or get_settings()
    registry = registry or ServiceRegistry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )
        logger.info("Starting %s v%s", settings.project_name, settings.version)
        if settings.seed_demo_user:
            await seed_demo_user(registry, settings)
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title=settings.project_name,
        description="Register accounts, log in with bearer tokens, manage your own profile.",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.registry = registry
    app.state.started_at = time.monotonic()

    # Last added is outermost: CORS must wrap the request logger
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IdentityError)
    async def identity_exception_handler(request: Request, exc: IdentityError):
        """Translate identity core failures into JSON error responses."""
        status_code = status_for(exc)
        logger.info(
            "Request rejected: %s",
            exc.message,
            extra={"code": exc.code, "path": request.url.path},
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request body/parameter validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "Validation error", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions; details only leak in debug mode."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = getattr(request.state, "request_id", None)
        if settings.debug:
            content = {
                "detail": str(exc),
                "type": type(exc).__name__,
                "request_id": req_id,
            }
        else:
            content = {"detail": "Internal server error", "request_id": req_id}
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Check application health."""
        return HealthResponse(
            status="ok",
            version=settings.version,
            uptime=round(time.monotonic() - request.app.state.started_at, 3),
        )

    @app.get("/", tags=["Root"])
    async def root(user: OptionalUser):
        """API information."""
        prefix = settings.api_prefix
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "authenticated_as": user.email if user else None,
            "endpoints": {
                "users": {
                    f"POST {prefix}/users/register": "Register a user",
                    f"POST {prefix}/users/login": "Log in",
                    f"GET {prefix}/users/profile": "Get own profile (auth)",
                    f"PUT {prefix}/users/profile": "Update own profile (auth)",
                    f"PUT {prefix}/users/change-password": "Change password (auth)",
                    f"DELETE {prefix}/users/profile": "Delete own account (auth)",
                    f"GET {prefix}/users": "List users (auth)",
                    f"GET {prefix}/users/{{id}}": "Get user by ID (auth)",
                },
                "other": {
                    "GET /health": "Health check",
                    f"GET {prefix}/stats": "User and service statistics",
                },
            },
        }

    @app.get(f"{settings.api_prefix}/stats", response_model=StatsResponse, tags=["Stats"])
    async def stats(service_registry: Registry):
        """User counts and registered services."""
        user_stats = await service_registry.user_repository.stats()
        services = service_registry.list()
        return StatsResponse(
            users=UserStats(
                total_users=user_stats.total_users,
                created_today=user_stats.created_today,
            ),
            services=ServiceStats(registered=services, count=len(services)),
        )

    app.include_router(api_v1_router, prefix=settings.api_prefix)

    return app


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "userdir.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.debug,
    )
