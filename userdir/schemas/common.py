"""
Common schema types used across the API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: Optional[str] = None
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    uptime: float


class UserStats(BaseModel):
    total_users: int
    created_today: int


class ServiceStats(BaseModel):
    registered: List[str]
    count: int


class StatsResponse(BaseModel):
    """Repository and registry statistics."""

    users: UserStats
    services: ServiceStats
