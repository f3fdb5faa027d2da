"""
API v1 routes.
"""

from fastapi import APIRouter

from userdir.api.v1 import users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
