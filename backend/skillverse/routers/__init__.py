"""
API routers for Skillverse.

This module contains all API endpoint routers:
- auth: Authentication endpoints (register, login, me)
- enrollments: Enrolling with points and lesson progress
- points: Balance and transaction history
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .enrollments import router as enrollments_router
from .points import router as points_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    enrollments_router,
    prefix="/enrollments",
    tags=["enrollments"]
)

api_router.include_router(
    points_router,
    prefix="/points",
    tags=["points"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "enrollments_router",
    "points_router"
]
