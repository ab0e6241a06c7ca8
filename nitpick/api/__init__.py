"""
API routes for the submission review platform.
"""

from fastapi import APIRouter

from nitpick.api.submissions import router as submissions_router
from nitpick.api.engagement import router as engagement_router
from nitpick.api.users import router as users_router

# Create main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(submissions_router, prefix="/submissions", tags=["Submissions"])
api_router.include_router(engagement_router, prefix="/engagement", tags=["Engagement"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
