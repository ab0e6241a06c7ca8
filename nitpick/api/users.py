"""
User API routes.
"""

from fastapi import APIRouter, Depends

from nitpick.auth.jwt_handler import get_current_user
from nitpick.models.user import User
from nitpick.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return current_user
