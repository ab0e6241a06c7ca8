"""
Engagement API routes: trending submissions for reviewers.
"""

from datetime import timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nitpick.auth.jwt_handler import get_current_user
from nitpick.config import get_settings
from nitpick.database import get_db
from nitpick.models.user import User
from nitpick.queries.engagement import trending
from nitpick.schemas.submission import TrendingResponse, TrendingEntryResponse

router = APIRouter()

settings = get_settings()


@router.get("/trending", response_model=TrendingResponse)
async def get_trending(
    hours: Optional[int] = Query(None, ge=1, le=24 * 90),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Most active submissions on problems the current user reviews.

    Activity is likes plus comments within the last ``hours``.
    """
    timeframe_hours = hours or settings.trending_timeframe_hours
    entries = trending(db, current_user, timedelta(hours=timeframe_hours))
    return TrendingResponse(
        timeframe_hours=timeframe_hours,
        entries=[TrendingEntryResponse.model_validate(entry) for entry in entries],
    )
