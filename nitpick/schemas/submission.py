"""
Submission-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class SubmissionCreate(BaseModel):
    """Schema for starting a submission on a problem."""
    language: str = Field(..., min_length=1, max_length=50)
    slug: str = Field(..., min_length=1, max_length=255)
    solution: Optional[Dict[str, Any]] = None


class SubmissionResponse(BaseModel):
    """Schema for basic submission response."""
    id: int
    key: str
    user_id: int
    language: str
    slug: str
    name: str
    state: str
    version: int
    nit_count: int
    is_liked: bool
    done_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionDetailResponse(SubmissionResponse):
    """Schema for detailed submission response."""
    solution: Optional[Dict[str, Any]]
    view_count: int
    prior_version_key: Optional[str] = None
    is_muted: bool = False
    discussion_involves_user: bool = False


class ViewResponse(BaseModel):
    """Outcome of marking a submission viewed."""
    recorded: bool
    error: Optional[str] = None


class TrendingEntryResponse(BaseModel):
    """One row of the trending list."""
    submission: SubmissionResponse
    username: str
    total_likes: int
    total_comments: int
    total_activity: int

    class Config:
        from_attributes = True


class TrendingResponse(BaseModel):
    """Trending submissions for the current reviewer."""
    timeframe_hours: int
    entries: List[TrendingEntryResponse]
