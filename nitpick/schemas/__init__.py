"""
Pydantic schemas for request/response validation.
"""

from nitpick.schemas.user import UserResponse
from nitpick.schemas.submission import (
    SubmissionCreate,
    SubmissionResponse,
    SubmissionDetailResponse,
    ViewResponse,
    TrendingEntryResponse,
    TrendingResponse,
)

__all__ = [
    "UserResponse",
    "SubmissionCreate",
    "SubmissionResponse",
    "SubmissionDetailResponse",
    "ViewResponse",
    "TrendingEntryResponse",
    "TrendingResponse",
]
