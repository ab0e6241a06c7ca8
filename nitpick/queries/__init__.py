"""
Composable read queries over submissions.
"""

from nitpick.queries.submissions import SubmissionQuery
from nitpick.queries.engagement import (
    TrendingEntry,
    likes_by_submission,
    comments_by_submission,
    trending,
)

__all__ = [
    "SubmissionQuery",
    "TrendingEntry",
    "likes_by_submission",
    "comments_by_submission",
    "trending",
]
