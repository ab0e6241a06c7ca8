"""
Engagement aggregates and trending submissions.

Trending ranks the submissions a reviewer can nitpick by how many likes and
comments they collected inside a recent time window.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, func, and_, true
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from nitpick.config import get_settings
from nitpick.models.comment import Comment
from nitpick.models.engagement import Like
from nitpick.models.submission import Submission
from nitpick.models.user import User
from nitpick.models.user_exercise import UserExercise

settings = get_settings()


@dataclass
class TrendingEntry:
    """One ranked row of the trending list."""
    submission: Submission
    username: str
    total_likes: int
    total_comments: int
    total_activity: int


def likes_by_submission() -> Select:
    """Like counts grouped by submission id, as columns (id, total_likes)."""
    return (
        select(Submission.id.label("id"), func.count(Like.id).label("total_likes"))
        .join(Like, Like.submission_id == Submission.id)
        .group_by(Submission.id)
    )


def comments_by_submission() -> Select:
    """Comment counts grouped by submission id, as columns (id, total_comments)."""
    return (
        select(Submission.id.label("id"), func.count(Comment.id).label("total_comments"))
        .join(Comment, Comment.submission_id == Submission.id)
        .group_by(Submission.id)
    )


def trending_statement(user, timeframe: timedelta, now: Optional[datetime] = None,
                       limit: Optional[int] = None) -> Select:
    """
    Build the trending query for ``user``.

    Only problems the user is a nitpicker on are considered. Likes and
    comments count when created within ``[now - timeframe, now]``; rows
    with no activity in that window are dropped.
    """
    now = now or datetime.utcnow()
    window_start = now - timeframe

    comments = (
        comments_by_submission()
        .where(Comment.created_at.between(window_start, now))
        .subquery("c")
    )
    likes = (
        likes_by_submission()
        .where(Like.created_at.between(window_start, now))
        .subquery("l")
    )
    nitpicked = (
        select(UserExercise.language, UserExercise.slug)
        .where(UserExercise.user_id == user.id, UserExercise.is_nitpicker == true())
        .subquery("u")
    )

    total_likes = func.coalesce(likes.c.total_likes, 0)
    total_comments = func.coalesce(comments.c.total_comments, 0)
    total_activity = total_likes + total_comments

    return (
        select(
            Submission,
            User.username,
            total_likes.label("total_likes"),
            total_comments.label("total_comments"),
            total_activity.label("total_activity"),
        )
        .outerjoin(comments, comments.c.id == Submission.id)
        .outerjoin(likes, likes.c.id == Submission.id)
        .join(
            nitpicked,
            and_(
                nitpicked.c.language == Submission.language,
                nitpicked.c.slug == Submission.slug,
            ),
        )
        .join(User, User.id == Submission.user_id)
        .where(total_activity > 0)
        .order_by(total_activity.desc(), Submission.id.desc())
        .limit(limit or settings.trending_limit)
    )


def trending(db: Session, user, timeframe: timedelta, now: Optional[datetime] = None,
             limit: Optional[int] = None) -> List[TrendingEntry]:
    """Run the trending query and return ranked entries."""
    rows = db.execute(trending_statement(user, timeframe, now=now, limit=limit)).all()
    return [
        TrendingEntry(
            submission=row[0],
            username=row.username,
            total_likes=row.total_likes,
            total_comments=row.total_comments,
            total_activity=row.total_activity,
        )
        for row in rows
    ]
