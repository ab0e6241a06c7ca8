"""
Chainable submission filters.

``SubmissionQuery`` wraps an immutable SQLAlchemy ``Select``. Each filter
returns a new query that narrows the previous one; nothing touches the
database until one of the terminal methods (``all``, ``first``, ``count``,
``exists``) runs it against a session.

    SubmissionQuery().pending().for_language("ruby").unmuted_for(user).reversed().all(db)
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from nitpick.config import get_settings
from nitpick.models.comment import Comment
from nitpick.models.engagement import Like, MutedSubmission
from nitpick.models.submission import Submission, SubmissionState, PENDING_STATES

settings = get_settings()


class SubmissionQuery:
    """Immutable, lazily executed query over the submissions table."""

    def __init__(self, statement: Optional[Select] = None):
        self._statement = statement if statement is not None else select(Submission)

    def __repr__(self) -> str:
        return f"<SubmissionQuery({self._statement})>"

    @property
    def statement(self) -> Select:
        return self._statement

    def _chain(self, statement: Select) -> "SubmissionQuery":
        return SubmissionQuery(statement)

    # Generic clauses

    def where(self, *criteria) -> "SubmissionQuery":
        return self._chain(self._statement.where(*criteria))

    def order_by(self, *clauses) -> "SubmissionQuery":
        return self._chain(self._statement.order_by(*clauses))

    def limit(self, count: int) -> "SubmissionQuery":
        return self._chain(self._statement.limit(count))

    # State

    def pending(self) -> "SubmissionQuery":
        return self.where(Submission.state.in_(PENDING_STATES))

    def aging(self, now: Optional[datetime] = None) -> "SubmissionQuery":
        """Pending submissions that got nitpicks but have sat for weeks."""
        now = now or datetime.utcnow()
        return (
            self.pending()
            .where(Submission.nit_count > 0)
            .older_than(now - timedelta(days=settings.aging_threshold_days))
        )

    # Ordering

    def chronologically(self) -> "SubmissionQuery":
        return self.order_by(Submission.created_at.asc(), Submission.id.asc())

    def reversed(self) -> "SubmissionQuery":
        return self.order_by(Submission.created_at.desc(), Submission.id.desc())

    # People

    def not_commented_on_by(self, user) -> "SubmissionQuery":
        commented = select(Comment.submission_id).where(Comment.user_id == user.id)
        return self.where(Submission.id.not_in(commented))

    def not_liked_by(self, user) -> "SubmissionQuery":
        liked = select(Like.submission_id).where(Like.user_id == user.id)
        return self.where(Submission.id.not_in(liked))

    def not_submitted_by(self, user) -> "SubmissionQuery":
        return self.where(Submission.user_id != user.id)

    def unmuted_for(self, user) -> "SubmissionQuery":
        muted = select(MutedSubmission.submission_id).where(MutedSubmission.user_id == user.id)
        return self.where(Submission.id.not_in(muted))

    # Problems

    def excluding_hello(self) -> "SubmissionQuery":
        return self.where(Submission.slug != settings.hello_world_slug)

    def for_language(self, language: str) -> "SubmissionQuery":
        return self.where(Submission.language == language)

    def completed_for(self, problem) -> "SubmissionQuery":
        return self.where(
            Submission.language == problem.track_id,
            Submission.slug == problem.slug,
            Submission.state == SubmissionState.DONE.value,
        )

    def related(self, submission: Submission) -> "SubmissionQuery":
        """Iterations by the same author on the same problem, oldest first."""
        return self.chronologically().where(
            Submission.user_id == submission.user_id,
            Submission.language == submission.track_id,
            Submission.slug == submission.slug,
        )

    # Time

    def between(self, upper_bound: datetime, lower_bound: datetime) -> "SubmissionQuery":
        """Created within [upper_bound, lower_bound], both ends inclusive."""
        return self.where(Submission.created_at.between(upper_bound, lower_bound))

    def older_than(self, timestamp: datetime) -> "SubmissionQuery":
        return self.where(Submission.created_at < timestamp)

    def since(self, timestamp: datetime) -> "SubmissionQuery":
        return self.where(Submission.created_at > timestamp)

    def recent(self, now: Optional[datetime] = None) -> "SubmissionQuery":
        now = now or datetime.utcnow()
        return self.since(now - timedelta(days=settings.recent_window_days))

    # Execution

    def all(self, db: Session) -> List[Submission]:
        return list(db.scalars(self._statement))

    def first(self, db: Session) -> Optional[Submission]:
        return db.scalars(self._statement.limit(1)).first()

    def count(self, db: Session) -> int:
        counted = select(func.count()).select_from(self._statement.order_by(None).subquery())
        return db.scalar(counted) or 0

    def exists(self, db: Session) -> bool:
        return bool(db.scalar(select(self._statement.exists())))

    def random_completed_for(self, db: Session, problem) -> Optional[Submission]:
        """One random completed submission for ``problem``, or None."""
        return self.completed_for(problem).order_by(func.random()).first(db)
