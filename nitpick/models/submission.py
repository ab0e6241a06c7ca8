"""
Submission model: one iteration of a user's solution to a problem.

A submission moves through review states (pending, needs_input, done,
hibernating) until a newer iteration supersedes it. Each iteration carries a
version number that counts up from 1 per user, track, and problem.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    ForeignKey,
    JSON,
    Index,
    select,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, object_session

from nitpick.database import Base
from nitpick.models.problem import Problem


class SubmissionState(str, Enum):
    """Review state of a submission."""
    PENDING = "pending"
    NEEDS_INPUT = "needs_input"
    DONE = "done"
    HIBERNATING = "hibernating"
    SUPERSEDED = "superseded"


PENDING_STATES = (SubmissionState.NEEDS_INPUT.value, SubmissionState.PENDING.value)


class Submission(Base):
    """
    A user's attempt at an exercise problem.

    Attributes:
        id: Primary key
        key: Externally visible unique token, generated at creation
        user_id: Author (required)
        user_exercise_id: The author's tracking record for this problem
        solution: Submitted files, serialized as JSON
        language: Track id
        slug: Problem slug within the track
        state: Review state (see SubmissionState)
        done_at: When the submission was completed; cleared on supersede
        version: Iteration number within (user, language, slug), starting at 1
        nit_count: Number of nitpicks received
        is_liked: Cached "has at least one like" flag
        created_at: Submission timestamp
    """
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_exercise_id = Column(Integer, ForeignKey("user_exercises.id"), nullable=True, index=True)

    solution = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    language = Column(String(50), nullable=False)
    slug = Column(String(255), nullable=False)

    state = Column(String(50), default=SubmissionState.PENDING.value, nullable=False)
    done_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    nit_count = Column(Integer, nullable=False, default=0)
    is_liked = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="submissions")
    user_exercise = relationship("UserExercise", back_populates="submissions")
    comments = relationship(
        "Comment",
        back_populates="submission",
        order_by="Comment.created_at.asc()",
    )

    # Engagement rows are written through SubmissionService; these are read-only views
    submission_viewers = relationship("SubmissionViewer", viewonly=True)
    viewers = relationship("User", secondary="submission_viewers", viewonly=True)
    muted_submissions = relationship("MutedSubmission", viewonly=True)
    muted_by = relationship("User", secondary="muted_submissions", viewonly=True)
    likes = relationship("Like", viewonly=True)
    liked_by = relationship("User", secondary="likes", viewonly=True)

    __table_args__ = (
        Index("ix_submissions_user_problem", "user_id", "language", "slug"),
        Index("ix_submissions_problem_state", "language", "slug", "state"),
    )

    def __repr__(self) -> str:
        return f"<Submission(id={self.id}, key='{self.key}', state='{self.state}')>"

    @property
    def track_id(self) -> str:
        return self.language

    @property
    def problem(self) -> Problem:
        return Problem(self.language, self.slug)

    @property
    def name(self) -> str:
        return self.problem.name

    @property
    def activity_description(self) -> str:
        return "Submitted an iteration"

    # State predicates

    @property
    def is_done(self) -> bool:
        return self.state == SubmissionState.DONE.value

    @property
    def is_pending(self) -> bool:
        return self.state == SubmissionState.PENDING.value

    @property
    def is_hibernating(self) -> bool:
        return self.state == SubmissionState.HIBERNATING.value

    @property
    def is_superseded(self) -> bool:
        return self.state == SubmissionState.SUPERSEDED.value

    @property
    def discussion_involves_user(self) -> bool:
        """True once more comments have accumulated than nitpicks."""
        return (self.nit_count or 0) < len(self.comments)

    def is_older_than(self, duration: timedelta) -> bool:
        return self.created_at < datetime.utcnow() - duration

    # Queries against the owning session

    def _session(self):
        session = object_session(self)
        if session is None:
            raise RuntimeError(f"{self!r} is not attached to a session")
        return session

    def _memo(self) -> dict:
        # Plain instance attribute; SQLAlchemy does not track it
        if "_memoized" not in self.__dict__:
            self.__dict__["_memoized"] = {}
        return self.__dict__["_memoized"]

    def is_muted_by(self, user) -> bool:
        from nitpick.models.engagement import MutedSubmission

        stmt = select(MutedSubmission.id).where(
            MutedSubmission.submission_id == self.id,
            MutedSubmission.user_id == user.id,
        )
        return self._session().scalar(select(stmt.exists())) or False

    def view_count(self) -> int:
        from nitpick.models.engagement import SubmissionViewer

        stmt = select(func.count(SubmissionViewer.id)).where(
            SubmissionViewer.submission_id == self.id
        )
        return self._session().scalar(stmt) or 0

    def related(self) -> List["Submission"]:
        """All iterations by the same user on the same problem, oldest first."""
        from nitpick.queries.submissions import SubmissionQuery

        memo = self._memo()
        if "related" not in memo:
            memo["related"] = SubmissionQuery().related(self).all(self._session())
        return memo["related"]

    def prior_version(self) -> Optional["Submission"]:
        """The closest surviving iteration before this one, if any."""
        from nitpick.queries.submissions import SubmissionQuery

        memo = self._memo()
        if "prior" not in memo:
            memo["prior"] = (
                SubmissionQuery()
                .related(self)
                .where(Submission.version < self.version)
                .order_by(None)
                .order_by(Submission.version.desc())
                .first(self._session())
            )
        return memo["prior"]

    def participant_submissions(self, current_user=None) -> List["Submission"]:
        """
        Active submissions to the same problem by everyone in the discussion.

        Participants are the commenters on this submission plus ``current_user``.
        Superseded iterations are left out; newest first. The result is
        memoized on the instance after the first call.
        """
        from nitpick.queries.submissions import SubmissionQuery

        memo = self._memo()
        if "participants" not in memo:
            user_ids = {comment.user_id for comment in self.comments}
            if current_user is not None:
                user_ids.add(current_user.id)
            memo["participants"] = (
                SubmissionQuery()
                .reversed()
                .where(
                    Submission.user_id.in_(user_ids),
                    Submission.language == self.track_id,
                    Submission.slug == self.slug,
                    Submission.state != SubmissionState.SUPERSEDED.value,
                )
                .all(self._session())
            )
        return memo["participants"]

    def forget_memoized(self) -> None:
        """Drop cached related/prior/participant lookups."""
        self.__dict__.pop("_memoized", None)
