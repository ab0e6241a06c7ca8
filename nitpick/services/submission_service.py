"""
Submission lifecycle: creation, likes, mutes, views, supersede, and removal.

Every mutating call commits before returning unless documented otherwise.
Storage failures roll the session back and propagate unchanged, with one
exception: ``mark_viewed`` is best effort and reports failures in its result.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from nitpick.exceptions import ConflictError, ValidationError, ViewOutcome
from nitpick.models.comment import Comment
from nitpick.models.engagement import Like, MutedSubmission, SubmissionViewer
from nitpick.models.notification import Notification, SUBMISSION_ITEM_TYPE
from nitpick.models.problem import Problem
from nitpick.models.submission import Submission, SubmissionState
from nitpick.models.user_exercise import UserExercise
from nitpick.models.view import View
from nitpick.queries.submissions import SubmissionQuery
from nitpick.services.upserts import insert_ignore, upsert

logger = logging.getLogger(__name__)


def generate_key() -> str:
    """Public token identifying a submission."""
    return uuid.uuid4().hex


class SubmissionService:
    """
    Service owning submission state changes.
    """

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _commit(self, *instances) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to commit submission change: {e}")
            self.db.rollback()
            raise
        for instance in instances:
            self.db.refresh(instance)

    def get_by_key(self, key: str) -> Optional[Submission]:
        return self.db.scalars(select(Submission).where(Submission.key == key)).first()

    def exercise_for(self, user, problem: Problem) -> UserExercise:
        """Find the user's tracking record for ``problem``, creating it if needed."""
        values = {"user_id": user.id, "language": problem.track_id, "slug": problem.slug}
        insert_ignore(self.db, UserExercise, values, ["user_id", "language", "slug"])
        return self.db.scalars(
            select(UserExercise).where(
                UserExercise.user_id == user.id,
                UserExercise.language == problem.track_id,
                UserExercise.slug == problem.slug,
            )
        ).one()

    # Creation

    def start_on(
        self,
        user,
        problem: Problem,
        user_exercise=None,
        solution: Optional[Any] = None,
    ) -> Submission:
        """
        Create and persist a new submission for ``user`` on ``problem``.

        The submission starts pending, unliked, with no nitpicks, and its
        version is one more than the number of earlier iterations the user
        made on the same problem, and never below the highest version still
        stored, so deleting an iteration does not free its number.

        Raises:
            ValidationError: If no user is given
            ConflictError: If the generated key is already taken
        """
        if user is None:
            raise ValidationError("user")

        submission = Submission(
            user=user,
            user_id=user.id,
            user_exercise=user_exercise,
            solution=solution,
            language=problem.track_id,
            slug=problem.slug,
            state=SubmissionState.PENDING.value,
            nit_count=0,
            is_liked=False,
            key=generate_key(),
        )
        related = SubmissionQuery().related(submission)
        latest = self.db.scalar(
            related.statement.order_by(None).with_only_columns(func.max(Submission.version))
        )
        submission.version = max(related.count(self.db), latest or 0) + 1

        self.db.add(submission)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self.get_by_key(submission.key) is not None:
                raise ConflictError(f"Submission key {submission.key} already exists") from e
            logger.error(f"Failed to create submission: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to create submission: {e}")
            self.db.rollback()
            raise
        self.db.refresh(submission)

        logger.info(
            f"Submission created: key={submission.key}, user={user.id}, "
            f"problem={problem.track_id}/{problem.slug}, version={submission.version}"
        )
        return submission

    # State

    def supersede(self, submission: Submission) -> Submission:
        """Retire a submission in favour of a newer iteration."""
        submission.state = SubmissionState.SUPERSEDED.value
        submission.done_at = None
        self._commit(submission)
        logger.info(f"Submission superseded: key={submission.key}")
        return submission

    def supersede_earlier(self, submission: Submission) -> List[Submission]:
        """Supersede every older, still live iteration of the same problem."""
        earlier = (
            SubmissionQuery()
            .related(submission)
            .where(
                Submission.id != submission.id,
                Submission.version < submission.version,
                Submission.state != SubmissionState.SUPERSEDED.value,
            )
            .all(self.db)
        )
        for previous in earlier:
            self.supersede(previous)
        return earlier

    # Likes

    def like(self, submission: Submission, user) -> Submission:
        """
        Like a submission on behalf of ``user``.

        Liking twice keeps a single like. The liker stops receiving
        notifications about the submission.
        """
        insert_ignore(
            self.db,
            Like,
            {"user_id": user.id, "submission_id": submission.id},
            ["user_id", "submission_id"],
        )
        submission.is_liked = True
        self.mute(submission, user)
        self._commit(submission)
        logger.info(f"Submission liked: key={submission.key}, user={user.id}")
        return submission

    def unlike(self, submission: Submission, user) -> Submission:
        """Remove ``user``'s like and recompute the liked flag."""
        self.db.execute(
            delete(Like).where(Like.submission_id == submission.id, Like.user_id == user.id)
        )
        remaining = self.db.scalar(
            select(func.count(Like.id)).where(Like.submission_id == submission.id)
        )
        submission.is_liked = (remaining or 0) > 0
        self.unmute(submission, user)
        self._commit(submission)
        logger.info(f"Submission unliked: key={submission.key}, user={user.id}")
        return submission

    # Mutes

    def mute(self, submission: Submission, user, commit: bool = False) -> Submission:
        """
        Stop notifications about ``submission`` for ``user``.

        A user is muted at most once. Without ``commit`` the change joins the
        caller's transaction.
        """
        insert_ignore(
            self.db,
            MutedSubmission,
            {"user_id": user.id, "submission_id": submission.id},
            ["user_id", "submission_id"],
        )
        self.db.expire(submission, ["muted_submissions", "muted_by"])
        if commit:
            self._commit(submission)
        return submission

    def unmute(self, submission: Submission, user, commit: bool = False) -> Submission:
        self.db.execute(
            delete(MutedSubmission).where(
                MutedSubmission.submission_id == submission.id,
                MutedSubmission.user_id == user.id,
            )
        )
        self.db.expire(submission, ["muted_submissions", "muted_by"])
        if commit:
            self._commit(submission)
        return submission

    def unmute_all(self, submission: Submission) -> Submission:
        self.db.execute(
            delete(MutedSubmission).where(MutedSubmission.submission_id == submission.id)
        )
        self._commit(submission)
        return submission

    # Views

    def record_view(self, submission: Submission, user) -> None:
        """
        Stamp the time ``user`` last viewed this submission's exercise.

        The first view inserts a row; later (or concurrent) views update its
        timestamp in the same statement.
        """
        if submission.user_exercise_id is None:
            raise ValidationError("user_exercise")

        now = datetime.utcnow()
        upsert(
            self.db,
            View,
            {"user_id": user.id, "exercise_id": submission.user_exercise_id, "last_viewed_at": now},
            ["user_id", "exercise_id"],
            {"last_viewed_at": now},
        )
        self._commit()

    def mark_viewed(self, submission: Submission, user, commit: bool = False) -> ViewOutcome:
        """
        Add ``user`` to the submission's viewers.

        Never raises: viewing must not fail the request that triggered it.
        A failed insert only unwinds its own savepoint, so pending work in the
        caller's transaction is kept. Without ``commit`` the viewer row joins
        that transaction.
        """
        try:
            with self.db.begin_nested():
                insert_ignore(
                    self.db,
                    SubmissionViewer,
                    {"viewer_id": user.id, "submission_id": submission.id},
                    ["viewer_id", "submission_id"],
                )
        except SQLAlchemyError as e:
            return self._view_failed(submission, user, e)

        if commit:
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                return self._view_failed(submission, user, e)
        return ViewOutcome(recorded=True)

    def _view_failed(self, submission: Submission, user, e: SQLAlchemyError) -> ViewOutcome:
        error = f"{e.__class__.__name__}: {e}"
        logger.warning(f"Could not mark submission {submission.key} viewed by user {user.id}: {error}")
        return ViewOutcome(recorded=False, error=error)

    # Removal

    def destroy(self, submission: Submission) -> None:
        """
        Delete a submission with everything it owns.

        Comments, likes, mutes, viewer rows, and notifications tagged to the
        submission are removed in the same transaction.
        """
        submission_id = submission.id
        key = submission.key
        try:
            self.db.execute(delete(Comment).where(Comment.submission_id == submission_id))
            self.db.execute(delete(Like).where(Like.submission_id == submission_id))
            self.db.execute(delete(MutedSubmission).where(MutedSubmission.submission_id == submission_id))
            self.db.execute(delete(SubmissionViewer).where(SubmissionViewer.submission_id == submission_id))
            self.db.execute(
                delete(Notification).where(
                    Notification.item_type == SUBMISSION_ITEM_TYPE,
                    Notification.item_id == submission_id,
                )
            )
            self.db.execute(delete(Submission).where(Submission.id == submission_id))
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete submission {key}: {e}")
            self.db.rollback()
            raise
        logger.info(f"Submission deleted: key={key}")
