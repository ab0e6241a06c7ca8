"""
Tests for the submission lifecycle service.
Covers creation, versioning, likes, mutes, views, supersede, and removal.
"""

import pytest
from unittest.mock import patch
from datetime import datetime, timedelta

from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from nitpick.exceptions import ConflictError, ValidationError, ViewOutcome
from nitpick.models import (
    Comment,
    Like,
    MutedSubmission,
    Notification,
    Problem,
    Submission,
    SubmissionState,
    SubmissionViewer,
    View,
    SUBMISSION_ITEM_TYPE,
)


def _count(db, model, **filters):
    stmt = select(func.count()).select_from(model)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    return db.scalar(stmt)


class TestStartOn:
    """Tests for creating submissions."""

    def test_new_submission_defaults(self, service, alice, leap):
        """Test that a new submission starts pending, unliked, at version 1."""
        submission = service.start_on(alice, leap, solution={"leap.rb": "class Year; end"})

        assert submission.id is not None
        assert submission.state == SubmissionState.PENDING.value
        assert submission.is_pending
        assert submission.version == 1
        assert submission.nit_count == 0
        assert submission.is_liked is False
        assert submission.language == "ruby"
        assert submission.slug == "leap"
        assert submission.solution == {"leap.rb": "class Year; end"}
        assert submission.key
        assert len(submission.key) == 32

    def test_keys_are_unique(self, service, alice, leap):
        """Test that every submission gets its own key."""
        keys = {service.start_on(alice, leap).key for _ in range(5)}
        assert len(keys) == 5

    def test_missing_user_raises_validation_error(self, service, leap):
        """Test that a submission cannot be created without a user."""
        with pytest.raises(ValidationError) as exc_info:
            service.start_on(None, leap)
        assert exc_info.value.field == "user"

    def test_version_counts_prior_iterations(self, service, alice, leap):
        """Test that version is 1 + the number of earlier iterations."""
        first = service.start_on(alice, leap)
        second = service.start_on(alice, leap)
        third = service.start_on(alice, leap)

        assert [first.version, second.version, third.version] == [1, 2, 3]

    def test_version_is_per_user_and_problem(self, service, alice, bob, leap):
        """Test that other users and other problems don't affect version."""
        service.start_on(alice, leap)
        service.start_on(alice, Problem("ruby", "bob"))
        service.start_on(alice, Problem("python", "leap"))

        assert service.start_on(bob, leap).version == 1
        assert service.start_on(alice, leap).version == 2

    def test_version_not_reused_after_destroy(self, service, alice, leap):
        """Test that deleting an earlier iteration does not free its number."""
        first = service.start_on(alice, leap)
        second = service.start_on(alice, leap)

        service.destroy(first)
        third = service.start_on(alice, leap)

        assert second.version == 2
        assert third.version == 3
        assert third.prior_version().id == second.id

    def test_key_collision_raises_conflict(self, service, alice, leap):
        """Test that a duplicate generated key surfaces as ConflictError."""
        with patch(
            "nitpick.services.submission_service.generate_key",
            return_value="a" * 32,
        ):
            service.start_on(alice, leap)
            with pytest.raises(ConflictError):
                service.start_on(alice, leap)

    def test_exercise_for_is_get_or_create(self, service, alice, leap):
        """Test that the tracking record is created once per problem."""
        first = service.exercise_for(alice, leap)
        second = service.exercise_for(alice, leap)

        assert first.id == second.id
        assert first.language == "ruby"
        assert first.is_nitpicker is False


class TestPriorVersion:
    """Tests for iteration history lookups."""

    def test_prior_and_related(self, service, alice, leap):
        """Test the A-then-B scenario on the same problem."""
        a = service.start_on(alice, leap)
        b = service.start_on(alice, leap)

        assert b.version == a.version + 1
        assert [s.id for s in b.related()] == [a.id, b.id]
        assert b.prior_version().id == a.id
        assert a.prior_version() is None


class TestSupersede:
    """Tests for superseding submissions."""

    @pytest.mark.parametrize("state", [s.value for s in SubmissionState])
    def test_supersede_from_any_state(self, db, service, alice, leap, state):
        """Test that supersede always ends superseded with done_at cleared."""
        submission = service.start_on(alice, leap)
        submission.state = state
        submission.done_at = datetime.utcnow()
        db.commit()

        service.supersede(submission)

        assert submission.is_superseded
        assert submission.done_at is None

    def test_supersede_is_idempotent(self, service, alice, leap):
        submission = service.start_on(alice, leap)
        service.supersede(submission)
        service.supersede(submission)
        assert submission.state == SubmissionState.SUPERSEDED.value

    def test_supersede_earlier_skips_gaps(self, service, alice, bob, leap):
        """Test that every older live iteration is retired, not just version - 1."""
        first = service.start_on(alice, leap)
        deleted = service.start_on(alice, leap)
        third = service.start_on(alice, leap)
        service.destroy(deleted)
        bobs = service.start_on(bob, leap)

        latest = service.start_on(alice, leap)
        retired = service.supersede_earlier(latest)

        assert latest.version == 4
        assert {s.id for s in retired} == {first.id, third.id}
        assert first.is_superseded and third.is_superseded
        assert latest.is_pending
        assert bobs.is_pending

    def test_supersede_earlier_ignores_already_superseded(self, service, alice, leap):
        first = service.start_on(alice, leap)
        service.supersede(first)
        latest = service.start_on(alice, leap)

        assert service.supersede_earlier(latest) == []


class TestLikes:
    """Tests for liking and unliking."""

    def test_like_sets_flag_and_mutes(self, db, service, alice, bob, leap):
        submission = service.start_on(alice, leap)

        service.like(submission, bob)

        assert submission.is_liked is True
        assert [u.id for u in submission.liked_by] == [bob.id]
        assert submission.is_muted_by(bob)

    def test_like_twice_keeps_one_like(self, db, service, alice, bob, leap):
        """Test that liking is idempotent."""
        submission = service.start_on(alice, leap)

        service.like(submission, bob)
        service.like(submission, bob)

        assert _count(db, Like, submission_id=submission.id, user_id=bob.id) == 1
        assert _count(db, MutedSubmission, submission_id=submission.id, user_id=bob.id) == 1
        assert [u.id for u in submission.liked_by] == [bob.id]
        assert submission.is_liked is True

    def test_unlike_clears_flag_when_last_like(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        service.like(submission, bob)

        service.unlike(submission, bob)

        assert submission.is_liked is False
        assert submission.liked_by == []
        assert not submission.is_muted_by(bob)

    def test_unlike_keeps_flag_when_others_like(self, service, alice, bob, carol, leap):
        submission = service.start_on(alice, leap)
        service.like(submission, bob)
        service.like(submission, carol)

        service.unlike(submission, bob)

        assert submission.is_liked is True
        assert [u.id for u in submission.liked_by] == [carol.id]

    def test_unlike_without_like(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        service.unlike(submission, bob)
        assert submission.is_liked is False


class TestMutes:
    """Tests for muting notifications."""

    def test_mute_with_commit(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)

        service.mute(submission, bob, commit=True)

        assert submission.is_muted_by(bob)
        assert [u.id for u in submission.muted_by] == [bob.id]

    def test_mute_without_commit_is_rolled_back(self, db, service, alice, bob, leap):
        """Test that a deferred mute is lost if the caller rolls back."""
        submission = service.start_on(alice, leap)

        service.mute(submission, bob)
        assert submission.is_muted_by(bob)
        db.rollback()

        assert not submission.is_muted_by(bob)

    def test_mute_is_unique(self, db, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        service.mute(submission, bob, commit=True)
        service.mute(submission, bob, commit=True)
        assert _count(db, MutedSubmission, submission_id=submission.id) == 1

    def test_unmute(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        service.mute(submission, bob, commit=True)

        service.unmute(submission, bob, commit=True)

        assert not submission.is_muted_by(bob)

    def test_unmute_all(self, service, alice, bob, carol, leap):
        submission = service.start_on(alice, leap)
        service.mute(submission, bob, commit=True)
        service.mute(submission, carol, commit=True)

        service.unmute_all(submission)

        assert submission.muted_by == []


class TestViews:
    """Tests for view tracking."""

    def test_record_view_upserts(self, db, service, alice, bob, leap):
        """Test that repeated views keep one row with the latest timestamp."""
        exercise = service.exercise_for(alice, leap)
        submission = service.start_on(alice, leap, user_exercise=exercise)
        first = datetime(2026, 1, 1, 12, 0, 0)
        second = datetime(2026, 1, 2, 12, 0, 0)

        with patch("nitpick.services.submission_service.datetime") as mock_datetime:
            mock_datetime.utcnow.side_effect = [first, second]
            service.record_view(submission, bob)
            service.record_view(submission, bob)

        views = db.scalars(select(View).where(View.user_id == bob.id)).all()
        assert len(views) == 1
        assert views[0].exercise_id == exercise.id
        assert views[0].last_viewed_at == second

    def test_record_view_requires_exercise(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        with pytest.raises(ValidationError):
            service.record_view(submission, bob)

    def test_mark_viewed_adds_viewer_once(self, service, alice, bob, leap):
        submission = service.start_on(alice, leap)

        first = service.mark_viewed(submission, bob)
        second = service.mark_viewed(submission, bob)

        assert first == ViewOutcome(recorded=True)
        assert second.recorded is True
        assert submission.view_count() == 1
        assert [u.id for u in submission.viewers] == [bob.id]

    def test_mark_viewed_swallows_storage_errors(self, service, alice, bob, leap, caplog):
        """Test that a failing view mark is logged and reported, not raised."""
        submission = service.start_on(alice, leap)
        error = OperationalError("INSERT INTO submission_viewers", {}, Exception("database is locked"))

        with patch("nitpick.services.submission_service.insert_ignore", side_effect=error):
            outcome = service.mark_viewed(submission, bob)

        assert outcome.recorded is False
        assert outcome.failed
        assert "OperationalError" in outcome.error
        assert "Could not mark submission" in caplog.text
        assert submission.view_count() == 0

    def test_mark_viewed_failure_keeps_pending_work(self, db, service, alice, bob, carol, leap):
        """Test that a failed view mark leaves the caller's transaction intact."""
        submission = service.start_on(alice, leap)
        sid = submission.id
        service.mute(submission, carol)
        error = OperationalError("INSERT INTO submission_viewers", {}, Exception("database is locked"))

        with patch("nitpick.services.submission_service.insert_ignore", side_effect=error):
            outcome = service.mark_viewed(submission, bob)
        db.commit()

        assert outcome.failed
        assert _count(db, MutedSubmission, submission_id=sid, user_id=carol.id) == 1
        assert _count(db, SubmissionViewer, submission_id=sid) == 0

    def test_mark_viewed_leaves_commit_to_caller(self, db, service, alice, bob, carol, leap):
        """Test that marking viewed does not commit work the caller deferred."""
        submission = service.start_on(alice, leap)
        sid = submission.id
        service.mute(submission, carol)

        assert service.mark_viewed(submission, bob).recorded
        db.rollback()

        assert _count(db, MutedSubmission, submission_id=sid) == 0
        assert _count(db, SubmissionViewer, submission_id=sid) == 0

    def test_mark_viewed_with_commit(self, db, service, alice, bob, leap):
        submission = service.start_on(alice, leap)
        sid = submission.id

        assert service.mark_viewed(submission, bob, commit=True).recorded
        db.rollback()

        assert _count(db, SubmissionViewer, submission_id=sid, viewer_id=bob.id) == 1


class TestDestroy:
    """Tests for deleting submissions and their owned rows."""

    def test_destroy_cascades(self, db, service, alice, bob, carol, leap):
        submission = service.start_on(alice, leap)
        other = service.start_on(bob, leap)
        sid = submission.id

        db.add(Comment(user_id=bob.id, submission_id=sid, body="nice"))
        db.add(Comment(user_id=alice.id, submission_id=other.id, body="thanks"))
        db.add(Notification(user_id=alice.id, item_type=SUBMISSION_ITEM_TYPE, item_id=sid, regarding="like"))
        db.add(Notification(user_id=bob.id, item_type="Comment", item_id=sid, regarding="nitpick"))
        db.commit()
        service.like(submission, carol)
        service.mark_viewed(submission, bob)

        service.destroy(submission)

        assert db.get(Submission, sid) is None
        assert _count(db, Comment, submission_id=sid) == 0
        assert _count(db, Like, submission_id=sid) == 0
        assert _count(db, MutedSubmission, submission_id=sid) == 0
        assert _count(db, SubmissionViewer, submission_id=sid) == 0
        assert _count(db, Notification, item_type=SUBMISSION_ITEM_TYPE, item_id=sid) == 0
        # Untagged notifications and other submissions' rows survive
        assert _count(db, Notification, item_type="Comment", item_id=sid) == 1
        assert _count(db, Comment, submission_id=other.id) == 1


class TestParticipantSubmissions:
    """Tests for discussion participant lookups."""

    def test_participants_exclude_superseded(self, db, service, alice, bob, carol, leap):
        mine = service.start_on(alice, leap)
        bobs_old = service.start_on(bob, leap)
        bobs_new = service.start_on(bob, leap)
        service.supersede(bobs_old)
        carols = service.start_on(carol, leap)
        service.start_on(carol, Problem("ruby", "bob"))
        db.add(Comment(user_id=bob.id, submission_id=mine.id, body="looks good"))
        db.commit()

        ids = [s.id for s in mine.participant_submissions(carol)]

        assert set(ids) == {bobs_new.id, carols.id}
        assert bobs_old.id not in ids

    def test_participants_newest_first(self, db, service, alice, bob, leap, backdate):
        mine = service.start_on(alice, leap)
        older = backdate(service.start_on(bob, leap), datetime.utcnow() - timedelta(days=2))
        db.add(Comment(user_id=bob.id, submission_id=mine.id, body="hi"))
        db.commit()

        result = mine.participant_submissions(alice)

        assert [s.id for s in result] == [mine.id, older.id]

    def test_participants_memoized(self, db, service, alice, bob, leap):
        mine = service.start_on(alice, leap)
        first = mine.participant_submissions(alice)

        service.start_on(bob, leap)
        db.add(Comment(user_id=bob.id, submission_id=mine.id, body="hi"))
        db.commit()

        assert mine.participant_submissions(alice) is first
        mine.forget_memoized()
        assert len(mine.participant_submissions(alice)) == 2
