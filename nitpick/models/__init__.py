"""
SQLAlchemy ORM models for the submission review platform.
"""

from nitpick.models.user import User
from nitpick.models.problem import Problem
from nitpick.models.user_exercise import UserExercise
from nitpick.models.submission import Submission, SubmissionState, PENDING_STATES
from nitpick.models.comment import Comment
from nitpick.models.engagement import Like, MutedSubmission, SubmissionViewer
from nitpick.models.view import View
from nitpick.models.notification import Notification, SUBMISSION_ITEM_TYPE

__all__ = [
    "User",
    "Problem",
    "UserExercise",
    "Submission",
    "SubmissionState",
    "PENDING_STATES",
    "Comment",
    "Like",
    "MutedSubmission",
    "SubmissionViewer",
    "View",
    "Notification",
    "SUBMISSION_ITEM_TYPE",
]
