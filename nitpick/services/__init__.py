"""
Services for the submission review platform.
"""

from nitpick.services.submission_service import SubmissionService

__all__ = ["SubmissionService"]
