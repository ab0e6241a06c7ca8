"""
Error taxonomy for the submission lifecycle.

Storage failures are not wrapped: they surface as SQLAlchemy errors,
exported here as ``StorageError`` for callers that want one name to catch.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError as StorageError

__all__ = [
    "SubmissionError",
    "ValidationError",
    "ConflictError",
    "StorageError",
    "ViewOutcome",
]


class SubmissionError(Exception):
    """Base class for submission lifecycle errors."""


class ValidationError(SubmissionError):
    """A required association is missing (e.g. a submission without a user)."""

    def __init__(self, field: str, message: str = "must be present"):
        self.field = field
        self.message = message
        super().__init__(f"{field} {message}")


class ConflictError(SubmissionError):
    """A uniqueness constraint was violated and could not be recovered."""


@dataclass(frozen=True)
class ViewOutcome:
    """
    Result of a best-effort view mark.

    Marking a submission as viewed never raises; failures are reported
    here instead so the surrounding request can carry on.
    """
    recorded: bool
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
