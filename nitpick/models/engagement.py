"""
Association rows linking users to submissions: likes, mutes, and viewers.

Each row is owned by its submission and removed when the submission is
destroyed. A user appears at most once per submission in each table.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from nitpick.database import Base


class Like(Base):
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "submission_id", name="uq_like_user_submission"),
    )

    def __repr__(self) -> str:
        return f"<Like(user_id={self.user_id}, submission_id={self.submission_id})>"


class MutedSubmission(Base):
    """Suppresses notifications about a submission for one user."""
    __tablename__ = "muted_submissions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "submission_id", name="uq_muted_user_submission"),
    )

    def __repr__(self) -> str:
        return f"<MutedSubmission(user_id={self.user_id}, submission_id={self.submission_id})>"


class SubmissionViewer(Base):
    """Records that a user has seen a submission."""
    __tablename__ = "submission_viewers"

    id = Column(Integer, primary_key=True, index=True)
    viewer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("viewer_id", "submission_id", name="uq_viewer_submission"),
    )

    def __repr__(self) -> str:
        return f"<SubmissionViewer(viewer_id={self.viewer_id}, submission_id={self.submission_id})>"
