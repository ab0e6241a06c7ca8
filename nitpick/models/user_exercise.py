"""
Per-user, per-problem tracking record.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from nitpick.database import Base


class UserExercise(Base):
    """
    A user's progress on one problem of one track.

    Attributes:
        id: Primary key
        user_id: Owner of the exercise
        language: Track id
        slug: Problem slug
        state: Progress state of the exercise
        is_nitpicker: Whether the user may review others' submissions for this problem
        created_at: Creation timestamp
    """
    __tablename__ = "user_exercises"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    language = Column(String(50), nullable=False)
    slug = Column(String(255), nullable=False)
    state = Column(String(50), default="pending")
    is_nitpicker = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User")
    submissions = relationship("Submission", back_populates="user_exercise")

    __table_args__ = (
        UniqueConstraint("user_id", "language", "slug", name="uq_user_exercise_problem"),
    )

    def __repr__(self) -> str:
        return f"<UserExercise(id={self.id}, language='{self.language}', slug='{self.slug}')>"
