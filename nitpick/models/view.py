"""
Last-viewed timestamp per user and exercise.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint

from nitpick.database import Base


class View(Base):
    """
    When a user last looked at an exercise.

    Attributes:
        id: Primary key
        user_id: Viewing user
        exercise_id: The viewed user_exercise
        last_viewed_at: UTC timestamp of the most recent view
    """
    __tablename__ = "views"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    exercise_id = Column(Integer, ForeignKey("user_exercises.id"), nullable=False)
    last_viewed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "exercise_id", name="uq_view_user_exercise"),
    )

    def __repr__(self) -> str:
        return f"<View(user_id={self.user_id}, exercise_id={self.exercise_id})>"
