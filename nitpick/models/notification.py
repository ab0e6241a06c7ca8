"""
Notification records.

Delivery lives elsewhere; this model exists so notifications tagged to a
submission can be removed together with it.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index

from nitpick.database import Base

SUBMISSION_ITEM_TYPE = "Submission"


class Notification(Base):
    """
    Attributes:
        id: Primary key
        user_id: Recipient
        item_type: Kind of record the notification points at
        item_id: Id of that record
        regarding: Short reason, e.g. "like" or "nitpick"
        read: Whether the recipient has seen it
        created_at: Creation timestamp
    """
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_type = Column(String(50), nullable=False)
    item_id = Column(Integer, nullable=False)
    regarding = Column(String(50), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_notifications_item", "item_type", "item_id"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, item_type='{self.item_type}', item_id={self.item_id})>"
