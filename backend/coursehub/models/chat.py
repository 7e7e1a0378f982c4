"""
CourseHub Backend: Chat Message Model
=====================================

What:  ORM model for direct messages between two members of a course.
Who:   Used by ChatService.

Query Patterns:
    - Conversation:  WHERE course_id = ? AND {sender, receiver} = {me, them}
                     ORDER BY created_at
    - Unread count:  WHERE receiver_id = ? AND is_read = false
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursehub.database import Base
from coursehub.models.user import utcnow

if TYPE_CHECKING:
    from coursehub.models.user import Course, User


class ChatMessage(Base):
    """A single direct message inside a course."""

    __tablename__ = "chat_messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    receiver_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    course: Mapped["Course"] = relationship()
    sender: Mapped["User"] = relationship(foreign_keys=[sender_id])
    receiver: Mapped["User"] = relationship(foreign_keys=[receiver_id])

    __table_args__ = (
        Index("idx_chat_messages_course_sender_receiver", "course_id", "sender_id", "receiver_id"),
        Index("idx_chat_messages_receiver_unread", "receiver_id", "is_read"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChatMessage(id={self.id}, sender={self.sender_id}, "
            f"receiver={self.receiver_id}, read={self.is_read})>"
        )
