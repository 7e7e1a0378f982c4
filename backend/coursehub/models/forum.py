"""
CourseHub Backend: Forum Models
===============================

What:  ORM models for course discussion posts, their replies, and likes.
Who:   Used by ForumService; read by Alembic for migrations.

Table Design:
    - forum_posts:        one row per thread starter (question, general post,
                          or announcement), scoped to a course
    - forum_replies:      flat list of replies under a post, oldest first
    - forum_post_likes /
      forum_reply_likes:  one row per (target, user); the unique constraint
                          makes a like a set membership, so toggling is
                          insert-or-delete

    Tags and attachments are small, always read with their post and never
    queried on their own, so they live in JSON columns.

Cascades:
    Deleting a post removes its replies and both kinds of likes; deleting a
    reply removes its likes. Cascades are ORM-level (delete-orphan), so the
    collections must be loaded before a delete (ForumService does this).
"""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursehub.database import Base
from coursehub.models.user import utcnow

if TYPE_CHECKING:
    from coursehub.models.user import Course, User


class PostCategory(str, enum.Enum):
    GENERAL = "General"
    QUESTION = "Question"
    ANNOUNCEMENT = "Announcement"


class PostStatus(str, enum.Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"
    HIDDEN = "Hidden"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ForumPost(Base):
    """
    A discussion thread in a course.

    Lifecycle:
        1. Created by a student (General/Question) or the course
           instructor (Announcement)
        2. Edited in place by its author; pinned/unpinned by the instructor
        3. Replies and likes accumulate underneath
        4. Deleted by its author or the course instructor
    """

    __tablename__ = "forum_posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[PostCategory] = mapped_column(
        Enum(
            PostCategory,
            name="post_category",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=PostCategory.GENERAL,
    )
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # List of {"filename": ..., "url": ...}
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_announcement: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[PostStatus] = mapped_column(
        Enum(
            PostStatus,
            name="post_status",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=PostStatus.ACTIVE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    course: Mapped["Course"] = relationship()
    author: Mapped["User"] = relationship(back_populates="forum_posts")
    replies: Mapped[List["ForumReply"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="ForumReply.created_at",
    )
    likes: Mapped[List["ForumPostLike"]] = relationship(
        cascade="all, delete-orphan",
        order_by="ForumPostLike.created_at",
    )

    # Course discussions: WHERE course_id = ? ORDER BY is_pinned DESC, created_at DESC
    __table_args__ = (
        Index("idx_forum_posts_course_pinned_created", "course_id", "is_pinned", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ForumPost(id={self.id}, title='{self.title[:30]}')>"


class ForumReply(Base):
    """A reply under a forum post."""

    __tablename__ = "forum_replies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    post: Mapped["ForumPost"] = relationship(back_populates="replies")
    author: Mapped["User"] = relationship()
    likes: Mapped[List["ForumReplyLike"]] = relationship(
        cascade="all, delete-orphan",
        order_by="ForumReplyLike.created_at",
    )

    def __repr__(self) -> str:
        return f"<ForumReply(id={self.id}, post_id={self.post_id})>"


class ForumPostLike(Base):
    __tablename__ = "forum_post_likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_forum_post_like"),)


class ForumReplyLike(Base):
    __tablename__ = "forum_reply_likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reply_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("forum_replies.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (UniqueConstraint("reply_id", "user_id", name="uq_forum_reply_like"),)
