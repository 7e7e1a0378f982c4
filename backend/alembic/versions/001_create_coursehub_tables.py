"""Create CourseHub tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, courses, enrollments, forum posts/replies/likes,
       notifications and chat messages.
How:   Enum columns are VARCHAR + CHECK (native_enum=False in the models),
       so adding a value later is a CHECK change rather than an ALTER TYPE.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

POST_CATEGORIES = ("General", "Question", "Announcement")
POST_STATUSES = ("Active", "Archived", "Hidden")
NOTIFICATION_TYPES = (
    "Password Reset",
    "Email Verification",
    "Login Alert",
    "Assignment Due",
    "New Material",
    "Announcement",
    "Welcome",
    "Course Enrollment",
    "Assignment Graded",
    "Forum Reply",
    "Course Deletion",
    "Assignment Submitted",
    "New Course",
    "New Submission",
    "Course Created",
    "Student Enrolled",
    "Announcement Posted",
    "Course Updated",
    "Course Deleted",
    "Forum Post",
)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    # ── Users & courses ───────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(80), nullable=False, unique=True),
        sa.Column("name", sa.String(180), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "courses",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructor_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])

    op.create_table(
        "course_enrollments",
        sa.Column("course_id", sa.Uuid(), sa.ForeignKey("courses.id", ondelete="CASCADE"),
                  primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"),
                  primary_key=True),
        _timestamp("enrolled_at"),
    )

    # ── Forum ─────────────────────────────────────────────────────────────
    op.create_table(
        "forum_posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("course_id", sa.Uuid(), sa.ForeignKey("courses.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "category",
            sa.Enum(*POST_CATEGORIES, name="post_category", native_enum=False, length=20,
                    create_constraint=True),
            nullable=False,
            server_default="General",
        ),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("is_announcement", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "status",
            sa.Enum(*POST_STATUSES, name="post_status", native_enum=False, length=20,
                    create_constraint=True),
            nullable=False,
            server_default="Active",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_forum_posts_author_id", "forum_posts", ["author_id"])
    op.create_index(
        "idx_forum_posts_course_pinned_created",
        "forum_posts",
        ["course_id", "is_pinned", "created_at"],
    )

    op.create_table(
        "forum_replies",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("forum_posts.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("attachments", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_forum_replies_post_id", "forum_replies", ["post_id"])

    op.create_table(
        "forum_post_likes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("forum_posts.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("post_id", "user_id", name="uq_forum_post_like"),
    )

    op.create_table(
        "forum_reply_likes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("reply_id", sa.Uuid(), sa.ForeignKey("forum_replies.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("reply_id", "user_id", name="uq_forum_reply_like"),
    )

    # ── Notifications & chat ──────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*NOTIFICATION_TYPES, name="notification_type", native_enum=False,
                    length=40, create_constraint=True),
            nullable=False,
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("course_id", sa.Uuid(), sa.ForeignKey("courses.id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("sender_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("receiver_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index(
        "idx_chat_messages_course_sender_receiver",
        "chat_messages",
        ["course_id", "sender_id", "receiver_id"],
    )
    op.create_index(
        "idx_chat_messages_receiver_unread", "chat_messages", ["receiver_id", "is_read"]
    )


def downgrade() -> None:
    op.drop_table("chat_messages")
    op.drop_table("notifications")
    op.drop_table("forum_reply_likes")
    op.drop_table("forum_post_likes")
    op.drop_table("forum_replies")
    op.drop_table("forum_posts")
    op.drop_table("course_enrollments")
    op.drop_table("courses")
    op.drop_table("users")
