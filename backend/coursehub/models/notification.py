"""
CourseHub Backend: Notification Model
=====================================

What:  ORM model for the per-user notification feed.
Who:   Written by ForumService (fan-out on posts, replies, announcements)
       and by other LMS services sharing the table; read by NotificationService.

The type list is shared with those other services, which is why it names
events (grading, enrollment, ...) this backend never emits itself.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from coursehub.database import Base
from coursehub.models.user import utcnow


class NotificationType(str, enum.Enum):
    # Common
    PASSWORD_RESET = "Password Reset"
    EMAIL_VERIFICATION = "Email Verification"
    LOGIN_ALERT = "Login Alert"
    # Student
    ASSIGNMENT_DUE = "Assignment Due"
    NEW_MATERIAL = "New Material"
    ANNOUNCEMENT = "Announcement"
    WELCOME = "Welcome"
    COURSE_ENROLLMENT = "Course Enrollment"
    ASSIGNMENT_GRADED = "Assignment Graded"
    FORUM_REPLY = "Forum Reply"
    COURSE_DELETION = "Course Deletion"
    ASSIGNMENT_SUBMITTED = "Assignment Submitted"
    NEW_COURSE = "New Course"
    # Instructor
    NEW_SUBMISSION = "New Submission"
    COURSE_CREATED = "Course Created"
    STUDENT_ENROLLED = "Student Enrolled"
    ANNOUNCEMENT_POSTED = "Announcement Posted"
    COURSE_UPDATED = "Course Updated"
    COURSE_DELETED = "Course Deleted"
    FORUM_POST = "Forum Post"


class Notification(Base):
    """One entry in a user's notification feed."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        Enum(
            NotificationType,
            name="notification_type",
            native_enum=False,
            length=40,
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Feed query: WHERE user_id = ? ORDER BY created_at DESC
    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user={self.user_id}, type='{self.type.value}')>"
