"""
CourseHub Backend: User & Course Models
=======================================

What:  ORM models for the `users`, `courses` and `course_enrollments` tables.
Who:   Read by every service to resolve authors, roles, instructors and
       enrollment. Rows are written by the LMS's account and course services;
       this backend never exposes CRUD for them.

Membership:
    A user is a member of a course when they are its instructor or appear
    in `course_enrollments`. Forum reads/replies and chat are restricted to
    members (see services/course_service.py).
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coursehub.database import Base

if TYPE_CHECKING:
    from coursehub.models.forum import ForumPost


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


course_enrollments = Table(
    "course_enrollments",
    Base.metadata,
    Column("course_id", Uuid, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("enrolled_at", DateTime(timezone=True), default=utcnow, nullable=False),
)


class User(Base):
    """A platform account: student, instructor or admin."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(180), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # Stored lowercase; compare through has_role() since upstream
    # services have historically written "Instructor" as well.
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.STUDENT.value, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    instructed_courses: Mapped[List["Course"]] = relationship(back_populates="instructor")
    forum_posts: Mapped[List["ForumPost"]] = relationship(back_populates="author")

    def has_role(self, *roles: str) -> bool:
        wanted = {str(getattr(r, "value", r)).lower() for r in roles}
        return (self.role or "").lower() in wanted

    @property
    def is_instructor(self) -> bool:
        return self.has_role(UserRole.INSTRUCTOR)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class Course(Base):
    """A course: one instructor, any number of enrolled students."""

    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    instructor: Mapped["User"] = relationship(back_populates="instructed_courses")
    enrolled_students: Mapped[List["User"]] = relationship(
        secondary=course_enrollments, order_by="User.name"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}')>"
