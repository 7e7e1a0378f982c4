"""
CourseHub Backend: Course Lookup & Membership
=============================================

What:  Resolves course references and answers "may this user see this
       course?" for the forum and chat services.
Who:   ForumService, ChatService.

Membership:
    member(course, user) ⇔ user is course.instructor or enrolled in course
"""

import logging
import uuid
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coursehub.exceptions import NotFoundError, PermissionDeniedError
from coursehub.models.user import Course, User, course_enrollments

logger = logging.getLogger(__name__)


class CourseService:
    """Read-only access to courses and their members."""

    async def get_course(
        self,
        db: AsyncSession,
        course_id: uuid.UUID,
        with_members: bool = False,
    ) -> Course:
        """
        Fetch a course or raise NotFoundError("Course not found").

        with_members=True also loads `instructor` and `enrolled_students`
        (needed for fan-out and the chat participant list).
        """
        query = select(Course).where(Course.id == course_id)
        if with_members:
            query = query.options(
                selectinload(Course.instructor),
                selectinload(Course.enrolled_students),
            )
        result = await db.execute(query)
        course = result.scalar_one_or_none()
        if course is None:
            raise NotFoundError(resource="course", resource_id=str(course_id))
        return course

    async def is_member(self, db: AsyncSession, course: Course, user: User) -> bool:
        if course.instructor_id == user.id:
            return True
        result = await db.execute(
            select(course_enrollments.c.user_id).where(
                course_enrollments.c.course_id == course.id,
                course_enrollments.c.user_id == user.id,
            )
        )
        return result.first() is not None

    async def ensure_member(
        self,
        db: AsyncSession,
        course: Course,
        user: User,
        message: str = "You do not have access to this course",
    ) -> None:
        """Raise PermissionDeniedError(message) unless `user` is a member."""
        if not await self.is_member(db, course, user):
            logger.info("User %s denied access to course %s", user.id, course.id)
            raise PermissionDeniedError(
                message=message,
                context={"course_id": str(course.id), "user_id": str(user.id)},
            )

    async def member_course_ids(self, db: AsyncSession, user: User) -> List[uuid.UUID]:
        """IDs of every course the user instructs or is enrolled in."""
        enrolled = select(course_enrollments.c.course_id).where(
            course_enrollments.c.user_id == user.id
        )
        result = await db.execute(
            select(Course.id).where(
                or_(Course.instructor_id == user.id, Course.id.in_(enrolled))
            )
        )
        return list(result.scalars().all())

    @staticmethod
    def participants(course: Course) -> List[User]:
        """Instructor first, then enrolled students (course loaded with_members)."""
        members = [course.instructor]
        members.extend(s for s in course.enrolled_students if s.id != course.instructor_id)
        return members


course_service = CourseService()
