"""
CourseHub Backend: Forum Service (Business Logic Orchestrator)
==============================================================

What:  Course discussion threads: posts, replies, likes, pins and
       instructor announcements, plus the notifications they trigger.
How:   Stateless service; every method receives the request's AsyncSession
       and the authenticated `User`. Authorization is checked here, not in
       the routes, so the rules live next to the data they protect.
Who:   /api/forum route handlers.

Authorization rules:
    read / reply / like      → member of the post's course
    update post / reply      → author only
    delete post / reply      → author or the course instructor
    pin / unpin              → the course instructor
    category Announcement    → instructors only; instructors post nothing else

Loading strategy:
    Async sessions cannot lazy-load, so every post is fetched with its
    author, course, likes and replies (with their authors and likes)
    eagerly via selectinload. After a mutation the post is re-fetched with
    populate_existing so the response reflects the flushed state.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coursehub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from coursehub.models.forum import (
    ForumPost,
    ForumPostLike,
    ForumReply,
    ForumReplyLike,
    PostCategory,
)
from coursehub.models.notification import NotificationType
from coursehub.models.user import User, utcnow
from coursehub.schemas.common import Attachment, CourseRef, Pagination, UserRef
from coursehub.schemas.forum import (
    AnnouncementCreateRequest,
    LikeResult,
    PinResult,
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
    ReplyCreateRequest,
    ReplyResponse,
    ReplyUpdateRequest,
)
from coursehub.services.course_service import course_service
from coursehub.services.notification_service import notification_service
from coursehub.services.pagination import paginate, search_clause

logger = logging.getLogger(__name__)


def _post_options():
    return (
        selectinload(ForumPost.author),
        selectinload(ForumPost.course),
        selectinload(ForumPost.likes),
        selectinload(ForumPost.replies).selectinload(ForumReply.author),
        selectinload(ForumPost.replies).selectinload(ForumReply.likes),
    )


# ── Response builders ─────────────────────────────────────────────────────


def _user_ref(user: User) -> UserRef:
    return UserRef(id=user.id, name=user.name, email=user.email, role=user.role)


def _attachments(raw: Optional[list]) -> List[Attachment]:
    return [Attachment(**a) for a in (raw or [])]


def _dump_attachments(attachments: List[Attachment]) -> list:
    return [a.model_dump() for a in attachments]


def build_reply_response(reply: ForumReply) -> ReplyResponse:
    likes = [like.user_id for like in reply.likes]
    return ReplyResponse(
        id=reply.id,
        post_id=reply.post_id,
        author=_user_ref(reply.author),
        content=reply.content,
        attachments=_attachments(reply.attachments),
        likes=likes,
        like_count=len(likes),
        created_at=reply.created_at,
        updated_at=reply.updated_at,
    )


def build_post_response(post: ForumPost) -> PostResponse:
    likes = [like.user_id for like in post.likes]
    replies = [build_reply_response(r) for r in post.replies]
    return PostResponse(
        id=post.id,
        course_id=post.course_id,
        course=CourseRef(id=post.course.id, title=post.course.title) if post.course else None,
        author=_user_ref(post.author),
        title=post.title,
        content=post.content,
        category=post.category,
        tags=list(post.tags or []),
        attachments=_attachments(post.attachments),
        likes=likes,
        like_count=len(likes),
        replies=replies,
        reply_count=len(replies),
        is_announcement=post.is_announcement,
        is_pinned=post.is_pinned,
        status=post.status,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


class ForumService:
    """
    Business logic layer for the course forum.

    Every public method returns response models (never ORM rows) so route
    handlers only wrap them in envelopes.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Internal helpers
    # ══════════════════════════════════════════════════════════════════════

    async def _get_post(self, db: AsyncSession, post_id: uuid.UUID) -> ForumPost:
        result = await db.execute(
            select(ForumPost)
            .options(*_post_options())
            .where(ForumPost.id == post_id)
            .execution_options(populate_existing=True)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    @staticmethod
    def _find_reply(post: ForumPost, reply_id: uuid.UUID) -> ForumReply:
        for reply in post.replies:
            if reply.id == reply_id:
                return reply
        raise NotFoundError(resource="reply", resource_id=str(reply_id))

    @staticmethod
    def _check_category(user: User, category: PostCategory) -> None:
        """Instructors post only announcements; only instructors post them."""
        if user.is_instructor and category != PostCategory.ANNOUNCEMENT:
            raise ValidationError(
                message=(
                    "Instructors can only create announcements. "
                    "To answer questions, reply to a student post."
                ),
                field="category",
            )
        if not user.is_instructor and category == PostCategory.ANNOUNCEMENT:
            raise ValidationError(
                message="Only instructors can create announcements.", field="category"
            )

    async def _posts_page(
        self,
        db: AsyncSession,
        where: list,
        page: int,
        limit: int,
        pinned_first: bool = False,
    ) -> Tuple[List[PostResponse], Pagination]:
        order_by = [ForumPost.created_at.desc()]
        if pinned_first:
            order_by.insert(0, ForumPost.is_pinned.desc())
        posts, pagination = await paginate(
            db,
            ForumPost,
            where=where,
            order_by=order_by,
            options=_post_options(),
            page=page,
            limit=limit,
        )
        return [build_post_response(p) for p in posts], pagination

    # ══════════════════════════════════════════════════════════════════════
    # Posts
    # ══════════════════════════════════════════════════════════════════════

    async def create_post(
        self, db: AsyncSession, user: User, data: PostCreateRequest
    ) -> PostResponse:
        """
        Create a post in a course the caller belongs to.

        Side effect: the course instructor is notified (Forum Post) unless
        they wrote the post themselves.

        Raises:
            NotFoundError: unknown course
            PermissionDeniedError: not a member of the course
            ValidationError: category not allowed for the caller's role
        """
        # ── Step 1: Resolve course and check access ──────────────────────
        course = await course_service.get_course(db, data.course_id)
        await course_service.ensure_member(db, course, user)
        self._check_category(user, data.category)

        # ── Step 2: Persist ──────────────────────────────────────────────
        post = ForumPost(
            course_id=course.id,
            author_id=user.id,
            title=data.title,
            content=data.content,
            category=data.category,
            tags=list(data.tags),
            attachments=_dump_attachments(data.attachments),
            is_announcement=data.category == PostCategory.ANNOUNCEMENT,
        )
        db.add(post)
        await db.flush()
        logger.info("Post %s created in course %s by %s", post.id, course.id, user.id)

        # ── Step 3: Notify the instructor ────────────────────────────────
        if course.instructor_id != user.id:
            await notification_service.notify(
                db,
                course.instructor_id,
                f'New post in {course.title} by {user.username}: "{data.title}"',
                NotificationType.FORUM_POST,
            )

        return build_post_response(await self._get_post(db, post.id))

    async def get_all_posts(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> Tuple[List[PostResponse], Pagination]:
        """Every post in every course, newest first (instructor dashboard)."""
        where = [search_clause(search, ForumPost.title, ForumPost.content)]
        return await self._posts_page(db, where, page, limit)

    async def get_post(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> PostResponse:
        post = await self._get_post(db, post_id)
        await course_service.ensure_member(
            db, post.course, user, message="You do not have access to this post"
        )
        return build_post_response(post)

    async def update_post(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        data: PostUpdateRequest,
    ) -> PostResponse:
        """
        Author-only partial update; omitted fields keep their values.

        Changing the category obeys the same role rule as creation and keeps
        `is_announcement` in step with it.
        """
        post = await self._get_post(db, post_id)
        if post.author_id != user.id:
            raise PermissionDeniedError(message="You are not authorized to update this post")

        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError(message="No fields to update")

        if "category" in changes:
            self._check_category(user, data.category)
            post.category = data.category
            post.is_announcement = data.category == PostCategory.ANNOUNCEMENT
        if data.title is not None:
            post.title = data.title
        if data.content is not None:
            post.content = data.content
        if data.tags is not None:
            post.tags = list(data.tags)
        if data.attachments is not None:
            post.attachments = _dump_attachments(data.attachments)
        post.updated_at = utcnow()

        await db.flush()
        logger.info("Post %s updated by %s (%s)", post.id, user.id, ", ".join(sorted(changes)))
        return build_post_response(await self._get_post(db, post.id))

    async def delete_post(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> None:
        """Remove a post with all of its replies and likes."""
        post = await self._get_post(db, post_id)
        if post.author_id != user.id and post.course.instructor_id != user.id:
            raise PermissionDeniedError(message="You are not authorized to delete this post")

        await db.delete(post)
        await db.flush()
        logger.info("Post %s deleted by %s", post_id, user.id)

    async def get_course_discussions(
        self,
        db: AsyncSession,
        user: User,
        course_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        category: Optional[PostCategory] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[PostResponse], Pagination]:
        """
        Posts of one course, pinned first then newest first.

        Filters:
            category: exact match
            search:   case-insensitive substring of title or content
        """
        course = await course_service.get_course(db, course_id)
        await course_service.ensure_member(db, course, user)

        where = [
            ForumPost.course_id == course.id,
            search_clause(search, ForumPost.title, ForumPost.content),
        ]
        if category is not None:
            where.append(ForumPost.category == category)
        return await self._posts_page(db, where, page, limit, pinned_first=True)

    async def get_my_posts(
        self, db: AsyncSession, user: User, page: int = 1, limit: int = 10
    ) -> Tuple[List[PostResponse], Pagination]:
        return await self._posts_page(db, [ForumPost.author_id == user.id], page, limit)

    # ── Likes & pins ──────────────────────────────────────────────────────

    async def toggle_post_like(
        self, db: AsyncSession, user: User, post_id: uuid.UUID
    ) -> LikeResult:
        post = await self._get_post(db, post_id)
        await course_service.ensure_member(
            db, post.course, user, message="You do not have access to this post"
        )

        existing = next((like for like in post.likes if like.user_id == user.id), None)
        if existing is not None:
            post.likes.remove(existing)
        else:
            post.likes.append(ForumPostLike(user_id=user.id))
        await db.flush()
        return LikeResult(likes=len(post.likes), is_liked=existing is None)

    async def toggle_pin(self, db: AsyncSession, user: User, post_id: uuid.UUID) -> PinResult:
        post = await self._get_post(db, post_id)
        if post.course.instructor_id != user.id:
            raise PermissionDeniedError(message="Only instructors can pin/unpin posts")

        post.is_pinned = not post.is_pinned
        await db.flush()
        logger.info("Post %s %s by %s", post.id, "pinned" if post.is_pinned else "unpinned",
                    user.id)
        return PinResult(is_pinned=post.is_pinned)

    # ══════════════════════════════════════════════════════════════════════
    # Announcements
    # ══════════════════════════════════════════════════════════════════════

    async def get_announcements(
        self,
        db: AsyncSession,
        user: User,
        course_id: Optional[uuid.UUID] = None,
    ) -> List[PostResponse]:
        """
        Announcement posts, newest first.

        With `course_id`: that course (membership required). Without: every
        course the caller teaches or is enrolled in.
        """
        if course_id is not None:
            course = await course_service.get_course(db, course_id)
            await course_service.ensure_member(db, course, user)
            scope = ForumPost.course_id == course.id
        else:
            course_ids = await course_service.member_course_ids(db, user)
            if not course_ids:
                return []
            scope = ForumPost.course_id.in_(course_ids)

        result = await db.execute(
            select(ForumPost)
            .options(*_post_options())
            .where(scope, ForumPost.category == PostCategory.ANNOUNCEMENT)
            .order_by(ForumPost.created_at.desc())
        )
        return [build_post_response(p) for p in result.scalars().all()]

    async def create_announcement(
        self, db: AsyncSession, user: User, data: AnnouncementCreateRequest
    ) -> PostResponse:
        """
        Post an announcement to a course the caller instructs.

        Side effects:
            every enrolled student  → "New announcement in ..."       (Announcement)
            the instructor          → "You created a new announcement" (Announcement)
        """
        course = await course_service.get_course(db, data.course_id, with_members=True)
        if course.instructor_id != user.id:
            raise PermissionDeniedError(message="Only instructors can create announcements")

        post = ForumPost(
            course_id=course.id,
            author_id=user.id,
            title=data.title,
            content=data.content,
            category=PostCategory.ANNOUNCEMENT,
            tags=[],
            attachments=_dump_attachments(data.attachments),
            is_announcement=True,
        )
        db.add(post)
        await db.flush()

        student_ids = [s.id for s in course.enrolled_students if s.id != user.id]
        await notification_service.notify_many(
            db,
            student_ids,
            f'New announcement in {course.title}: "{data.title}"',
            NotificationType.ANNOUNCEMENT,
        )
        await notification_service.notify(
            db,
            user.id,
            f'You created a new announcement in {course.title}: "{data.title}"',
            NotificationType.ANNOUNCEMENT,
        )
        logger.info("Announcement %s posted to course %s (%d students notified)",
                    post.id, course.id, len(student_ids))
        return build_post_response(await self._get_post(db, post.id))

    # ══════════════════════════════════════════════════════════════════════
    # Replies
    # ══════════════════════════════════════════════════════════════════════

    async def add_reply(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        data: ReplyCreateRequest,
    ) -> ReplyResponse:
        """
        Reply to a post in a course the caller belongs to.

        Side effect: the post author is notified (Forum Reply) unless they
        are replying to themselves.
        """
        post = await self._get_post(db, post_id)
        await course_service.ensure_member(
            db, post.course, user, message="You are not authorized to reply to this post"
        )

        reply = ForumReply(
            author_id=user.id,
            content=data.content,
            attachments=_dump_attachments(data.attachments),
        )
        post.replies.append(reply)
        await db.flush()

        if post.author_id != user.id:
            await notification_service.notify(
                db,
                post.author_id,
                f'You have a new reply on your post "{post.title}" from {user.username} '
                f"in {post.course.title}",
                NotificationType.FORUM_REPLY,
            )

        reply_id = reply.id
        post = await self._get_post(db, post_id)
        return build_reply_response(self._find_reply(post, reply_id))

    async def update_reply(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        reply_id: uuid.UUID,
        data: ReplyUpdateRequest,
    ) -> ReplyResponse:
        post = await self._get_post(db, post_id)
        reply = self._find_reply(post, reply_id)
        if reply.author_id != user.id:
            raise PermissionDeniedError(message="You are not authorized to update this reply")

        reply.content = data.content
        if data.attachments is not None:
            reply.attachments = _dump_attachments(data.attachments)
        reply.updated_at = utcnow()
        await db.flush()
        return build_reply_response(reply)

    async def delete_reply(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        reply_id: uuid.UUID,
    ) -> None:
        post = await self._get_post(db, post_id)
        reply = self._find_reply(post, reply_id)
        if reply.author_id != user.id and post.course.instructor_id != user.id:
            raise PermissionDeniedError(message="You are not authorized to delete this reply")

        post.replies.remove(reply)
        await db.flush()
        logger.info("Reply %s on post %s deleted by %s", reply_id, post_id, user.id)

    async def toggle_reply_like(
        self,
        db: AsyncSession,
        user: User,
        post_id: uuid.UUID,
        reply_id: uuid.UUID,
    ) -> LikeResult:
        post = await self._get_post(db, post_id)
        reply = self._find_reply(post, reply_id)
        await course_service.ensure_member(
            db, post.course, user, message="You do not have access to this post"
        )

        existing = next((like for like in reply.likes if like.user_id == user.id), None)
        if existing is not None:
            reply.likes.remove(existing)
        else:
            reply.likes.append(ForumReplyLike(user_id=user.id))
        await db.flush()
        return LikeResult(likes=len(reply.likes), is_liked=existing is None)


forum_service = ForumService()
