"""
CourseHub Backend: Forum Route Handlers
=======================================

What:  /api/forum endpoints for posts, replies, likes, pins and announcements.
How:   Thin handlers: authenticate, parse input, delegate to ForumService,
       wrap the result in a response envelope.
Who:   The LMS web client and `coursehub.client.ForumClient`.

Route order matters: the literal paths (/all, /my-posts, /announcements,
/course/...) are registered before /{post_id} so they are not captured
by it.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.config import settings
from coursehub.database import get_db_session
from coursehub.models.forum import PostCategory
from coursehub.models.user import User, UserRole
from coursehub.schemas.common import (
    DataResponse,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
)
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
from coursehub.security import get_current_user, require_roles
from coursehub.services.forum_service import forum_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/api/forum",
    tags=["Forum"],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not allowed", "model": ErrorResponse},
    },
)

# ══════════════════════════════════════════════════════════════════════════
# Collection routes
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/create",
    response_model=DataResponse[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Course not found", "model": ErrorResponse}},
    summary="Create a forum post",
)
async def create_post(
    body: PostCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[PostResponse]:
    post = await forum_service.create_post(db, user, body)
    return DataResponse(data=post)


@router.get(
    "/all",
    response_model=PaginatedResponse[PostResponse],
    summary="List every post (instructors)",
)
async def get_all_posts(
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(default=None, max_length=200, description="Text search"),
    user: User = Depends(require_roles(UserRole.INSTRUCTOR)),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[PostResponse]:
    posts, pagination = await forum_service.get_all_posts(db, page, limit, search)
    return PaginatedResponse(data=posts, pagination=pagination)


@router.get(
    "/course/{course_id}",
    response_model=PaginatedResponse[PostResponse],
    responses={404: {"description": "Course not found", "model": ErrorResponse}},
    summary="List a course's discussions (pinned first)",
)
async def get_course_discussions(
    course_id: UUID,
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    category: Optional[PostCategory] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=200, description="Text search"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[PostResponse]:
    posts, pagination = await forum_service.get_course_discussions(
        db, user, course_id, page=page, limit=limit, category=category, search=search
    )
    return PaginatedResponse(data=posts, pagination=pagination)


@router.get(
    "/my-posts",
    response_model=PaginatedResponse[PostResponse],
    summary="List the caller's own posts",
)
async def get_my_posts(
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[PostResponse]:
    posts, pagination = await forum_service.get_my_posts(db, user, page, limit)
    return PaginatedResponse(data=posts, pagination=pagination)


@router.get(
    "/announcements",
    response_model=DataResponse[list[PostResponse]],
    summary="List announcements (one course, or all of the caller's courses)",
)
async def get_announcements(
    course_id: Optional[UUID] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[list[PostResponse]]:
    posts = await forum_service.get_announcements(db, user, course_id)
    return DataResponse(data=posts)


@router.post(
    "/announcement",
    response_model=DataResponse[PostResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Course not found", "model": ErrorResponse}},
    summary="Post an announcement to a course you teach",
)
async def create_announcement(
    body: AnnouncementCreateRequest,
    user: User = Depends(require_roles(UserRole.INSTRUCTOR)),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[PostResponse]:
    post = await forum_service.create_announcement(db, user, body)
    return DataResponse(data=post)


# ══════════════════════════════════════════════════════════════════════════
# Single-post routes
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/{post_id}",
    response_model=DataResponse[PostResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a post with its replies",
)
async def get_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[PostResponse]:
    post = await forum_service.get_post(db, user, post_id)
    return DataResponse(data=post)


@router.put(
    "/{post_id}",
    response_model=DataResponse[PostResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Update your post",
)
async def update_post(
    post_id: UUID,
    body: PostUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[PostResponse]:
    post = await forum_service.update_post(db, user, post_id, body)
    return DataResponse(data=post)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Delete a post (author or course instructor)",
)
async def delete_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await forum_service.delete_post(db, user, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.put(
    "/{post_id}/pin",
    response_model=DataResponse[PinResult],
    summary="Pin or unpin a post (course instructor)",
)
async def toggle_pin(
    post_id: UUID,
    user: User = Depends(require_roles(UserRole.INSTRUCTOR)),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[PinResult]:
    result = await forum_service.toggle_pin(db, user, post_id)
    return DataResponse(data=result)


@router.post(
    "/{post_id}/like",
    response_model=DataResponse[LikeResult],
    summary="Like or unlike a post",
)
async def toggle_post_like(
    post_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[LikeResult]:
    result = await forum_service.toggle_post_like(db, user, post_id)
    return DataResponse(data=result)


# ── Replies ───────────────────────────────────────────────────────────────


@router.post(
    "/{post_id}/reply",
    response_model=DataResponse[ReplyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Reply to a post",
)
async def add_reply(
    post_id: UUID,
    body: ReplyCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[ReplyResponse]:
    reply = await forum_service.add_reply(db, user, post_id, body)
    return DataResponse(data=reply)


@router.put(
    "/{post_id}/reply/{reply_id}",
    response_model=DataResponse[ReplyResponse],
    summary="Edit your reply",
)
async def update_reply(
    post_id: UUID,
    reply_id: UUID,
    body: ReplyUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[ReplyResponse]:
    reply = await forum_service.update_reply(db, user, post_id, reply_id, body)
    return DataResponse(data=reply)


@router.delete(
    "/{post_id}/reply/{reply_id}",
    response_model=MessageResponse,
    summary="Delete a reply (author or course instructor)",
)
async def delete_reply(
    post_id: UUID,
    reply_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await forum_service.delete_reply(db, user, post_id, reply_id)
    return MessageResponse(message="Reply deleted successfully")


@router.post(
    "/{post_id}/reply/{reply_id}/like",
    response_model=DataResponse[LikeResult],
    summary="Like or unlike a reply",
)
async def toggle_reply_like(
    post_id: UUID,
    reply_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[LikeResult]:
    result = await forum_service.toggle_reply_like(db, user, post_id, reply_id)
    return DataResponse(data=result)
