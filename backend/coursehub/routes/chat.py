"""
CourseHub Backend: Chat Route Handlers
======================================

What:  /api/chat endpoints for course-scoped direct messages.
Who:   The LMS web client and `coursehub.client.ChatClient`.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.config import settings
from coursehub.database import get_db_session
from coursehub.models.user import User
from coursehub.schemas.chat import (
    ChatMessageResponse,
    ConversationSummary,
    MessageSendRequest,
    UnreadCountResponse,
)
from coursehub.schemas.common import (
    DataResponse,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    UserRef,
)
from coursehub.security import get_current_user
from coursehub.services.chat_service import chat_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/chat",
    tags=["Chat"],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not a participant", "model": ErrorResponse},
        404: {"description": "Course, user or message not found", "model": ErrorResponse},
    },
)


@router.post(
    "/send",
    response_model=DataResponse[ChatMessageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Send a direct message within a course",
)
async def send_message(
    body: MessageSendRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[ChatMessageResponse]:
    message = await chat_service.send_message(db, user, body)
    return DataResponse(data=message)


@router.get(
    "/conversation/{course_id}/{user_id}",
    response_model=PaginatedResponse[ChatMessageResponse],
    summary="Messages between you and another user (oldest first)",
)
async def get_conversation(
    course_id: UUID,
    user_id: UUID,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.chat_page_size, ge=1, le=settings.max_page_size),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[ChatMessageResponse]:
    messages, pagination = await chat_service.get_conversation(
        db, user, course_id, user_id, page=page, limit=limit
    )
    return PaginatedResponse(data=messages, pagination=pagination)


@router.get(
    "/recent/{course_id}",
    response_model=DataResponse[list[ConversationSummary]],
    summary="Your conversations in a course, most recent first",
)
async def get_recent_conversations(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[list[ConversationSummary]]:
    conversations = await chat_service.get_recent_conversations(db, user, course_id)
    return DataResponse(data=conversations)


@router.put(
    "/read/{message_id}",
    response_model=DataResponse[ChatMessageResponse],
    summary="Mark a message sent to you as read",
)
async def mark_as_read(
    message_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[ChatMessageResponse]:
    message = await chat_service.mark_as_read(db, user, message_id)
    return DataResponse(data=message)


@router.get(
    "/unread",
    response_model=DataResponse[UnreadCountResponse],
    summary="Unread message count, total and per course",
)
async def get_unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[UnreadCountResponse]:
    counts = await chat_service.get_unread_count(db, user)
    return DataResponse(data=counts)


@router.get(
    "/participants/{course_id}",
    response_model=DataResponse[list[UserRef]],
    summary="People you can message in a course",
)
async def get_participants(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[list[UserRef]]:
    participants = await chat_service.get_participants(db, user, course_id)
    return DataResponse(data=participants)


@router.delete(
    "/{message_id}",
    response_model=MessageResponse,
    summary="Delete a message you sent",
)
async def delete_message(
    message_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await chat_service.delete_message(db, user, message_id)
    return MessageResponse(message="Message deleted successfully")
