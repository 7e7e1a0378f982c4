"""
CourseHub Backend: Chat Service
===============================

What:  Course-scoped direct messages between an instructor and students.
How:   Messages carry (course, sender, receiver). Both parties must be
       participants of the course; the conversation between A and B in a
       course is every message with {sender, receiver} = {A, B}.
Who:   /api/chat route handlers.

Participant rules:
    participants(course) = {instructor} ∪ enrolled students
    send      → sender and receiver ∈ participants, sender ≠ receiver
    read      → caller ∈ participants
    mark read → caller is the receiver
    delete    → caller is the sender
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coursehub.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from coursehub.models.chat import ChatMessage
from coursehub.models.user import User
from coursehub.schemas.chat import (
    ChatMessageResponse,
    ConversationSummary,
    MessageSendRequest,
    UnreadCountResponse,
)
from coursehub.schemas.common import Pagination, UserRef
from coursehub.services.course_service import course_service
from coursehub.services.pagination import paginate

logger = logging.getLogger(__name__)

_MESSAGE_OPTIONS = (
    selectinload(ChatMessage.sender),
    selectinload(ChatMessage.receiver),
)


def build_message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.id,
        course_id=message.course_id,
        sender=UserRef.model_validate(message.sender),
        receiver=UserRef.model_validate(message.receiver),
        content=message.content,
        is_read=message.is_read,
        read_at=message.read_at,
        created_at=message.created_at,
    )


class ChatService:
    """Business logic layer for course chat."""

    async def _get_message(self, db: AsyncSession, message_id: uuid.UUID) -> ChatMessage:
        result = await db.execute(
            select(ChatMessage)
            .options(*_MESSAGE_OPTIONS)
            .where(ChatMessage.id == message_id)
            .execution_options(populate_existing=True)
        )
        message = result.scalar_one_or_none()
        if message is None:
            raise NotFoundError(resource="message", resource_id=str(message_id))
        return message

    async def _get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def send_message(
        self, db: AsyncSession, user: User, data: MessageSendRequest
    ) -> ChatMessageResponse:
        """
        Send a direct message inside a course.

        Raises:
            ValidationError: messaging yourself
            NotFoundError: unknown course or receiver
            PermissionDeniedError: sender or receiver not in the course
        """
        if data.receiver_id == user.id:
            raise ValidationError(message="You cannot send a message to yourself",
                                  field="receiver_id")

        course = await course_service.get_course(db, data.course_id, with_members=True)
        participant_ids = {p.id for p in course_service.participants(course)}
        if user.id not in participant_ids:
            raise PermissionDeniedError(message="You are not a participant of this course")

        receiver = await self._get_user(db, data.receiver_id)
        if receiver.id not in participant_ids:
            raise PermissionDeniedError(message="Recipient is not a participant of this course")

        message = ChatMessage(
            course_id=course.id,
            sender_id=user.id,
            receiver_id=receiver.id,
            content=data.content,
            is_read=False,
        )
        db.add(message)
        await db.flush()
        logger.info("Message %s sent in course %s (%s → %s)", message.id, course.id,
                    user.id, receiver.id)
        return build_message_response(await self._get_message(db, message.id))

    async def get_conversation(
        self,
        db: AsyncSession,
        user: User,
        course_id: uuid.UUID,
        other_user_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[ChatMessageResponse], Pagination]:
        """Messages between the caller and another user, oldest first."""
        course = await course_service.get_course(db, course_id)
        await course_service.ensure_member(db, course, user)
        other = await self._get_user(db, other_user_id)

        between = or_(
            and_(ChatMessage.sender_id == user.id, ChatMessage.receiver_id == other.id),
            and_(ChatMessage.sender_id == other.id, ChatMessage.receiver_id == user.id),
        )
        messages, pagination = await paginate(
            db,
            ChatMessage,
            where=[ChatMessage.course_id == course.id, between],
            order_by=[ChatMessage.created_at.asc()],
            options=_MESSAGE_OPTIONS,
            page=page,
            limit=limit,
        )
        return [build_message_response(m) for m in messages], pagination

    async def get_recent_conversations(
        self, db: AsyncSession, user: User, course_id: uuid.UUID
    ) -> List[ConversationSummary]:
        """
        One entry per person the caller has exchanged messages with in the
        course: their latest message and how many of theirs are unread.
        Ordered by latest message, newest first.
        """
        course = await course_service.get_course(db, course_id)
        await course_service.ensure_member(db, course, user)

        result = await db.execute(
            select(ChatMessage)
            .options(*_MESSAGE_OPTIONS)
            .where(
                ChatMessage.course_id == course.id,
                or_(ChatMessage.sender_id == user.id, ChatMessage.receiver_id == user.id),
            )
            .order_by(ChatMessage.created_at.desc())
        )

        summaries: Dict[uuid.UUID, ConversationSummary] = {}
        for message in result.scalars().all():
            other = message.receiver if message.sender_id == user.id else message.sender
            summary = summaries.get(other.id)
            if summary is None:
                summary = ConversationSummary(
                    user=UserRef.model_validate(other),
                    last_message=build_message_response(message),
                    unread_count=0,
                )
                summaries[other.id] = summary
            if message.receiver_id == user.id and not message.is_read:
                summary.unread_count += 1
        return list(summaries.values())

    async def mark_as_read(
        self, db: AsyncSession, user: User, message_id: uuid.UUID
    ) -> ChatMessageResponse:
        message = await self._get_message(db, message_id)
        if message.receiver_id != user.id:
            raise PermissionDeniedError(message="You can only mark messages sent to you as read")

        if not message.is_read:
            message.is_read = True
            message.read_at = datetime.now(timezone.utc)
            await db.flush()
        return build_message_response(message)

    async def get_unread_count(self, db: AsyncSession, user: User) -> UnreadCountResponse:
        result = await db.execute(
            select(ChatMessage.course_id, func.count(ChatMessage.id))
            .where(ChatMessage.receiver_id == user.id, ChatMessage.is_read.is_(False))
            .group_by(ChatMessage.course_id)
        )
        by_course = {course_id: count for course_id, count in result.all()}
        return UnreadCountResponse(unread_count=sum(by_course.values()), by_course=by_course)

    async def delete_message(self, db: AsyncSession, user: User, message_id: uuid.UUID) -> None:
        message = await self._get_message(db, message_id)
        if message.sender_id != user.id:
            raise PermissionDeniedError(message="You can only delete your own messages")

        await db.delete(message)
        await db.flush()
        logger.info("Message %s deleted by %s", message_id, user.id)

    async def get_participants(
        self, db: AsyncSession, user: User, course_id: uuid.UUID
    ) -> List[UserRef]:
        """Everyone the caller can message in the course (excluding themselves)."""
        course = await course_service.get_course(db, course_id, with_members=True)
        await course_service.ensure_member(db, course, user)
        return [
            UserRef.model_validate(p)
            for p in course_service.participants(course)
            if p.id != user.id
        ]


chat_service = ChatService()
