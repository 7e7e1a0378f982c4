"""
CourseHub Backend: Chat Schemas
===============================

What:  Request bodies and response payloads for /api/chat.
"""

import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from coursehub.schemas.common import UserRef


class MessageSendRequest(BaseModel):
    course_id: uuid.UUID
    receiver_id: uuid.UUID
    content: str = Field(min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Rejects whitespace-only messages."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Message content cannot be empty")
        return stripped


class ChatMessageResponse(BaseModel):
    id: uuid.UUID
    course_id: uuid.UUID
    sender: UserRef
    receiver: UserRef
    content: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class ConversationSummary(BaseModel):
    """One row of the recent-conversations list: the other person + latest message."""
    user: UserRef
    last_message: ChatMessageResponse
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
    by_course: Dict[uuid.UUID, int] = Field(default_factory=dict)
