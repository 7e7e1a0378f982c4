"""
CourseHub Backend: Forum Schemas
================================

What:  Request bodies and response payloads for /api/forum.
Who:   Route handlers (validation) and ForumService (response building).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from coursehub.models.forum import PostCategory, PostStatus
from coursehub.schemas.common import Attachment, CourseRef, UserRef


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    cleaned: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _require_text(v: Optional[str]) -> Optional[str]:
    """Strips surrounding whitespace and rejects blank text; None passes through."""
    if v is None:
        return None
    stripped = v.strip()
    if not stripped:
        raise ValueError("Field cannot be blank")
    return stripped


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreateRequest(BaseModel):
    course_id: uuid.UUID
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    category: PostCategory = PostCategory.GENERAL
    tags: List[str] = Field(default_factory=list, max_length=20)
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Strips whitespace, drops empty and duplicate tags (order kept)."""
        return _clean_tags(v)


class PostUpdateRequest(BaseModel):
    """Partial update: fields left out keep their current value."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[PostCategory] = None
    tags: Optional[List[str]] = Field(default=None, max_length=20)
    attachments: Optional[List[Attachment]] = None

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Strips whitespace, drops empty and duplicate tags (order kept)."""
        return _clean_tags(v)


class AnnouncementCreateRequest(BaseModel):
    course_id: uuid.UUID
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _require_text(v)


class ReplyCreateRequest(BaseModel):
    content: str = Field(min_length=1)
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return _require_text(v)


class ReplyUpdateRequest(BaseModel):
    content: str = Field(min_length=1)
    # None keeps the current attachments
    attachments: Optional[List[Attachment]] = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return _require_text(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReplyResponse(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    author: UserRef
    content: str
    attachments: List[Attachment]
    likes: List[uuid.UUID] = Field(description="IDs of users who liked the reply")
    like_count: int
    created_at: datetime
    updated_at: datetime


class PostResponse(BaseModel):
    """
    Full forum post with its populated author, course and replies.

    `course` is null only if the course row vanished underneath the post.
    """
    id: uuid.UUID
    course_id: uuid.UUID
    course: Optional[CourseRef] = None
    author: UserRef
    title: str
    content: str
    category: PostCategory
    tags: List[str]
    attachments: List[Attachment]
    likes: List[uuid.UUID] = Field(description="IDs of users who liked the post")
    like_count: int
    replies: List[ReplyResponse]
    reply_count: int
    is_announcement: bool
    is_pinned: bool
    status: PostStatus
    created_at: datetime
    updated_at: datetime


class LikeResult(BaseModel):
    likes: int = Field(description="Like count after the toggle")
    is_liked: bool = Field(description="Whether the caller now likes the target")


class PinResult(BaseModel):
    is_pinned: bool
