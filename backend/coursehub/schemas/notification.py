"""
CourseHub Backend: Notification Schemas
=======================================
"""

import uuid
from datetime import datetime

from pydantic import BaseModel

from coursehub.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationUnreadCount(BaseModel):
    unread_count: int


class MarkAllReadResult(BaseModel):
    updated: int
