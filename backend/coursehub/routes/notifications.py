"""
CourseHub Backend: Notification Route Handlers
==============================================

What:  /api/notifications endpoints: the caller's feed and read state.
Who:   The LMS web client and `coursehub.client.NotificationsClient`.

Every route is scoped to the authenticated user; another user's
notification answers 404.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.config import settings
from coursehub.database import get_db_session
from coursehub.models.user import User
from coursehub.schemas.common import (
    DataResponse,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
)
from coursehub.schemas.notification import (
    MarkAllReadResult,
    NotificationResponse,
    NotificationUnreadCount,
)
from coursehub.security import get_current_user
from coursehub.services.notification_service import notification_service

router = APIRouter(
    prefix="/api/notifications",
    tags=["Notifications"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get(
    "",
    response_model=PaginatedResponse[NotificationResponse],
    summary="Your notifications, newest first",
)
@router.get("/", response_model=PaginatedResponse[NotificationResponse], include_in_schema=False)
async def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    unread_only: bool = Query(default=False),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[NotificationResponse]:
    items, pagination = await notification_service.list_for_user(
        db, user, page=page, limit=limit, unread_only=unread_only
    )
    return PaginatedResponse(data=items, pagination=pagination)


@router.get(
    "/unread-count",
    response_model=DataResponse[NotificationUnreadCount],
    summary="Number of unread notifications",
)
async def get_unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[NotificationUnreadCount]:
    count = await notification_service.unread_count(db, user)
    return DataResponse(data=NotificationUnreadCount(unread_count=count))


@router.put(
    "/read-all",
    response_model=DataResponse[MarkAllReadResult],
    summary="Mark every notification read",
)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[MarkAllReadResult]:
    updated = await notification_service.mark_all_read(db, user)
    return DataResponse(data=MarkAllReadResult(updated=updated))


@router.put(
    "/{notification_id}/read",
    response_model=DataResponse[NotificationResponse],
    responses={404: {"description": "Notification not found", "model": ErrorResponse}},
    summary="Mark one notification read",
)
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[NotificationResponse]:
    notification = await notification_service.mark_read(db, user, notification_id)
    return DataResponse(data=notification)


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Notification not found", "model": ErrorResponse}},
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await notification_service.delete(db, user, notification_id)
    return MessageResponse(message="Notification deleted successfully")
