"""
CourseHub Backend: Notification Service
=======================================

What:  Writes notification rows (fan-out from forum activity) and serves
       each user's feed.
Who:   ForumService (notify / notify_many); /api/notifications routes.

Notifications are added to the caller's session and committed with the
action that caused them; there is no outbox or delivery guarantee.
"""

import logging
import uuid
from typing import Iterable, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.exceptions import NotFoundError
from coursehub.models.notification import Notification, NotificationType
from coursehub.models.user import User
from coursehub.schemas.common import Pagination
from coursehub.schemas.notification import NotificationResponse
from coursehub.services.pagination import paginate

logger = logging.getLogger(__name__)


class NotificationService:
    """Feed reads and writes, always scoped to the owning user."""

    # ── Writes used by other services ─────────────────────────────────────

    async def notify(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        message: str,
        type: NotificationType,
    ) -> Notification:
        notification = Notification(user_id=user_id, message=message, type=type, is_read=False)
        db.add(notification)
        await db.flush()
        logger.debug("Notification (%s) queued for user %s", type.value, user_id)
        return notification

    async def notify_many(
        self,
        db: AsyncSession,
        user_ids: Iterable[uuid.UUID],
        message: str,
        type: NotificationType,
    ) -> List[Notification]:
        notifications = [
            Notification(user_id=uid, message=message, type=type, is_read=False)
            for uid in user_ids
        ]
        if notifications:
            db.add_all(notifications)
            await db.flush()
            logger.info("Fan-out: %d %s notifications", len(notifications), type.value)
        return notifications

    # ── Feed ──────────────────────────────────────────────────────────────

    async def list_for_user(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: int = 10,
        unread_only: bool = False,
    ) -> Tuple[List[NotificationResponse], Pagination]:
        where = [Notification.user_id == user.id]
        if unread_only:
            where.append(Notification.is_read.is_(False))
        items, pagination = await paginate(
            db,
            Notification,
            where=where,
            order_by=[Notification.created_at.desc()],
            page=page,
            limit=limit,
        )
        return [NotificationResponse.model_validate(n) for n in items], pagination

    async def unread_count(self, db: AsyncSession, user: User) -> int:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user.id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def _get_owned(
        self, db: AsyncSession, user: User, notification_id: uuid.UUID
    ) -> Notification:
        # Someone else's notification is reported as missing, not forbidden
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user.id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))
        return notification

    async def mark_read(
        self, db: AsyncSession, user: User, notification_id: uuid.UUID
    ) -> NotificationResponse:
        notification = await self._get_owned(db, user, notification_id)
        notification.is_read = True
        await db.flush()
        return NotificationResponse.model_validate(notification)

    async def mark_all_read(self, db: AsyncSession, user: User) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user.id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("Marked %d notifications read for user %s", result.rowcount, user.id)
        return result.rowcount or 0

    async def delete(self, db: AsyncSession, user: User, notification_id: uuid.UUID) -> None:
        notification = await self._get_owned(db, user, notification_id)
        await db.delete(notification)
        await db.flush()


notification_service = NotificationService()
