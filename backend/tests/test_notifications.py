"""
CourseHub Backend: Notification Tests
=====================================

What:  NotificationService fan-out/feed and the /api/notifications routes.
"""

from uuid import uuid4

import pytest

from coursehub.exceptions import NotFoundError
from coursehub.models import NotificationType
from coursehub.services.notification_service import NotificationService


class TestNotificationService:

    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_notify_many_and_feed(self, db_session, seed):
        await self.service.notify_many(
            db_session,
            [seed.student.id, seed.classmate.id],
            'New announcement in Compilers 101: "Quiz"',
            NotificationType.ANNOUNCEMENT,
        )
        await self.service.notify(
            db_session, seed.student.id, "Welcome aboard", NotificationType.WELCOME
        )

        items, pagination = await self.service.list_for_user(db_session, seed.student)

        assert pagination.total == 2
        assert {n.type for n in items} == {NotificationType.ANNOUNCEMENT, NotificationType.WELCOME}
        assert all(n.user_id == seed.student.id for n in items)
        assert await self.service.unread_count(db_session, seed.classmate) == 1

    @pytest.mark.asyncio
    async def test_notify_many_with_no_recipients(self, db_session, seed):
        created = await self.service.notify_many(
            db_session, [], "nobody", NotificationType.ANNOUNCEMENT
        )
        assert created == []

    @pytest.mark.asyncio
    async def test_mark_read_and_unread_filter(self, db_session, seed):
        first = await self.service.notify(
            db_session, seed.student.id, "one", NotificationType.FORUM_REPLY
        )
        await self.service.notify(db_session, seed.student.id, "two", NotificationType.FORUM_REPLY)

        marked = await self.service.mark_read(db_session, seed.student, first.id)
        assert marked.is_read is True

        unread, pagination = await self.service.list_for_user(
            db_session, seed.student, unread_only=True
        )
        assert [n.message for n in unread] == ["two"]
        assert pagination.total == 1

    @pytest.mark.asyncio
    async def test_foreign_notification_is_not_found(self, db_session, seed):
        theirs = await self.service.notify(
            db_session, seed.classmate.id, "private", NotificationType.FORUM_POST
        )

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.mark_read(db_session, seed.student, theirs.id)
        assert exc_info.value.message == "Notification not found"

        with pytest.raises(NotFoundError):
            await self.service.delete(db_session, seed.student, uuid4())

    @pytest.mark.asyncio
    async def test_mark_all_read(self, db_session, seed):
        for text in ("a", "b", "c"):
            await self.service.notify(db_session, seed.student.id, text,
                                      NotificationType.FORUM_REPLY)
        await self.service.notify(db_session, seed.classmate.id, "x",
                                  NotificationType.FORUM_REPLY)

        assert await self.service.mark_all_read(db_session, seed.student) == 3
        assert await self.service.unread_count(db_session, seed.student) == 0
        assert await self.service.unread_count(db_session, seed.classmate) == 1


class TestNotificationEndpoints:

    @pytest.mark.asyncio
    async def test_forum_activity_reaches_feed(self, test_client, seed, auth_headers):
        created = await test_client.post(
            "/api/forum/create",
            json={"course_id": str(seed.course.id), "title": "IR design", "content": "SSA?"},
            headers=auth_headers(seed.student),
        )
        assert created.status_code == 201

        count = await test_client.get("/api/notifications/unread-count",
                                      headers=auth_headers(seed.instructor))
        assert count.json()["data"] == {"unread_count": 1}

        feed = await test_client.get("/api/notifications/", headers=auth_headers(seed.instructor))
        body = feed.json()
        [notification] = body["data"]
        assert notification["type"] == "Forum Post"
        assert notification["message"] == 'New post in Compilers 101 by grace: "IR design"'
        assert body["pagination"] == {"total": 1, "page": 1, "pages": 1}

        read = await test_client.put(f"/api/notifications/{notification['id']}/read",
                                     headers=auth_headers(seed.instructor))
        assert read.json()["data"]["is_read"] is True

        deleted = await test_client.delete(f"/api/notifications/{notification['id']}",
                                           headers=auth_headers(seed.instructor))
        assert deleted.status_code == 200

    @pytest.mark.asyncio
    async def test_feed_served_with_and_without_trailing_slash(
        self, test_client, seed, auth_headers
    ):
        for path in ("/api/notifications", "/api/notifications/"):
            response = await test_client.get(path, headers=auth_headers(seed.student))
            assert response.status_code == 200, path
            assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_read_all_route(self, test_client, seed, auth_headers):
        await test_client.post(
            "/api/forum/announcement",
            json={"course_id": str(seed.course.id), "title": "Lab", "content": "Moved"},
            headers=auth_headers(seed.instructor),
        )

        response = await test_client.put("/api/notifications/read-all",
                                         headers=auth_headers(seed.student))
        assert response.status_code == 200
        assert response.json()["data"] == {"updated": 1}

    @pytest.mark.asyncio
    async def test_other_users_notification_is_404(self, test_client, seed, auth_headers):
        await test_client.post(
            "/api/forum/create",
            json={"course_id": str(seed.course.id), "title": "t", "content": "c"},
            headers=auth_headers(seed.student),
        )
        feed = await test_client.get("/api/notifications/", headers=auth_headers(seed.instructor))
        notification_id = feed.json()["data"][0]["id"]

        response = await test_client.put(f"/api/notifications/{notification_id}/read",
                                         headers=auth_headers(seed.student))
        assert response.status_code == 404
