"""
CourseHub Backend: Client SDK Tests
===================================

What:  CourseHubClient against the real app (in-process ASGI transport)
       and its retry policy against a scripted httpx.MockTransport.
"""

import httpx
import pytest
from httpx import ASGITransport

from coursehub.client import APIError, CourseHubClient
from coursehub.security import create_access_token


def _client(app, user=None, **kwargs) -> CourseHubClient:
    token = create_access_token(user) if user is not None else None
    return CourseHubClient("http://test", token=token, transport=ASGITransport(app=app),
                           **kwargs)


class TestClientAgainstApp:

    @pytest.mark.asyncio
    async def test_forum_round_trip(self, app, seed):
        async with _client(app, seed.student) as hub:
            created = await hub.forum.create_post(seed.course.id, "Lexer bug", "Tabs?",
                                                  tags=["lexer"])
            post_id = created["data"]["id"]

            fetched = await hub.forum.get_post(post_id)
            assert fetched["data"]["tags"] == ["lexer"]

            hub.token = create_access_token(seed.classmate)
            liked = await hub.forum.toggle_like(post_id)
            assert liked["data"] == {"likes": 1, "is_liked": True}

    @pytest.mark.asyncio
    async def test_error_envelope_becomes_api_error(self, app, seed):
        async with _client(app, seed.student) as hub:
            with pytest.raises(APIError) as exc_info:
                await hub.forum.list_all()

        error = exc_info.value
        assert error.status_code == 403
        assert error.error == "forbidden"
        assert error.message == "Access denied"
        assert error.request_id

    @pytest.mark.asyncio
    async def test_validation_error_details(self, app, seed):
        async with _client(app, seed.student) as hub:
            with pytest.raises(APIError) as exc_info:
                await hub.forum.create_post(seed.course.id, "t", "c", category="Announcement")

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"field": "category"}

    @pytest.mark.asyncio
    async def test_chat_and_notifications(self, app, seed):
        async with _client(app, seed.student) as hub:
            sent = await hub.chat.send(seed.course.id, seed.instructor.id, "Office hours?")
            assert sent["data"]["content"] == "Office hours?"

        async with _client(app, seed.instructor) as hub:
            unread = await hub.chat.unread_count()
            assert unread["data"]["unread_count"] == 1
            feed = await hub.notifications.list(unread_only=True)
            assert feed["data"] == []

    @pytest.mark.asyncio
    async def test_health(self, app):
        async with _client(app) as hub:
            body = await hub.health()
        assert body["status"] == "healthy"


class TestRetryPolicy:

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"success": True, "data": {"unread_count": 0}})

        async with CourseHubClient("http://hub", token="t", max_attempts=3,
                                   transport=httpx.MockTransport(handler)) as hub:
            body = await hub.notifications.unread_count()

        assert body["data"] == {"unread_count": 0}
        assert len(calls) == 2
        # Retries reuse the request ID so the server log shows one logical call
        assert calls[0].headers["X-Request-ID"] == calls[1].headers["X-Request-ID"]
        assert calls[0].headers["Authorization"] == "Bearer t"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        async with CourseHubClient("http://hub", max_attempts=1,
                                   transport=httpx.MockTransport(handler)) as hub:
            with pytest.raises(httpx.ConnectError):
                await hub.health()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_http_errors_are_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, json={
                "success": False, "error": "internal_error",
                "message": "An unexpected error occurred", "request_id": "abc123",
            })

        async with CourseHubClient("http://hub", transport=httpx.MockTransport(handler)) as hub:
            with pytest.raises(APIError) as exc_info:
                await hub.chat.send("c", "r", "hi")

        assert len(calls) == 1
        assert exc_info.value.request_id == "abc123"

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"success": True, "data": []})

        async with CourseHubClient("http://hub", transport=httpx.MockTransport(handler)) as hub:
            await hub.forum.course_discussions("abc", search=None, category="Question")

        assert seen["params"] == {"page": "1", "limit": "10", "category": "Question"}
