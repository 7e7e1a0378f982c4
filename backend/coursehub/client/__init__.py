"""
CourseHub Client SDK
====================

Thin async client for the CourseHub API.

Usage:
    async with CourseHubClient("http://localhost:5000", token=token) as hub:
        page = await hub.forum.course_discussions(course_id, search="exam")
        await hub.chat.send(course_id, instructor_id, "Is Friday's lab still on?")
        unread = await hub.notifications.unread_count()

Every method returns the decoded JSON envelope ({"success": true, "data": ...}).
Non-2xx answers raise APIError.
"""

from typing import Any, Dict, Optional

import httpx

from coursehub.client.base import DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT, APIClient, APIError
from coursehub.client.chat import ChatClient
from coursehub.client.forum import ForumClient
from coursehub.client.notifications import NotificationsClient


class CourseHubClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api = APIClient(
            base_url,
            token=token,
            timeout=timeout,
            max_attempts=max_attempts,
            transport=transport,
        )
        self.forum = ForumClient(self._api)
        self.chat = ChatClient(self._api)
        self.notifications = NotificationsClient(self._api)

    @property
    def token(self) -> Optional[str]:
        return self._api.token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self._api.token = value

    async def health(self) -> Dict[str, Any]:
        return await self._api.request("GET", "/health")

    async def aclose(self) -> None:
        await self._api.aclose()

    async def __aenter__(self) -> "CourseHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = [
    "APIError",
    "ChatClient",
    "CourseHubClient",
    "ForumClient",
    "NotificationsClient",
]
