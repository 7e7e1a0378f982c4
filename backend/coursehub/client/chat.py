"""Client for /api/chat."""

from typing import Any, Dict

from coursehub.client.base import APIClient

Envelope = Dict[str, Any]


class ChatClient:
    def __init__(self, api: APIClient):
        self._api = api

    async def send(self, course_id: Any, receiver_id: Any, content: str) -> Envelope:
        return await self._api.request(
            "POST",
            "/api/chat/send",
            json={
                "course_id": str(course_id),
                "receiver_id": str(receiver_id),
                "content": content,
            },
        )

    async def conversation(
        self, course_id: Any, user_id: Any, page: int = 1, limit: int = 50
    ) -> Envelope:
        return await self._api.request(
            "GET",
            f"/api/chat/conversation/{course_id}/{user_id}",
            params={"page": page, "limit": limit},
        )

    async def recent(self, course_id: Any) -> Envelope:
        return await self._api.request("GET", f"/api/chat/recent/{course_id}")

    async def mark_read(self, message_id: Any) -> Envelope:
        return await self._api.request("PUT", f"/api/chat/read/{message_id}")

    async def unread_count(self) -> Envelope:
        return await self._api.request("GET", "/api/chat/unread")

    async def delete(self, message_id: Any) -> Envelope:
        return await self._api.request("DELETE", f"/api/chat/{message_id}")

    async def participants(self, course_id: Any) -> Envelope:
        return await self._api.request("GET", f"/api/chat/participants/{course_id}")
