"""Client for /api/notifications."""

from typing import Any, Dict

from coursehub.client.base import APIClient

Envelope = Dict[str, Any]


class NotificationsClient:
    def __init__(self, api: APIClient):
        self._api = api

    async def list(self, page: int = 1, limit: int = 10, unread_only: bool = False) -> Envelope:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if unread_only:
            params["unread_only"] = "true"
        return await self._api.request("GET", "/api/notifications", params=params)

    async def unread_count(self) -> Envelope:
        return await self._api.request("GET", "/api/notifications/unread-count")

    async def mark_read(self, notification_id: Any) -> Envelope:
        return await self._api.request("PUT", f"/api/notifications/{notification_id}/read")

    async def mark_all_read(self) -> Envelope:
        return await self._api.request("PUT", "/api/notifications/read-all")

    async def delete(self, notification_id: Any) -> Envelope:
        return await self._api.request("DELETE", f"/api/notifications/{notification_id}")
