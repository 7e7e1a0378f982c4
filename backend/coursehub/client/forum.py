"""Client for /api/forum."""

from typing import Any, Dict, List, Optional

from coursehub.client.base import APIClient

Envelope = Dict[str, Any]


class ForumClient:
    def __init__(self, api: APIClient):
        self._api = api

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(
        self,
        course_id: Any,
        title: str,
        content: str,
        category: str = "General",
        tags: Optional[List[str]] = None,
        attachments: Optional[List[Dict[str, str]]] = None,
    ) -> Envelope:
        return await self._api.request(
            "POST",
            "/api/forum/create",
            json={
                "course_id": str(course_id),
                "title": title,
                "content": content,
                "category": category,
                "tags": tags or [],
                "attachments": attachments or [],
            },
        )

    async def list_all(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None
    ) -> Envelope:
        return await self._api.request(
            "GET", "/api/forum/all", params={"page": page, "limit": limit, "search": search}
        )

    async def course_discussions(
        self,
        course_id: Any,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Envelope:
        return await self._api.request(
            "GET",
            f"/api/forum/course/{course_id}",
            params={"page": page, "limit": limit, "category": category, "search": search},
        )

    async def my_posts(self, page: int = 1, limit: int = 10) -> Envelope:
        return await self._api.request(
            "GET", "/api/forum/my-posts", params={"page": page, "limit": limit}
        )

    async def get_post(self, post_id: Any) -> Envelope:
        return await self._api.request("GET", f"/api/forum/{post_id}")

    async def update_post(self, post_id: Any, **changes: Any) -> Envelope:
        """Send only the given fields (title, content, category, tags, attachments)."""
        return await self._api.request("PUT", f"/api/forum/{post_id}", json=changes)

    async def delete_post(self, post_id: Any) -> Envelope:
        return await self._api.request("DELETE", f"/api/forum/{post_id}")

    async def toggle_like(self, post_id: Any) -> Envelope:
        return await self._api.request("POST", f"/api/forum/{post_id}/like")

    async def toggle_pin(self, post_id: Any) -> Envelope:
        return await self._api.request("PUT", f"/api/forum/{post_id}/pin")

    # ── Announcements ─────────────────────────────────────────────────────

    async def announcements(self, course_id: Optional[Any] = None) -> Envelope:
        params = {"course_id": str(course_id)} if course_id is not None else None
        return await self._api.request("GET", "/api/forum/announcements", params=params)

    async def create_announcement(
        self,
        course_id: Any,
        title: str,
        content: str,
        attachments: Optional[List[Dict[str, str]]] = None,
    ) -> Envelope:
        return await self._api.request(
            "POST",
            "/api/forum/announcement",
            json={
                "course_id": str(course_id),
                "title": title,
                "content": content,
                "attachments": attachments or [],
            },
        )

    # ── Replies ───────────────────────────────────────────────────────────

    async def add_reply(
        self,
        post_id: Any,
        content: str,
        attachments: Optional[List[Dict[str, str]]] = None,
    ) -> Envelope:
        return await self._api.request(
            "POST",
            f"/api/forum/{post_id}/reply",
            json={"content": content, "attachments": attachments or []},
        )

    async def update_reply(
        self,
        post_id: Any,
        reply_id: Any,
        content: str,
        attachments: Optional[List[Dict[str, str]]] = None,
    ) -> Envelope:
        body: Dict[str, Any] = {"content": content}
        if attachments is not None:
            body["attachments"] = attachments
        return await self._api.request(
            "PUT", f"/api/forum/{post_id}/reply/{reply_id}", json=body
        )

    async def delete_reply(self, post_id: Any, reply_id: Any) -> Envelope:
        return await self._api.request("DELETE", f"/api/forum/{post_id}/reply/{reply_id}")

    async def toggle_reply_like(self, post_id: Any, reply_id: Any) -> Envelope:
        return await self._api.request("POST", f"/api/forum/{post_id}/reply/{reply_id}/like")
