"""
CourseHub Client: HTTP Core
===========================

What:  Async HTTP core shared by the forum, chat and notification clients.
How:   One httpx.AsyncClient per CourseHubClient. Every call sends the bearer
       token and an X-Request-ID, decodes the JSON envelope and raises
       APIError for non-2xx responses.

Retry policy:
    Transport failures (connect errors, timeouts, dropped connections) are
    retried with exponential backoff + jitter via tenacity. HTTP error
    responses are answers, not failures, and are never retried: a POST
    that reached the server must not be sent twice.
"""

import logging
import uuid
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_ATTEMPTS = 3


class APIError(Exception):
    """
    A non-2xx response from the CourseHub API.

    Attributes mirror the server's error envelope:
        status_code: HTTP status
        error:       machine-readable code ("forbidden", "not_found", ...)
        message:     human-readable description
        request_id:  correlation ID for the server log
        details:     extra context (validation field, retry_after), if any
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        request_id: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.request_id = request_id
        self.details = details or {}
        super().__init__(f"{status_code} {error}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        detail = body.get("detail")
        message = body.get("message")
        if message is None:
            # FastAPI's own 422 body: {"detail": [...]}
            message = detail if isinstance(detail, str) else response.reason_phrase
        return cls(
            status_code=response.status_code,
            error=body.get("error", "validation_error" if response.status_code == 422
                           else "http_error"),
            message=message,
            request_id=body.get("request_id") or response.headers.get("X-Request-ID", ""),
            details=body.get("details") or ({"errors": detail} if isinstance(detail, list)
                                            else None),
        )


class APIClient:
    """
    Low-level request helper; use CourseHubClient instead.

    Args:
        base_url:     Server root, e.g. "http://localhost:5000"
        token:        Bearer token (may be set later via `token`)
        timeout:      Per-request timeout in seconds
        max_attempts: Total tries per request for transport failures
        transport:    Optional httpx transport (e.g. ASGITransport in tests)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.max_attempts = max(1, max_attempts)
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "X-Request-ID": uuid.uuid4().hex[:8]}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Send one API call and return the decoded envelope.

        Raises:
            APIError: the server answered with a non-2xx status
            httpx.TransportError: still failing after `max_attempts` tries
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        headers = self._headers()

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=5, jitter=0.5),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                response = await self._http.request(
                    method, path, params=params, json=json, headers=headers
                )

        if response.is_error:
            error = APIError.from_response(response)
            logger.debug("%s %s failed: %s [%s]", method, path, error, error.request_id)
            raise error
        return response.json()
