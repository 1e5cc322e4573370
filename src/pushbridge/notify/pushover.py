"""Pushover delivery for due messages."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pushbridge.queue.types import QueuedMessage

logger = logging.getLogger(__name__)

PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"
DEFAULT_TIMEOUT = 10.0


class PushoverNotifier:
    """Sends a queued message through the Pushover messages API.

    Delivery is attempted once. Any failure is logged and reported as
    ``False``; nothing is raised to the caller.
    """

    def __init__(
        self,
        token: str,
        user: str,
        api_url: str = PUSHOVER_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._user = user
        self._api_url = api_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def build_payload(self, message: QueuedMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "token": self._token,
            "user": self._user,
            "message": message.message,
            # Pushover shows the due time rather than the send time.
            "timestamp": round(message.timestamp / 1000.0),
        }
        if message.title is not None:
            payload["title"] = message.title
        return payload

    async def deliver(self, message: QueuedMessage) -> bool:
        try:
            response = await self._client.post(
                self._api_url,
                json=self.build_payload(message),
            )
        except httpx.HTTPError as e:
            logger.error(
                "pushover_request_failed",
                extra={"queue.key": message.key, "error.message": str(e)},
            )
            return False

        if not response.is_success:
            logger.error(
                "pushover_api_error",
                extra={
                    "queue.key": message.key,
                    "http.status": response.status_code,
                    "http.body": response.text,
                },
            )
            return False
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
