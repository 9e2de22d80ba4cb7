"""Integration with the LINE Messaging API."""
from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Any, Protocol

import httpx


class LineMessagingError(RuntimeError):
    """Raised when the LINE platform rejects or cannot receive a message."""

    def __init__(self, message: str, *, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class Messenger(Protocol):
    """Outbound half of the messaging platform transport."""

    def verify_signature(self, body: bytes, signature: str | None) -> bool: ...

    async def reply(self, reply_token: str, messages: list[dict[str, Any]]) -> None: ...

    async def push(self, user_id: str, messages: list[dict[str, Any]]) -> None: ...


def text_message(text: str) -> dict[str, str]:
    return {"type": "text", "text": text}


class LineMessagingClient:
    """Client for the LINE Messaging API reply and push endpoints."""

    def __init__(
        self,
        channel_secret: str,
        channel_access_token: str,
        *,
        api_base: str = "https://api.line.me",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._channel_secret = channel_secret
        self._channel_access_token = channel_access_token
        self._api_base = api_base.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _compute_signature(self, body: bytes) -> str:
        digest = hmac.new(
            self._channel_secret.encode("utf-8"),
            body,
            digestmod=hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("ascii")

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._channel_access_token}"}

    async def _post(self, path: str, payload: dict[str, Any]) -> None:
        try:
            response = await self._client.post(
                f"{self._api_base}{path}", json=payload, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            raise LineMessagingError(f"LINE request to {path} failed: {exc}") from exc

        if response.is_error:
            try:
                details: Any = response.json()
            except ValueError:
                details = response.text
            raise LineMessagingError(
                f"LINE API returned {response.status_code} for {path}",
                status_code=response.status_code,
                details=details,
            )

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        if not signature or not self._channel_secret:
            return False
        return hmac.compare_digest(self._compute_signature(body), signature)

    async def reply(self, reply_token: str, messages: list[dict[str, Any]]) -> None:
        await self._post("/v2/bot/message/reply", {"replyToken": reply_token, "messages": messages})

    async def push(self, user_id: str, messages: list[dict[str, Any]]) -> None:
        await self._post("/v2/bot/message/push", {"to": user_id, "messages": messages})

    async def aclose(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            await self._client.aclose()


__all__ = ["LineMessagingClient", "LineMessagingError", "Messenger", "text_message"]
