"""OpenAI compatible chat completion backend (Typhoon)."""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Protocol

import openai
from openai import AsyncOpenAI


class FailureKind(str, Enum):
    """Classification of a failed completion attempt."""

    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    AUTHORIZATION = "authorization"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    SERVER = "server"
    UNKNOWN = "unknown"

    @property
    def recoverable(self) -> bool:
        """Whether another parameter tier or model may succeed."""

        return self in {FailureKind.BAD_REQUEST, FailureKind.NOT_FOUND, FailureKind.TIMEOUT}


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, (asyncio.TimeoutError, openai.APITimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(exc, openai.APIConnectionError):
        return FailureKind.NETWORK

    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status == 400:
        return FailureKind.BAD_REQUEST
    if status == 404:
        return FailureKind.NOT_FOUND
    if status in (401, 403):
        return FailureKind.AUTHORIZATION
    if status == 429:
        return FailureKind.RATE_LIMITED
    if isinstance(status, int) and status >= 500:
        return FailureKind.SERVER
    return FailureKind.UNKNOWN


class CompletionBackend(Protocol):
    """Turns chat messages into assistant text for one model."""

    async def create(self, *, model: str, messages: list[dict[str, str]], **params: Any) -> str: ...


class OpenAICompletionBackend:
    """Backend calling ``chat.completions`` on an OpenAI compatible endpoint."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 1,
        client: AsyncOpenAI | None = None,
    ) -> None:
        # the SDK refuses to build without a key; a placeholder lets the
        # request fail as an authorization error instead
        self._client = client or AsyncOpenAI(
            api_key=api_key or "missing-api-key",
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def create(self, *, model: str, messages: list[dict[str, str]], **params: Any) -> str:
        response = await self._client.chat.completions.create(model=model, messages=messages, **params)
        return response.choices[0].message.content or ""
