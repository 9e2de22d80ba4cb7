"""Completion gateway with model and parameter failover."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Sequence

from orchard_desk.core.logging import get_logger
from orchard_desk.infrastructure import CompletionBackend, FailureKind, classify_failure

logger = get_logger(__name__)


FALLBACK_MODELS = (
    "typhoon-v2.5-30b-a3b-instruct",
    "typhoon-v2.1-12b-instruct",
    "typhoon-v1.5x-70b-instruct",
    "typhoon-v1.5-70b-instruct",
)

FULL_PARAMETERS: dict[str, Any] = {"temperature": 0.6, "max_tokens": 512, "top_p": 0.9}


class ParameterTier(str, Enum):
    FULL = "full"
    MINIMAL = "minimal"

    def parameters(self) -> dict[str, Any]:
        return dict(FULL_PARAMETERS) if self is ParameterTier.FULL else {}


@dataclass
class AttemptOutcome:
    """Result of one (model, tier) call."""

    model: str
    tier: ParameterTier
    text: str | None = None
    failure: FailureKind | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class CompletionResult:
    text: str
    model: str
    attempts: list[AttemptOutcome] = field(default_factory=list)


class CompletionError(RuntimeError):
    """Raised when no candidate produced a completion.

    ``failure`` and ``__cause__`` describe the last observed failure.
    """

    def __init__(self, message: str, *, failure: FailureKind | None, attempts: list[AttemptOutcome]) -> None:
        super().__init__(message)
        self.failure = failure
        self.attempts = attempts


def candidate_models(preferred: str | None, fallbacks: Sequence[str] = FALLBACK_MODELS) -> list[str]:
    ordered: list[str] = []
    for model in (preferred, *fallbacks):
        if model and model not in ordered:
            ordered.append(model)
    return ordered


class CompletionGateway:
    """Tries each candidate model with full, then minimal, parameters.

    Only ``bad_request``, ``not_found`` and ``timeout`` failures move on to the
    next tier or model; any other failure class ends the loop at once.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        *,
        preferred_model: str | None = None,
        fallback_models: Sequence[str] = FALLBACK_MODELS,
        timeout: float = 30.0,
    ) -> None:
        self._backend = backend
        self._candidates = candidate_models(preferred_model, fallback_models)
        self._timeout = timeout

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    def plan(self) -> Iterator[tuple[str, ParameterTier]]:
        for model in self._candidates:
            yield model, ParameterTier.FULL
            yield model, ParameterTier.MINIMAL

    async def attempt(self, model: str, tier: ParameterTier, messages: list[dict[str, str]]) -> AttemptOutcome:
        try:
            text = await asyncio.wait_for(
                self._backend.create(model=model, messages=messages, **tier.parameters()),
                timeout=self._timeout,
            )
        except Exception as exc:
            failure = classify_failure(exc)
            logger.warning("completion failed model=%s tier=%s failure=%s", model, tier.value, failure.value)
            return AttemptOutcome(model=model, tier=tier, failure=failure, error=exc)
        return AttemptOutcome(model=model, tier=tier, text=text)

    async def complete(self, messages: list[dict[str, str]]) -> CompletionResult:
        attempts: list[AttemptOutcome] = []
        for model, tier in self.plan():
            outcome = await self.attempt(model, tier, messages)
            attempts.append(outcome)
            if outcome.ok:
                return CompletionResult(text=outcome.text or "", model=model, attempts=attempts)
            if outcome.failure is not None and not outcome.failure.recoverable:
                break

        last = attempts[-1] if attempts else None
        raise CompletionError(
            f"completion failed after {len(attempts)} attempt(s)",
            failure=last.failure if last else None,
            attempts=attempts,
        ) from (last.error if last else None)
