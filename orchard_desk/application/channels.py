"""Channel adapters between wire formats and the orchestrator."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from orchard_desk.core.logging import get_logger
from orchard_desk.domain import Channel
from orchard_desk.infrastructure import LineMessagingError, Messenger, text_message

from .orchestrator import ConversationOrchestrator, OutboundReply

logger = get_logger(__name__)


AI_FAILURE_REPLY = "ขออภัย ระบบ AI มีปัญหาชั่วคราว"


def web_chat_payload(reply: OutboundReply) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": reply.text,
        "contextUsed": reply.context_used,
        "chartPayload": reply.chart,
    }


class WebChatAdapter:
    """One request in, one reply out; the widget sends its own history."""

    def __init__(self, orchestrator: ConversationOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def chat(self, message: str, history: Iterable[Mapping[str, Any]] | None = None) -> dict[str, Any]:
        reply = await self._orchestrator.generate_reply(message, list(history or []))
        return web_chat_payload(reply)


@dataclass
class BatchOutcome:
    """Aggregate acknowledgement of one webhook batch."""

    handled: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class LineChannelAdapter:
    """Dispatches LINE webhook events and replies through the reply token."""

    def __init__(self, orchestrator: ConversationOrchestrator, messenger: Messenger) -> None:
        self._orchestrator = orchestrator
        self._messenger = messenger

    def verify(self, body: bytes, signature: str | None) -> bool:
        return self._messenger.verify_signature(body, signature)

    @staticmethod
    def outbound_messages(reply: OutboundReply) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [text_message(reply.text)]
        if reply.chart:
            messages.append(reply.chart)
        return messages

    async def handle_event(self, event: Mapping[str, Any]) -> bool:
        """Process one event; returns ``False`` when it was ignored."""

        message = event.get("message") or {}
        if event.get("type") != "message" or message.get("type") != "text":
            return False

        user_id = str((event.get("source") or {}).get("userId") or "")
        reply_token = event.get("replyToken")
        text = str(message.get("text") or "")
        if not user_id:
            return False

        try:
            reply = await self._orchestrator.handle_inbound(user_id, text, Channel.LINE)
        except Exception:
            logger.exception("orchestration failed user=%s", user_id)
            reply = OutboundReply(text=AI_FAILURE_REPLY)

        if reply is None:
            return True
        if not reply_token:
            logger.warning("event without reply token user=%s", user_id)
            return True
        await self._messenger.reply(str(reply_token), self.outbound_messages(reply))
        return True

    async def dispatch(self, events: Iterable[Mapping[str, Any]]) -> BatchOutcome:
        """Run every event concurrently and wait until all have settled."""

        events = list(events)
        results = await asyncio.gather(
            *(self.handle_event(event) for event in events), return_exceptions=True
        )

        outcome = BatchOutcome()
        for result in results:
            if isinstance(result, BaseException):
                outcome.failed += 1
                outcome.errors.append(str(result))
                if isinstance(result, LineMessagingError):
                    logger.error("LINE delivery failed: %s details=%s", result, result.details)
                else:
                    logger.error("webhook event failed", exc_info=result)
            elif result:
                outcome.handled += 1
            else:
                outcome.skipped += 1

        logger.info(
            "webhook batch settled events=%d handled=%d skipped=%d failed=%d",
            len(events),
            outcome.handled,
            outcome.skipped,
            outcome.failed,
        )
        return outcome
