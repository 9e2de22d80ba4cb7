"""Per-message control flow of the chat path."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from orchard_desk.core.logging import get_logger
from orchard_desk.domain import Channel, ConversationMode, Message, MessageRole
from orchard_desk.infrastructure import LineMessagingError, Messenger, PersistenceError, text_message

from .completion import CompletionError, CompletionGateway
from .conversations import ConversationService
from .intents import IntentRouter
from .retrieval import RetrievalService

logger = get_logger(__name__)


SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the provided context to answer the question in Thai or "
    "English as requested. If the context doesn't contain the answer, say \"I don't find this "
    "information in the documents\" but you can try to answer from general knowledge if "
    "appropriate, but warn the user."
)
DEGRADED_REPLY = "ตอนนี้ระบบ AI ไม่พร้อมใช้งานชั่วคราว แต่คุณยังสามารถขอให้บันทึกข้อมูลหรือสรุปกราฟได้ครับ"
HISTORY_WINDOW = 6


@dataclass
class OutboundReply:
    """What a channel adapter needs to deliver one answer."""

    text: str
    chart: dict[str, Any] | None = None
    context_used: list[str] = field(default_factory=list)
    intent: str | None = None
    degraded: bool = False


def build_prompt(text: str, history: Iterable[Message | Mapping[str, Any]], context: list[str]) -> list[dict[str, str]]:
    """System instruction, the last prior turns, then context plus question."""

    turns: list[dict[str, str]] = []
    for item in history:
        if isinstance(item, Message):
            role, content = item.role.value, item.content
        else:
            role, content = str(item.get("role") or ""), item.get("content")
        if not isinstance(content, str) or not content:
            continue
        mapped = "assistant" if role in {MessageRole.ASSISTANT.value, MessageRole.ADMIN.value} else "user"
        turns.append({"role": mapped, "content": content})

    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(turns[-HISTORY_WINDOW:])
    context_text = "\n---\n".join(context)
    messages.append({"role": "user", "content": f"Context:\n{context_text}\n\nQuestion: {text}"})
    return messages


class ConversationOrchestrator:
    def __init__(
        self,
        conversations: ConversationService,
        router: IntentRouter,
        retrieval: RetrievalService,
        gateway: CompletionGateway,
        messenger: Messenger | None = None,
    ) -> None:
        self._conversations = conversations
        self._router = router
        self._retrieval = retrieval
        self._gateway = gateway
        self._messenger = messenger

    async def _record(self, user_id: str, role: MessageRole, text: str) -> None:
        try:
            await self._conversations.record(user_id, role, text)
        except PersistenceError:
            # in-memory history already holds the message
            logger.exception("conversation snapshot failed user=%s role=%s", user_id, role.value)

    async def generate_reply(self, text: str, history: Iterable[Message | Mapping[str, Any]] = ()) -> OutboundReply:
        """Tool path or retrieval plus completion; never raises for backend failures."""

        routed = self._router.route(text)
        if routed is not None:
            return OutboundReply(text=routed.text, chart=routed.chart, intent=routed.intent)

        context = await self._retrieval.query(text)
        messages = build_prompt(text, history, context)
        try:
            result = await self._gateway.complete(messages)
        except CompletionError as exc:
            logger.error("completion unavailable after retries: failure=%s", exc.failure)
            return OutboundReply(text=DEGRADED_REPLY, context_used=context, degraded=True)
        return OutboundReply(text=result.text, context_used=context)

    async def handle_inbound(self, user_id: str, text: str, channel: Channel) -> OutboundReply | None:
        """Record a user message and produce the automated reply, if any.

        Returns ``None`` while an operator owns the conversation.
        """

        try:
            conversation = await self._conversations.record(user_id, MessageRole.USER, text)
        except PersistenceError:
            logger.exception("conversation snapshot failed user=%s role=user", user_id)
            conversation = self._conversations.find(user_id) or await self._conversations.get(user_id)

        if conversation.mode is ConversationMode.MANUAL:
            logger.info("manual mode, skipping automated reply user=%s channel=%s", user_id, channel.value)
            return None

        history = conversation.messages[:-1]
        reply = await self.generate_reply(text, history)
        await self._record(user_id, MessageRole.ASSISTANT, reply.text)
        return reply

    async def operator_reply(self, user_id: str, text: str) -> None:
        """Record an operator message and push it to the messaging platform.

        Raises :class:`~orchard_desk.infrastructure.LineMessagingError` when the
        push fails; the message stays recorded.  A failed snapshot is logged
        and does not stop the push.
        """

        await self._record(user_id, MessageRole.ADMIN, text)
        if self._messenger is None:
            raise LineMessagingError("messaging platform is not configured")
        await self._messenger.push(user_id, [text_message(text)])
