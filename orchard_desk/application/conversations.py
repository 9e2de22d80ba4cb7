"""Application service for conversation state and operator takeover."""
from __future__ import annotations

from orchard_desk.domain import Conversation, ConversationMode, MessageRole
from orchard_desk.infrastructure import ConversationRepository


class InvalidModeError(ValueError):
    """Raised for a mode outside ``ai``/``manual``."""


def parse_mode(value: object) -> ConversationMode:
    if isinstance(value, ConversationMode):
        return value
    try:
        return ConversationMode(str(value))
    except ValueError as exc:
        raise InvalidModeError(f"Invalid mode: {value!r}") from exc


class ConversationService:
    """Coordinates the conversation store and the ai/manual state machine.

    Ownership changes only through :meth:`to_manual` and :meth:`to_ai` (or
    :meth:`set_mode`); recording messages never changes the mode.
    """

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def get(self, user_id: str) -> Conversation:
        return await self._repository.get(user_id)

    def find(self, user_id: str) -> Conversation | None:
        return self._repository.find(user_id)

    async def record(self, user_id: str, role: MessageRole, content: str) -> Conversation:
        return await self._repository.append(user_id, role, content)

    async def set_mode(self, user_id: str, mode: ConversationMode | str) -> Conversation:
        return await self._repository.set_mode(user_id, parse_mode(mode))

    async def to_manual(self, user_id: str) -> Conversation:
        return await self._repository.set_mode(user_id, ConversationMode.MANUAL)

    async def to_ai(self, user_id: str) -> Conversation:
        return await self._repository.set_mode(user_id, ConversationMode.AI)

    def list_summaries(self) -> list[dict[str, object]]:
        return self._repository.list()
