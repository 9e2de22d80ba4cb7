"""Infrastructure layer for conversation persistence."""
from __future__ import annotations

import asyncio
from collections import defaultdict
from pathlib import Path
from typing import Protocol

from orchard_desk.domain import Conversation, ConversationMode, Message, MessageRole

from .snapshots import JsonSnapshotFile


class ConversationRepository(Protocol):
    """Persistence contract for conversation state."""

    async def get(self, user_id: str) -> Conversation: ...

    def find(self, user_id: str) -> Conversation | None: ...

    async def append(self, user_id: str, role: MessageRole, content: str) -> Conversation: ...

    async def set_mode(self, user_id: str, mode: ConversationMode) -> Conversation: ...

    def list(self) -> list[dict[str, object]]: ...


def _snapshot(conversation: Conversation) -> Conversation:
    return Conversation(
        user_id=conversation.user_id,
        mode=conversation.mode,
        messages=list(conversation.messages),
    )


class JsonConversationRepository:
    """Conversation catalog kept in memory and written through to one JSON file.

    Mutations for the same user id are serialised with a per-key lock; the
    snapshot write itself holds a store-wide lock so two users never write the
    file concurrently.  A failed write raises
    :class:`~orchard_desk.infrastructure.snapshots.PersistenceError` after the
    in-memory state has already changed.
    """

    def __init__(self, path: Path) -> None:
        self._file = JsonSnapshotFile(path, default={"conversations": {}})
        self._conversations: dict[str, Conversation] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._write_lock = asyncio.Lock()
        self._load()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _load(self) -> None:
        data = self._file.load()
        for user_id, payload in (data.get("conversations") or {}).items():
            self._conversations[user_id] = Conversation.from_dict(user_id, payload)

    def _ensure(self, user_id: str) -> Conversation:
        conversation = self._conversations.get(user_id)
        if conversation is None:
            conversation = Conversation(user_id=user_id)
            self._conversations[user_id] = conversation
        return conversation

    async def _persist(self) -> None:
        async with self._write_lock:
            payload = {
                "conversations": {
                    user_id: conversation.to_dict()
                    for user_id, conversation in self._conversations.items()
                }
            }
            self._file.write(payload)

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def get(self, user_id: str) -> Conversation:
        async with self._locks[user_id]:
            created = user_id not in self._conversations
            conversation = self._ensure(user_id)
            if created:
                await self._persist()
            return _snapshot(conversation)

    def find(self, user_id: str) -> Conversation | None:
        conversation = self._conversations.get(user_id)
        return _snapshot(conversation) if conversation else None

    async def append(self, user_id: str, role: MessageRole, content: str) -> Conversation:
        async with self._locks[user_id]:
            conversation = self._ensure(user_id)
            conversation.append(Message(role=role, content=content))
            await self._persist()
            return _snapshot(conversation)

    async def set_mode(self, user_id: str, mode: ConversationMode) -> Conversation:
        async with self._locks[user_id]:
            conversation = self._ensure(user_id)
            if mode is ConversationMode.MANUAL:
                conversation.to_manual()
            else:
                conversation.to_ai()
            await self._persist()
            return _snapshot(conversation)

    def list(self) -> list[dict[str, object]]:
        summaries = [conversation.summary() for conversation in self._conversations.values()]
        active = [item for item in summaries if item["lastActive"]]
        idle = [item for item in summaries if not item["lastActive"]]
        active.sort(key=lambda item: str(item["lastActive"]), reverse=True)
        return active + idle
