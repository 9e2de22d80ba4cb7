"""Domain entities for chat conversations."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


MAX_MESSAGES = 50


class ConversationMode(str, Enum):
    """Who answers the user: the automated responder or a human operator."""

    AI = "ai"
    MANUAL = "manual"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    ADMIN = "admin"


class Channel(str, Enum):
    WEB = "web"
    LINE = "line"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True, slots=True)
class Message:
    """A single immutable entry of a conversation log."""

    role: MessageRole
    content: str
    timestamp: str = field(default_factory=utcnow_iso)

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            role=MessageRole(data["role"]),
            content=str(data.get("content") or ""),
            timestamp=str(data.get("timestamp") or utcnow_iso()),
        )


@dataclass(slots=True)
class Conversation:
    """Mode and bounded message history for one channel user."""

    user_id: str
    mode: ConversationMode = ConversationMode.AI
    messages: list[Message] = field(default_factory=list)

    def append(self, message: Message, *, limit: int = MAX_MESSAGES) -> None:
        self.messages.append(message)
        overflow = len(self.messages) - limit
        if overflow > 0:
            del self.messages[:overflow]

    def to_manual(self) -> None:
        self.mode = ConversationMode.MANUAL

    def to_ai(self) -> None:
        self.mode = ConversationMode.AI

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def summary(self) -> dict[str, object]:
        last = self.last_message
        return {
            "userId": self.user_id,
            "mode": self.mode.value,
            "lastMessage": last.content if last else "",
            "lastActive": last.timestamp if last else None,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "mode": self.mode.value,
            "messages": [message.to_dict() for message in self.messages],
        }

    @classmethod
    def from_dict(cls, user_id: str, data: dict) -> "Conversation":
        messages = [Message.from_dict(item) for item in data.get("messages") or []]
        return cls(
            user_id=user_id,
            mode=ConversationMode(data.get("mode") or ConversationMode.AI.value),
            messages=messages[-MAX_MESSAGES:],
        )
