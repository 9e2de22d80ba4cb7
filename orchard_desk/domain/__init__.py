"""Domain layer definitions."""

from .conversations import MAX_MESSAGES, Channel, Conversation, ConversationMode, Message, MessageRole
from .documents import DocumentRecord, DocumentStatus
from .harvests import HarvestRecord

__all__ = [
    "Channel",
    "Conversation",
    "ConversationMode",
    "DocumentRecord",
    "DocumentStatus",
    "HarvestRecord",
    "MAX_MESSAGES",
    "Message",
    "MessageRole",
]
