"""Application services."""

from .channels import BatchOutcome, LineChannelAdapter, WebChatAdapter
from .completion import CompletionError, CompletionGateway, CompletionResult
from .conversations import ConversationService, InvalidModeError
from .documents import DocumentNotFoundError, DocumentService, DocumentStateError
from .harvests import HarvestService, HarvestStats
from .intents import IntentRouter
from .orchestrator import ConversationOrchestrator, OutboundReply
from .registry import ServiceRegistry, build_services, configure_services, get_services, reset_services
from .retrieval import RetrievalService

__all__ = [
    "BatchOutcome",
    "CompletionError",
    "CompletionGateway",
    "CompletionResult",
    "ConversationOrchestrator",
    "ConversationService",
    "DocumentNotFoundError",
    "DocumentService",
    "DocumentStateError",
    "HarvestService",
    "HarvestStats",
    "IntentRouter",
    "InvalidModeError",
    "LineChannelAdapter",
    "OutboundReply",
    "RetrievalService",
    "ServiceRegistry",
    "WebChatAdapter",
    "build_services",
    "configure_services",
    "get_services",
    "reset_services",
]
