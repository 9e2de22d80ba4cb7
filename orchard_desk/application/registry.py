"""Process-wide wiring of stores, adapters and services."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable

from orchard_desk.core.config import Settings
from orchard_desk.core.logging import get_logger
from orchard_desk.core.storage import ensure_directory
from orchard_desk.infrastructure import (
    ChromaVectorIndex,
    CompletionBackend,
    JsonConversationRepository,
    JsonDocumentRepository,
    JsonHarvestRepository,
    LineMessagingClient,
    Messenger,
    OpenAICompletionBackend,
    VectorIndex,
)
from orchard_desk.workers.pipeline import IngestionPipeline

from .channels import LineChannelAdapter, WebChatAdapter
from .completion import CompletionGateway
from .conversations import ConversationService
from .documents import DocumentService
from .harvests import HarvestService
from .intents import IntentRouter
from .orchestrator import ConversationOrchestrator
from .retrieval import RetrievalService

logger = get_logger(__name__)


@dataclass
class ServiceRegistry:
    settings: Settings
    conversations: ConversationService
    harvests: HarvestService
    retrieval: RetrievalService
    gateway: CompletionGateway
    orchestrator: ConversationOrchestrator
    documents: DocumentService
    web_chat: WebChatAdapter
    line: LineChannelAdapter


def build_services(
    settings: Settings,
    *,
    index: VectorIndex | None = None,
    backend: CompletionBackend | None = None,
    messenger: Messenger | None = None,
    today: Callable[[], date] = date.today,
) -> ServiceRegistry:
    """Build the object graph; collaborators may be swapped for tests."""

    ensure_directory(settings.data_dir)
    ensure_directory(settings.uploads_path)

    if messenger is None:
        if not (settings.line_channel_secret and settings.line_channel_access_token):
            logger.error("LINE credentials are missing; webhook requests will be rejected")
        messenger = LineMessagingClient(
            settings.line_channel_secret or "",
            settings.line_channel_access_token or "",
        )
    if index is None:
        index = ChromaVectorIndex(settings.chroma_host, settings.chroma_port)
    if backend is None:
        if not settings.typhoon_api_key:
            logger.warning("TYPHOON_API_KEY is not set; chat answers will use the degraded reply")
        backend = OpenAICompletionBackend(
            settings.typhoon_api_key,
            settings.typhoon_base_url,
            timeout=settings.completion_timeout,
            max_retries=settings.completion_max_retries,
        )

    conversations = ConversationService(JsonConversationRepository(settings.data_dir / "chats.json"))
    harvests = HarvestService(JsonHarvestRepository(settings.data_dir / "harvests.json"))
    retrieval = RetrievalService(index, settings.chroma_collection, top_k=settings.retrieval_top_k)
    gateway = CompletionGateway(
        backend,
        preferred_model=settings.typhoon_model,
        timeout=settings.completion_timeout,
    )
    orchestrator = ConversationOrchestrator(
        conversations,
        IntentRouter(harvests, today=today),
        retrieval,
        gateway,
        messenger=messenger,
    )
    documents = DocumentService(
        JsonDocumentRepository(settings.data_dir / "documents.json"),
        IngestionPipeline(retrieval),
        retrieval,
        settings.uploads_path,
    )
    return ServiceRegistry(
        settings=settings,
        conversations=conversations,
        harvests=harvests,
        retrieval=retrieval,
        gateway=gateway,
        orchestrator=orchestrator,
        documents=documents,
        web_chat=WebChatAdapter(orchestrator),
        line=LineChannelAdapter(orchestrator, messenger),
    )


_services: ServiceRegistry | None = None


def configure_services(services: ServiceRegistry) -> None:
    """Install the registry used by the HTTP routes."""

    global _services
    _services = services


def get_services() -> ServiceRegistry:
    """Return the registry, building it from the environment on first use."""

    global _services
    if _services is None:
        _services = build_services(Settings.from_env())
    return _services


def reset_services() -> None:
    """Forget the installed registry (used in tests)."""

    global _services
    _services = None
