"""Infrastructure layer exports."""

from .completion import CompletionBackend, FailureKind, OpenAICompletionBackend, classify_failure
from .conversations import ConversationRepository, JsonConversationRepository
from .documents import DocumentRepository, JsonDocumentRepository
from .harvests import HarvestRepository, JsonHarvestRepository
from .line import LineMessagingClient, LineMessagingError, Messenger, text_message
from .ocr import OCRClient, OCRExtractionResult, TesseractOCRClient, configure_ocr_client, get_ocr_client
from .snapshots import JsonSnapshotFile, PersistenceError
from .vector_index import ChromaVectorIndex, VectorIndex, VectorIndexError

__all__ = [
    "ChromaVectorIndex",
    "CompletionBackend",
    "ConversationRepository",
    "DocumentRepository",
    "FailureKind",
    "HarvestRepository",
    "JsonConversationRepository",
    "JsonDocumentRepository",
    "JsonHarvestRepository",
    "JsonSnapshotFile",
    "LineMessagingClient",
    "LineMessagingError",
    "Messenger",
    "OCRClient",
    "OCRExtractionResult",
    "OpenAICompletionBackend",
    "PersistenceError",
    "TesseractOCRClient",
    "VectorIndex",
    "VectorIndexError",
    "classify_failure",
    "configure_ocr_client",
    "get_ocr_client",
    "text_message",
]
