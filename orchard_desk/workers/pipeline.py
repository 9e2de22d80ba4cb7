from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from orchard_desk.core.chunking import split_paragraphs
from orchard_desk.core.logging import get_logger
from orchard_desk.domain import DocumentRecord, DocumentStatus
from orchard_desk.extractors import detect
from orchard_desk.extractors.detect import ExtractionError

if TYPE_CHECKING:
    from orchard_desk.application.retrieval import RetrievalService

logger = get_logger(__name__)


@dataclass
class EmbedResult:
    file_id: str
    chunks: int


class IngestionPipeline:
    """Turns stored uploads into text and indexed chunks."""

    def __init__(self, retrieval: RetrievalService) -> None:
        self._retrieval = retrieval

    @staticmethod
    def _read_bytes(path: Path) -> bytes:
        if not path.exists():
            raise ExtractionError(f"File not found at path: {path}")
        return path.read_bytes()

    def _extract(self, record: DocumentRecord) -> str:
        data = self._read_bytes(Path(record.storage_path))
        return detect.extract_text(data, record.mime_type, record.original_name)

    async def convert(self, record: DocumentRecord) -> DocumentRecord:
        """Return ``record`` with fresh extracted text and status ``converted``."""

        logger.info("converting file=%s type=%s", record.original_name, record.mime_type)
        text = await asyncio.to_thread(self._extract, record)
        logger.info("conversion finished file=%s characters=%d", record.original_name, len(text))
        return replace(record, extracted_text=text, status=DocumentStatus.CONVERTED)

    async def embed(self, record: DocumentRecord) -> EmbedResult:
        """Replace the indexed chunks of ``record`` with its current text."""

        chunks = split_paragraphs(record.extracted_text)
        count = await self._retrieval.upsert(record.id, chunks, {"source": record.original_name})
        logger.info("indexed file=%s chunks=%d", record.id, count)
        return EmbedResult(file_id=record.id, chunks=count)
