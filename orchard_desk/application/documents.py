"""Use cases of the ingestion control surface."""
from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from dataclasses import replace
from pathlib import Path
from typing import BinaryIO

from orchard_desk.core.logging import get_logger
from orchard_desk.core.storage import remove_file, save_raw_file
from orchard_desk.domain import DocumentRecord, DocumentStatus
from orchard_desk.infrastructure import DocumentRepository, VectorIndexError
from orchard_desk.workers.pipeline import EmbedResult, IngestionPipeline

from .retrieval import RetrievalService

logger = get_logger(__name__)


class DocumentNotFoundError(KeyError):
    """Raised when a document id is not in the catalog."""


class DocumentStateError(ValueError):
    """Raised when an operation does not fit the document's lifecycle."""


class DocumentService:
    """Ingestion use cases over the document catalog.

    Convert, embed, content edits and delete hold a lock per document id, so
    an edit or delete never interleaves with an extraction or indexing run of
    the same document.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        pipeline: IngestionPipeline,
        retrieval: RetrievalService,
        upload_dir: Path,
    ) -> None:
        self._repository = repository
        self._pipeline = pipeline
        self._retrieval = retrieval
        self._upload_dir = upload_dir
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _require(self, document_id: str) -> DocumentRecord:
        record = self._repository.get(document_id)
        if record is None:
            raise DocumentNotFoundError(document_id)
        return record

    def _save(self, record: DocumentRecord) -> None:
        try:
            self._repository.save(record)
        except KeyError as exc:
            raise DocumentNotFoundError(record.id) from exc

    def list_documents(self) -> list[DocumentRecord]:
        return self._repository.list()

    def get(self, document_id: str) -> DocumentRecord:
        return self._require(document_id)

    def upload(self, files: list[tuple[str, str | None, BinaryIO]]) -> list[DocumentRecord]:
        """Store ``(filename, content_type, stream)`` triples as ``raw`` documents."""

        records: list[DocumentRecord] = []
        for filename, content_type, stream in files:
            path = save_raw_file(self._upload_dir, filename, stream)
            records.append(
                DocumentRecord(
                    id=str(uuid.uuid4()),
                    original_name=filename,
                    storage_path=str(path),
                    mime_type=content_type or "application/octet-stream",
                )
            )
        self._repository.add(records)
        return records

    async def convert(self, document_id: str) -> DocumentRecord:
        async with self._locks[document_id]:
            record = self._require(document_id)
            converted = await self._pipeline.convert(record)
            self._save(converted)
            return converted

    def get_content(self, document_id: str) -> str:
        return self._require(document_id).extracted_text

    async def put_content(self, document_id: str, text: str) -> DocumentRecord:
        """Replace the extracted text; the next embed indexes this version."""

        async with self._locks[document_id]:
            record = replace(self._require(document_id), extracted_text=text, status=DocumentStatus.CONVERTED)
            self._save(record)
            return record

    async def embed(self, document_id: str) -> EmbedResult:
        async with self._locks[document_id]:
            record = self._require(document_id)
            if not record.extracted_text:
                raise DocumentStateError("No content to embed. Convert first.")
            result = await self._pipeline.embed(record)
            self._save(replace(record, status=DocumentStatus.VECTORIZED))
            return result

    async def delete(self, document_id: str) -> None:
        """Remove the stored file, its indexed chunks and the catalog entry."""

        async with self._locks[document_id]:
            record = self._require(document_id)
            remove_file(Path(record.storage_path))
            try:
                await self._retrieval.delete_by_file_id(document_id)
            except VectorIndexError as exc:
                logger.warning("vector delete skipped for %s: %s", document_id, exc)
            self._repository.remove(document_id)

    async def list_collections(self) -> list[str]:
        return await self._retrieval.list_collections()

    async def delete_collection(self, name: str) -> None:
        await self._retrieval.drop_collection(name)
