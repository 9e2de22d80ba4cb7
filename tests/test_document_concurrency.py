from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import FakeVectorIndex
from orchard_desk.application import DocumentNotFoundError, DocumentService, RetrievalService
from orchard_desk.domain import DocumentStatus
from orchard_desk.infrastructure import JsonDocumentRepository
from orchard_desk.workers.pipeline import IngestionPipeline


class GatedPipeline(IngestionPipeline):
    """Pauses convert and embed until the test releases them."""

    def __init__(self, retrieval: RetrievalService) -> None:
        super().__init__(retrieval)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def _gate(self) -> None:
        self.started.set()
        await self.release.wait()

    async def convert(self, record):
        await self._gate()
        return await super().convert(record)

    async def embed(self, record):
        await self._gate()
        return await super().embed(record)


def _build(tmp_path: Path):
    index = FakeVectorIndex()
    retrieval = RetrievalService(index, "docs")
    pipeline = GatedPipeline(retrieval)
    repository = JsonDocumentRepository(tmp_path / "documents.json")
    service = DocumentService(repository, pipeline, retrieval, tmp_path / "uploads")
    return service, pipeline, repository, index


def test_edit_during_embed_is_kept(tmp_path):
    async def scenario():
        service, pipeline, _, index = _build(tmp_path)
        (record,) = service.upload([("a.txt", "text/plain", io.BytesIO(b"original"))])
        await service.put_content(record.id, "original")

        embedding = asyncio.create_task(service.embed(record.id))
        await pipeline.started.wait()
        editing = asyncio.create_task(service.put_content(record.id, "edited text"))
        await asyncio.sleep(0)
        pipeline.release.set()
        await asyncio.gather(embedding, editing)

        after_edit = service.get(record.id)
        await service.embed(record.id)
        return after_edit, index

    after_edit, index = asyncio.run(scenario())

    assert after_edit.extracted_text == "edited text"
    assert after_edit.status is DocumentStatus.CONVERTED
    assert [document for document, _ in index.chunks("docs").values()] == ["edited text"]


def test_delete_during_convert_waits_for_it(tmp_path):
    async def scenario():
        service, pipeline, _, index = _build(tmp_path)
        (record,) = service.upload([("a.txt", "text/plain", io.BytesIO(b"hello"))])

        converting = asyncio.create_task(service.convert(record.id))
        await pipeline.started.wait()
        deleting = asyncio.create_task(service.delete(record.id))
        await asyncio.sleep(0)
        pipeline.release.set()
        converted, _ = await asyncio.gather(converting, deleting)
        return service, record, converted

    service, record, converted = asyncio.run(scenario())

    assert converted.status is DocumentStatus.CONVERTED
    assert service.list_documents() == []
    assert not Path(record.storage_path).exists()


def test_record_removed_behind_the_service_is_not_found(tmp_path):
    async def scenario():
        service, pipeline, repository, _ = _build(tmp_path)
        (record,) = service.upload([("a.txt", "text/plain", io.BytesIO(b"hello"))])

        converting = asyncio.create_task(service.convert(record.id))
        await pipeline.started.wait()
        repository.remove(record.id)
        pipeline.release.set()
        await converting

    with pytest.raises(DocumentNotFoundError):
        asyncio.run(scenario())
