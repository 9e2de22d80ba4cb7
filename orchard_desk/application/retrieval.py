"""Retrieval adapter over the vector index."""
from __future__ import annotations

import asyncio
from typing import Any

from orchard_desk.core.logging import get_logger
from orchard_desk.infrastructure import VectorIndex, VectorIndexError

logger = get_logger(__name__)


class RetrievalService:
    """Runs blocking index calls in worker threads.

    :meth:`query` is best effort and returns no context when the index is
    unavailable; the mutating calls raise :class:`VectorIndexError`.
    """

    def __init__(self, index: VectorIndex, collection: str, *, top_k: int = 3) -> None:
        self._index = index
        self._collection = collection
        self._top_k = top_k

    @property
    def collection(self) -> str:
        return self._collection

    async def query(self, text: str, k: int | None = None) -> list[str]:
        try:
            return await asyncio.to_thread(self._index.query, self._collection, text, k or self._top_k)
        except VectorIndexError as exc:
            logger.warning("retrieval unavailable, continuing without context: %s", exc)
            return []

    async def upsert(
        self,
        file_id: str,
        chunks: list[str],
        metadata: dict[str, Any],
    ) -> int:
        """Replace the chunks indexed for ``file_id``; returns the chunk count."""

        try:
            await asyncio.to_thread(self._index.delete_where, self._collection, {"fileId": file_id})
        except VectorIndexError as exc:
            logger.warning("could not clear old chunks of %s: %s", file_id, exc)
        if not chunks:
            return 0

        ids = [f"{file_id}_chunk_{index}" for index in range(len(chunks))]
        metadatas = [
            {**metadata, "fileId": file_id, "chunkIndex": index} for index in range(len(chunks))
        ]
        await asyncio.to_thread(self._index.add, self._collection, ids, chunks, metadatas)
        return len(chunks)

    async def delete_by_file_id(self, file_id: str) -> None:
        await asyncio.to_thread(self._index.delete_where, self._collection, {"fileId": file_id})

    async def list_collections(self) -> list[str]:
        return await asyncio.to_thread(self._index.list_collections)

    async def drop_collection(self, name: str) -> None:
        await asyncio.to_thread(self._index.drop_collection, name)
