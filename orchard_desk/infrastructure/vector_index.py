"""Chroma backed vector index."""
from __future__ import annotations

import threading
from typing import Any, Protocol

import chromadb

from orchard_desk.core.logging import get_logger

logger = get_logger(__name__)


class VectorIndexError(RuntimeError):
    """Raised when the vector index cannot be reached or rejects a call."""


class VectorIndex(Protocol):
    """Black-box contract of the external vector index."""

    def add(
        self,
        collection: str,
        ids: list[str],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None: ...

    def query(self, collection: str, text: str, k: int) -> list[str]: ...

    def delete_where(self, collection: str, where: dict[str, Any]) -> None: ...

    def list_collections(self) -> list[str]: ...

    def drop_collection(self, name: str) -> None: ...


class ChromaVectorIndex:
    """Adapter over a Chroma HTTP server using its default embedding function."""

    def __init__(self, host: str = "localhost", port: int = 8000, client: Any | None = None) -> None:
        self._host = host
        self._port = port
        self._client = client
        self._lock = threading.Lock()

    def _get_client(self) -> Any:
        with self._lock:
            if self._client is None:
                try:
                    self._client = chromadb.HttpClient(host=self._host, port=self._port)
                except Exception as exc:
                    raise VectorIndexError(
                        f"cannot connect to Chroma at {self._host}:{self._port}: {exc}"
                    ) from exc
            return self._client

    def _collection(self, name: str) -> Any:
        return self._get_client().get_or_create_collection(name=name)

    def add(
        self,
        collection: str,
        ids: list[str],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        try:
            self._collection(collection).add(ids=ids, documents=documents, metadatas=metadatas)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(f"add to {collection} failed: {exc}") from exc

    def query(self, collection: str, text: str, k: int) -> list[str]:
        try:
            result = self._collection(collection).query(query_texts=[text], n_results=k)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(f"query on {collection} failed: {exc}") from exc
        documents = result.get("documents") or [[]]
        return [doc for doc in (documents[0] or []) if doc]

    def delete_where(self, collection: str, where: dict[str, Any]) -> None:
        try:
            self._collection(collection).delete(where=where)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(f"delete from {collection} failed: {exc}") from exc

    def list_collections(self) -> list[str]:
        try:
            collections = self._get_client().list_collections()
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(f"listing collections failed: {exc}") from exc
        # older clients return Collection objects, newer ones plain names
        return [getattr(item, "name", item) for item in collections]

    def drop_collection(self, name: str) -> None:
        try:
            self._get_client().delete_collection(name=name)
        except VectorIndexError:
            raise
        except Exception as exc:
            raise VectorIndexError(f"dropping collection {name} failed: {exc}") from exc
