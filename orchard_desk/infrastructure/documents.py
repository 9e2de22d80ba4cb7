"""Infrastructure layer for the document catalog."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from orchard_desk.domain import DocumentRecord

from .snapshots import JsonSnapshotFile


class DocumentRepository(Protocol):
    """Persistence contract for uploaded documents."""

    def add(self, records: list[DocumentRecord]) -> None: ...

    def get(self, document_id: str) -> DocumentRecord | None: ...

    def list(self) -> list[DocumentRecord]: ...

    def save(self, record: DocumentRecord) -> None: ...

    def remove(self, document_id: str) -> bool: ...


class JsonDocumentRepository:
    """Document catalog written in full to a JSON file on every mutation."""

    def __init__(self, path: Path) -> None:
        self._file = JsonSnapshotFile(path, default={"files": []})
        self._lock = threading.RLock()
        self._records: dict[str, DocumentRecord] = {}
        for item in self._file.load().get("files") or []:
            record = DocumentRecord.from_dict(item)
            self._records[record.id] = record

    def _persist(self) -> None:
        self._file.write({"files": [record.to_dict() for record in self._records.values()]})

    def add(self, records: list[DocumentRecord]) -> None:
        with self._lock:
            for record in records:
                self._records[record.id] = record
            self._persist()

    def get(self, document_id: str) -> DocumentRecord | None:
        with self._lock:
            return self._records.get(document_id)

    def list(self) -> list[DocumentRecord]:
        with self._lock:
            return list(self._records.values())

    def save(self, record: DocumentRecord) -> None:
        with self._lock:
            if record.id not in self._records:
                raise KeyError(record.id)
            self._records[record.id] = record
            self._persist()

    def remove(self, document_id: str) -> bool:
        with self._lock:
            removed = self._records.pop(document_id, None)
            if removed is None:
                return False
            self._persist()
            return True
