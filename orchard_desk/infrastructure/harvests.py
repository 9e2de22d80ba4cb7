"""Append-only storage for harvest records."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol

from orchard_desk.domain import HarvestRecord

from .snapshots import JsonSnapshotFile


class HarvestRepository(Protocol):
    def add(self, record: HarvestRecord) -> None: ...

    def list(self) -> list[HarvestRecord]: ...


class JsonHarvestRepository:
    def __init__(self, path: Path) -> None:
        self._file = JsonSnapshotFile(path, default=[])
        self._lock = threading.Lock()
        self._records = [HarvestRecord.from_dict(item) for item in self._file.load()]

    def add(self, record: HarvestRecord) -> None:
        with self._lock:
            self._records.append(record)
            self._file.write([item.to_dict() for item in self._records])

    def list(self) -> list[HarvestRecord]:
        with self._lock:
            return list(self._records)
