"""Whole-file JSON snapshots used by the process-wide stores."""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from orchard_desk.core.logging import get_logger

logger = get_logger(__name__)


class PersistenceError(RuntimeError):
    """Raised when a store snapshot could not be written to disk."""


class JsonSnapshotFile:
    """Read and atomically rewrite one JSON document."""

    def __init__(self, path: Path, default: Any) -> None:
        self._path = path
        self._default = default

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Any:
        if not self._path.exists():
            return self._default
        try:
            with self._path.open("r", encoding="utf-8") as fp:
                return json.load(fp)
        except (OSError, json.JSONDecodeError):
            logger.error("could not read %s, starting fresh", self._path, exc_info=True)
            return self._default

    def write(self, data: Any) -> None:
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(data, fp, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"failed to write {self._path}: {exc}") from exc
