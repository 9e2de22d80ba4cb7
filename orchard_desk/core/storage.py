from __future__ import annotations

import random
import re
import shutil
import time
from pathlib import Path
from typing import BinaryIO


_INVALID_CHARS = re.compile(r'[<>:"/\\|?*]')


def ensure_directory(path: Path) -> Path:
    """Create ``path`` if needed and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitise_filename(filename: str | None) -> str:
    """Strip characters that are invalid on common filesystems."""

    safe_name = _INVALID_CHARS.sub("_", Path(filename or "").name).strip()
    if not safe_name or safe_name in {".", ".."}:
        return "unnamed_file"
    return safe_name


def unique_storage_name(filename: str) -> str:
    millis = int(time.time() * 1000)
    suffix = random.randint(0, 10**9)
    return f"{millis}-{suffix}-{sanitise_filename(filename)}"


def save_raw_file(upload_dir: Path, filename: str, source: BinaryIO) -> Path:
    """Persist an uploaded file under a collision free name."""

    target = ensure_directory(upload_dir) / unique_storage_name(filename)
    with target.open("wb") as buffer:
        shutil.copyfileobj(source, buffer)
    return target


def remove_file(path: Path) -> bool:
    """Delete ``path`` if it exists; return whether a file was removed."""

    if path.exists():
        path.unlink()
        return True
    return False
