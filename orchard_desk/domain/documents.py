"""Domain entities for the document catalog."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    RAW = "raw"
    CONVERTED = "converted"
    VECTORIZED = "vectorized"


@dataclass(slots=True)
class DocumentRecord:
    """An uploaded source file and the text extracted from it."""

    id: str
    original_name: str
    storage_path: str
    mime_type: str
    status: DocumentStatus = DocumentStatus.RAW
    extracted_text: str = ""
    uploaded_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentRecord":
        return cls(
            id=str(data["id"]),
            original_name=str(data.get("original_name") or ""),
            storage_path=str(data.get("storage_path") or ""),
            mime_type=str(data.get("mime_type") or "application/octet-stream"),
            status=DocumentStatus(data.get("status") or DocumentStatus.RAW.value),
            extracted_text=str(data.get("extracted_text") or ""),
            uploaded_at=str(data.get("uploaded_at") or ""),
        )
