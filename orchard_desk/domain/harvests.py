"""Domain entities for durian harvest bookkeeping."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class HarvestRecord:
    """One recorded harvest; append-only."""

    id: str
    count: int
    weight: float
    date: str
    recorded_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HarvestRecord":
        return cls(
            id=str(data["id"]),
            count=int(data["count"]),
            weight=float(data["weight"]),
            date=str(data["date"]),
            recorded_at=str(data.get("recorded_at") or data.get("timestamp") or ""),
        )
