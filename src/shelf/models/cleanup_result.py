"""Cleanup analysis result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shelf.models.file_record import FileRecord


class CleanupReason(str, Enum):
    """Why a file was flagged. Declaration order is display order."""

    EMPTY_FILE = "empty_file"
    EMPTY_CONTENT = "empty_content"
    STALE = "stale"

    @property
    def heading(self) -> str:
        return _REASON_HEADINGS[self]


_REASON_HEADINGS = {
    CleanupReason.EMPTY_FILE: "Empty Files",
    CleanupReason.EMPTY_CONTENT: "Empty Content",
    CleanupReason.STALE: "Stale Files",
}


@dataclass(frozen=True)
class CleanupItem:
    """A file flagged for deletion, with exactly one reason."""

    record: FileRecord
    reason: CleanupReason
    reason_label: str
    days_since: int = 0

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def size(self) -> int:
        return self.record.size

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.record.to_dict(),
            "reason": self.reason.value,
            "reason_label": self.reason_label,
            "days_since": self.days_since,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CleanupItem:
        return cls(
            record=FileRecord.from_dict(data),
            reason=CleanupReason(data["reason"]),
            reason_label=data.get("reason_label", ""),
            days_since=int(data.get("days_since", 0)),
        )


@dataclass(slots=True)
class CleanupResult:
    """Result of a cleanup analysis run."""

    items: list[CleanupItem] = field(default_factory=list)
    total_count: int = 0
    total_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "total_count": self.total_count,
            "total_size": self.total_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CleanupResult:
        items = [CleanupItem.from_dict(i) for i in data.get("items") or []]
        return cls(
            items=items,
            total_count=int(data.get("total_count", len(items))),
            total_size=int(data.get("total_size", sum(i.size for i in items))),
        )
