"""Bulk delete result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BulkDeleteError:
    """A single id that could not be deleted."""

    id: str
    message: str


@dataclass(slots=True)
class BulkDeleteResult:
    """Outcome of a bulk delete. Partial success is normal."""

    deleted: int = 0
    deleted_ids: list[str] = field(default_factory=list)
    errors: list[BulkDeleteError] = field(default_factory=list)

    @property
    def failed_ids(self) -> set[str]:
        return {e.id for e in self.errors}

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": self.deleted,
            "deleted_ids": list(self.deleted_ids),
            "errors": [{"id": e.id, "message": e.message} for e in self.errors],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BulkDeleteResult:
        return cls(
            deleted=int(data.get("deleted", 0)),
            deleted_ids=list(data.get("deleted_ids") or []),
            errors=[BulkDeleteError(id=e.get("id", ""), message=e.get("message", "")) for e in data.get("errors") or []],
        )
