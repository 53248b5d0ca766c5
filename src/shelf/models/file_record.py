"""File record, category and scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

SCOPE_GLOBAL = "global"
SCOPE_PROJECT = "project"


@dataclass(frozen=True)
class Category:
    """Display metadata for a file category."""

    id: str
    label: str
    description: str = ""
    icon: str = "file"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "description": self.description, "icon": self.icon}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        return cls(
            id=data["id"],
            label=data.get("label", data["id"]),
            description=data.get("description", ""),
            icon=data.get("icon", "file"),
        )


# Ordered, closed set of categories known to the scanner and the UI.
CATEGORIES: tuple[Category, ...] = (
    Category("memory", "Memories", "MEMORY.md and per-project memory files", "brain"),
    Category("settings", "Settings", "Configuration and settings files", "settings"),
    Category("todos", "Todos", "Task and todo tracking files", "checklist"),
    Category("plans", "Plans", "Planning and strategy documents", "map"),
    Category("skills", "Skills", "Custom skill definitions", "sparkles"),
    Category("project", "Project Config", "CLAUDE.md and .clauderc project files", "folder"),
    Category("other", "Other", "Other related files", "file"),
)

CATEGORY_IDS = frozenset(c.id for c in CATEGORIES)
UNCATEGORIZED = "other"


def normalize_category(value: str | None) -> str:
    """Map unknown or missing category ids to the uncategorized bucket."""
    if value in CATEGORY_IDS:
        return value
    return UNCATEGORIZED


def _parse_time(value: str | datetime) -> datetime:
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class FileRecord:
    """A single discovered file.

    ``id`` is derived from the absolute path and stays stable across
    rescans, so selections and the open file survive a reload.
    """

    id: str
    path: str
    rel_path: str
    name: str
    size: int
    mod_time: datetime
    category: str = UNCATEGORIZED
    display_name: str | None = None
    scope: str | None = None
    project_name: str | None = None
    read_only: bool = False

    @property
    def label(self) -> str:
        """Name shown to the user."""
        return self.display_name or self.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "rel_path": self.rel_path,
            "name": self.name,
            "display_name": self.display_name,
            "category": self.category,
            "scope": self.scope,
            "project_name": self.project_name,
            "size": self.size,
            "mod_time": self.mod_time.isoformat(),
            "read_only": self.read_only,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        return cls(
            id=data["id"],
            path=data.get("path", ""),
            rel_path=data.get("rel_path", ""),
            name=data["name"],
            size=max(0, int(data.get("size", 0))),
            mod_time=_parse_time(data["mod_time"]),
            category=normalize_category(data.get("category")),
            display_name=data.get("display_name") or None,
            scope=data.get("scope") or None,
            project_name=data.get("project_name") or None,
            read_only=bool(data.get("read_only", False)),
        )


@dataclass(frozen=True)
class FileContent:
    """A file record together with its full text content."""

    record: FileRecord
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {**self.record.to_dict(), "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileContent:
        return cls(record=FileRecord.from_dict(data), content=data.get("content", ""))


@dataclass(slots=True)
class ScanResult:
    """Complete output of one filesystem scan."""

    files: list[FileRecord] = field(default_factory=list)
    categories: list[Category] = field(default_factory=lambda: list(CATEGORIES))
    root_path: str | None = None
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_path": self.root_path,
            "files": [f.to_dict() for f in self.files],
            "categories": [c.to_dict() for c in self.categories],
            "scanned_at": self.scanned_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanResult:
        return cls(
            files=[FileRecord.from_dict(f) for f in data.get("files") or []],
            categories=[Category.from_dict(c) for c in data.get("categories") or []],
            root_path=data.get("root_path"),
            scanned_at=_parse_time(data["scanned_at"]) if data.get("scanned_at") else datetime.now(timezone.utc),
        )
