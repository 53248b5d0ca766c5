"""Controller phases and the immutable snapshots handed to the presenter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from shelf.models.cleanup_result import CleanupItem, CleanupReason, CleanupResult
from shelf.models.file_record import FileRecord
from shelf_ui.catalog.view import CategoryEntry
from shelf_ui.selection import SelectionEngine, SelectionSnapshot


class Phase(Enum):
    """Named states of the workflow controller."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    OPENING_FILE = "opening-file"
    SAVING = "saving"
    DELETING = "deleting"
    BULK_DELETING = "bulk-deleting"
    RESCANNING = "rescanning"
    CLEANUP_ANALYZING = "cleanup-analyzing"
    CLEANUP_DELETING = "cleanup-deleting"


# Round trips that change files on disk; at most one runs at a time.
MUTATING_PHASES = frozenset({Phase.SAVING, Phase.DELETING, Phase.BULK_DELETING, Phase.CLEANUP_DELETING})


class EditorStatus(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class EditorState:
    """The open file and its edit buffer.

    ``original`` is the last loaded or saved content; the buffer is dirty
    when it differs from it by exact string comparison.
    """

    status: EditorStatus = EditorStatus.EMPTY
    file_id: str | None = None
    file: FileRecord | None = None
    content: str = ""
    original: str = ""
    error: str = ""
    notice: str = ""

    @property
    def read_only(self) -> bool:
        return self.file is not None and self.file.read_only

    @property
    def dirty(self) -> bool:
        return self.status is EditorStatus.READY and self.content != self.original

    @property
    def status_text(self) -> str:
        """Short status line shown next to the editor."""
        if self.status is EditorStatus.LOADING:
            return "Loading..."
        if self.status is EditorStatus.ERROR:
            return "Error"
        if self.status is EditorStatus.EMPTY:
            return ""
        if self.read_only:
            return "Read-only"
        if self.notice:
            return self.notice
        return "Modified" if self.dirty else ""


class ConfirmAction(Enum):
    DELETE_FILE = "delete-file"
    DELETE_VISIBLE = "delete-visible"


@dataclass(frozen=True)
class ConfirmRequest:
    """A pending destructive action awaiting the user's confirmation."""

    action: ConfirmAction
    title: str
    message: str
    files: tuple[FileRecord, ...]

    @property
    def file_lines(self) -> list[str]:
        """Name and path of every file that will be deleted."""
        return [f"{f.label}  {f.rel_path}" for f in self.files]


class CleanupDialog:
    """One cleanup dialog lifetime: analysis result plus its selection."""

    def __init__(self, result: CleanupResult) -> None:
        self.result = result
        self.selection = SelectionEngine(result.items, key=lambda item: item.reason, order=list(CleanupReason))
        self.error: str | None = None

    def selected_items(self) -> list[CleanupItem]:
        """Selected items in analysis order."""
        return [item for item in self.selection.items if self.selection.is_selected(item.id)]

    def view(self, deleting: bool) -> CleanupView:
        snapshot = self.selection.snapshot()
        return CleanupView(
            items=self.selection.items,
            selection=snapshot,
            total_count=self.result.total_count,
            total_size=self.result.total_size,
            error=self.error,
            deleting=deleting,
            can_delete=snapshot.can_submit and not deleting,
        )


@dataclass(frozen=True)
class CleanupView:
    items: tuple[CleanupItem, ...]
    selection: SelectionSnapshot
    total_count: int
    total_size: int
    error: str | None
    deleting: bool
    can_delete: bool

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class ViewState:
    """Everything the presenter needs to draw the current screen."""

    phase: Phase
    categories: tuple[CategoryEntry, ...]
    files: tuple[FileRecord, ...]
    active_category: str
    search_query: str
    editor: EditorState
    scan_info: str
    can_save: bool
    can_delete_current: bool
    can_delete_visible: bool
    can_rescan: bool
    busy: frozenset[Phase] = field(default_factory=frozenset)
    confirmation: ConfirmRequest | None = None
    cleanup: CleanupView | None = None

    @property
    def active_file_id(self) -> str | None:
        return self.editor.file_id
