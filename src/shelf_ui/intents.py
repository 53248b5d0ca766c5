"""User intents consumed by ``WorkflowController.dispatch``."""

from __future__ import annotations

from dataclasses import dataclass

from shelf.models.cleanup_result import CleanupReason


@dataclass(frozen=True)
class Load:
    pass


@dataclass(frozen=True)
class Rescan:
    pass


@dataclass(frozen=True)
class SelectCategory:
    category: str


@dataclass(frozen=True)
class SearchInput:
    """A keystroke in the search box; applied after the debounce period."""

    text: str


@dataclass(frozen=True)
class OpenFile:
    file_id: str


@dataclass(frozen=True)
class EditContent:
    content: str


@dataclass(frozen=True)
class Save:
    pass


@dataclass(frozen=True)
class DeleteCurrent:
    pass


@dataclass(frozen=True)
class DeleteVisible:
    pass


@dataclass(frozen=True)
class ConfirmDialog:
    pass


@dataclass(frozen=True)
class CancelDialog:
    pass


@dataclass(frozen=True)
class AnalyzeCleanup:
    pass


@dataclass(frozen=True)
class ToggleItem:
    item_id: str
    checked: bool


@dataclass(frozen=True)
class ToggleGroup:
    reason: CleanupReason
    checked: bool


@dataclass(frozen=True)
class ToggleAll:
    checked: bool


@dataclass(frozen=True)
class ConfirmCleanup:
    pass


@dataclass(frozen=True)
class CloseCleanup:
    pass


Intent = (
    Load
    | Rescan
    | SelectCategory
    | SearchInput
    | OpenFile
    | EditContent
    | Save
    | DeleteCurrent
    | DeleteVisible
    | ConfirmDialog
    | CancelDialog
    | AnalyzeCleanup
    | ToggleItem
    | ToggleGroup
    | ToggleAll
    | ConfirmCleanup
    | CloseCleanup
)
