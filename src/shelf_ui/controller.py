"""Workflow controller: sequences catalog load, filtering, editing and deletion.

The controller owns all shared state (catalog, filters, editor, pending
confirmation, cleanup dialog). Every backend call is a single awaited
round trip; a failed call only produces a notification and never changes
the catalog or the cleanup selection.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from shelf.models.bulk_result import BulkDeleteResult
from shelf.models.cleanup_result import CleanupReason
from shelf.models.file_record import Category, FileRecord
from shelf_ui.catalog.store import CatalogStore
from shelf_ui.catalog.view import category_entries, first_visible, visible_files
from shelf_ui.client import Backend, BackendError
from shelf_ui.debounce import Debouncer, Schedule, running_loop_scheduler
from shelf_ui.intents import (
    AnalyzeCleanup,
    CancelDialog,
    CloseCleanup,
    ConfirmCleanup,
    ConfirmDialog,
    DeleteCurrent,
    DeleteVisible,
    EditContent,
    Intent,
    Load,
    OpenFile,
    Rescan,
    Save,
    SearchInput,
    SelectCategory,
    ToggleAll,
    ToggleGroup,
    ToggleItem,
)
from shelf_ui.presenter import ERROR, INFO, SUCCESS, Presenter
from shelf_ui.state import (
    MUTATING_PHASES,
    CleanupDialog,
    ConfirmAction,
    ConfirmRequest,
    EditorState,
    EditorStatus,
    Phase,
    ViewState,
)

log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 200


def _plural(count: int, noun: str = "file") -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


class WorkflowController:
    """Drives the file manager from user intents and backend responses."""

    def __init__(
        self,
        backend: Backend,
        presenter: Presenter,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        schedule: Schedule = running_loop_scheduler,
    ) -> None:
        self.backend = backend
        self.presenter = presenter
        self.store = CatalogStore()
        self.editor = EditorState()
        self.confirmation: ConfirmRequest | None = None
        self.cleanup: CleanupDialog | None = None
        self.last_bulk_result: BulkDeleteResult | None = None
        self._loaded = False
        self._busy: list[Phase] = []
        self._open_generation = 0
        self._search = Debouncer(debounce_ms / 1000, self.set_search, schedule)

    # -- Phase bookkeeping --

    @property
    def phase(self) -> Phase:
        if self._busy:
            return self._busy[-1]
        return Phase.READY if self._loaded else Phase.IDLE

    def is_busy(self, phase: Phase) -> bool:
        return phase in self._busy

    def _mutation_in_flight(self) -> bool:
        return any(p in MUTATING_PHASES for p in self._busy)

    def _begin(self, phase: Phase) -> bool:
        """Enter a round-trip phase, rejecting re-entrant triggers."""
        if phase in self._busy:
            log.debug("Ignoring %s: already in flight", phase.value)
            return False
        if phase in MUTATING_PHASES and self._mutation_in_flight():
            log.debug("Ignoring %s: another change is in flight", phase.value)
            return False
        self._busy.append(phase)
        self._render()
        return True

    def _end(self, phase: Phase) -> None:
        self._busy.remove(phase)
        self._render()

    # -- Catalog --

    async def load(self) -> bool:
        """Fetch the catalog and category metadata."""
        if not self._begin(Phase.LOADING):
            return False
        try:
            return await self._refresh()
        finally:
            self._end(Phase.LOADING)

    async def _refresh(self) -> bool:
        try:
            files, categories = await asyncio.gather(self.backend.list_files(), self.backend.get_categories())
        except BackendError as e:
            self._fail("Failed to load files", e)
            return False
        self._apply_catalog(files or [], categories or [])
        return True

    def _apply_catalog(self, files: list[FileRecord], categories: list[Category]) -> None:
        self.store.replace(files, categories)
        self._loaded = True
        file_id = self.editor.file_id
        if file_id is None:
            return
        record = self.store.get(file_id)
        if record is None:
            log.debug("Open file %s left the catalog", file_id)
            self._clear_editor()
        elif self.editor.status is EditorStatus.READY:
            self.editor = replace(self.editor, file=record)

    async def rescan(self) -> bool:
        """Ask the backend to rebuild the catalog from disk."""
        if not self._begin(Phase.RESCANNING):
            return False
        try:
            result = await self.backend.rescan()
        except BackendError as e:
            self._fail("Rescan failed", e)
            return False
        else:
            self._apply_catalog(result.files, result.categories)
            self.presenter.notify(f"Scan complete: {_plural(len(result.files))} found", SUCCESS)
            return True
        finally:
            self._end(Phase.RESCANNING)

    # -- Filtering --

    def visible_files(self) -> list[FileRecord]:
        return visible_files(self.store.files, self.store.filters)

    async def select_category(self, category: str) -> bool:
        """Switch category and open the first visible file (or clear the editor)."""
        if not self.store.set_category(category):
            return False
        first = first_visible(self.store.files, self.store.filters)
        if first is None:
            self._clear_editor()
            self._render()
            return True
        await self.open_file(first.id)
        return True

    def set_search(self, query: str) -> bool:
        """Apply a search query immediately. Never changes the open file."""
        if not self.store.set_search(query):
            return False
        self._render()
        return True

    def search_input(self, text: str) -> None:
        """Debounced entry point for search-box keystrokes."""
        self._search(text)

    def flush_search(self) -> None:
        self._search.flush()

    # -- Editor --

    async def open_file(self, file_id: str) -> bool:
        """Load a file into the editor.

        The row is marked active immediately. A response for a file that is
        no longer the active one is discarded.
        """
        self._open_generation += 1
        generation = self._open_generation
        self.editor = EditorState(status=EditorStatus.LOADING, file_id=file_id, file=self.store.get(file_id))
        self._busy.append(Phase.OPENING_FILE)
        self._render()
        try:
            content = await self.backend.get_file(file_id)
        except BackendError as e:
            if generation == self._open_generation:
                self.editor = replace(self.editor, status=EditorStatus.ERROR, error=str(e))
                self._fail("Failed to load file", e)
            return False
        else:
            if generation != self._open_generation:
                log.debug("Discarding stale content for %s", file_id)
                return False
            self.editor = EditorState(
                status=EditorStatus.READY,
                file_id=file_id,
                file=content.record,
                content=content.content,
                original=content.content,
            )
            return True
        finally:
            self._busy.remove(Phase.OPENING_FILE)
            self._render()

    def _clear_editor(self) -> None:
        self._open_generation += 1
        self.editor = EditorState()

    def edit(self, content: str) -> bool:
        """Replace the edit buffer."""
        if self.editor.status is not EditorStatus.READY or self.editor.read_only:
            return False
        self.editor = replace(self.editor, content=content, notice="")
        self._render()
        return True

    @property
    def can_save(self) -> bool:
        editor = self.editor
        return (
            editor.status is EditorStatus.READY
            and not editor.read_only
            and editor.dirty
            and not self._mutation_in_flight()
        )

    async def save(self) -> bool:
        """Overwrite the open file with the whole edit buffer."""
        if not self.can_save or not self._begin(Phase.SAVING):
            return False
        file_id = self.editor.file_id
        buffer = self.editor.content
        self.editor = replace(self.editor, notice="Saving...")
        try:
            try:
                await self.backend.put_file(file_id, buffer)
            except BackendError as e:
                if self.editor.file_id == file_id:
                    self.editor = replace(self.editor, notice="Save failed")
                self._fail("Save failed", e)
                return False
            if self.editor.file_id == file_id:
                self.editor = replace(self.editor, original=buffer, notice="Saved")
            self.presenter.notify("File saved successfully", SUCCESS)
            await self._refresh()
            return True
        finally:
            self._end(Phase.SAVING)

    # -- Deletion --

    @property
    def can_delete_current(self) -> bool:
        editor = self.editor
        return editor.status is EditorStatus.READY and not editor.read_only and not self._mutation_in_flight()

    def _filter_active(self) -> bool:
        filters = self.store.filters
        return bool(filters.active_category or filters.search_query)

    def deletable_visible(self) -> list[FileRecord]:
        return [f for f in self.visible_files() if not f.read_only]

    def request_delete_current(self) -> ConfirmRequest | None:
        """Ask for confirmation before deleting the open file."""
        if not self.can_delete_current or self.editor.file is None:
            return None
        self.confirmation = ConfirmRequest(
            action=ConfirmAction.DELETE_FILE,
            title="Delete File",
            message="Are you sure you want to delete this file?",
            files=(self.editor.file,),
        )
        self._render()
        return self.confirmation

    def request_delete_visible(self) -> ConfirmRequest | None:
        """Ask for confirmation before deleting every visible, writable file."""
        if not self._filter_active():
            self.presenter.notify("Filter by category or search before deleting all visible files", INFO)
            return None
        deletable = self.deletable_visible()
        if not deletable:
            self.presenter.notify("No deletable files in current view", INFO)
            return None
        self.confirmation = ConfirmRequest(
            action=ConfirmAction.DELETE_VISIBLE,
            title="Delete All Visible Files",
            message=f"This will permanently delete {_plural(len(deletable))} matching your current filter.",
            files=tuple(deletable),
        )
        self._render()
        return self.confirmation

    def cancel_confirmation(self) -> None:
        self.confirmation = None
        self._render()

    async def confirm(self) -> bool:
        """Run the pending confirmed action. The confirmation closes first."""
        request = self.confirmation
        if request is None:
            return False
        phase = Phase.DELETING if request.action is ConfirmAction.DELETE_FILE else Phase.BULK_DELETING
        if not self._begin(phase):
            return False
        self.confirmation = None
        try:
            if request.action is ConfirmAction.DELETE_FILE:
                return await self._delete_file(request.files[0])
            return await self._bulk_delete([f.id for f in request.files]) is not None
        finally:
            self._end(phase)

    async def _delete_file(self, record: FileRecord) -> bool:
        try:
            await self.backend.delete_file(record.id)
        except BackendError as e:
            self._fail("Delete failed", e)
            return False
        self.presenter.notify(f"Deleted: {record.label}", SUCCESS)
        if self.editor.file_id == record.id:
            self._clear_editor()
        await self._refresh()
        return True

    async def _bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult | None:
        try:
            result = await self.backend.bulk_delete(file_ids)
        except BackendError as e:
            self._fail("Bulk delete failed", e)
            return None
        self._after_bulk_delete(file_ids, result)
        await self._refresh()
        return result

    def _after_bulk_delete(self, file_ids: list[str], result: BulkDeleteResult) -> None:
        """Report successes and failures separately and drop a deleted open file."""
        self.last_bulk_result = result
        self.presenter.notify(f"Deleted {_plural(result.deleted)}", SUCCESS)
        if result.errors:
            for err in result.errors:
                log.warning("Could not delete %s: %s", err.id, err.message)
            self.presenter.notify(f"{_plural(len(result.errors))} failed to delete", ERROR)
        open_id = self.editor.file_id
        if open_id in file_ids and open_id not in result.failed_ids:
            self._clear_editor()

    # -- Cleanup --

    async def analyze_cleanup(self) -> bool:
        """Run the cleanup analysis and open the dialog with everything selected."""
        if not self._begin(Phase.CLEANUP_ANALYZING):
            return False
        try:
            result = await self.backend.cleanup_analysis()
        except BackendError as e:
            self._fail("Cleanup analysis failed", e)
            return False
        else:
            self.cleanup = CleanupDialog(result)
            return True
        finally:
            self._end(Phase.CLEANUP_ANALYZING)

    def _cleanup_editable(self) -> bool:
        return self.cleanup is not None and not self.is_busy(Phase.CLEANUP_DELETING)

    def toggle_item(self, item_id: str, checked: bool) -> bool:
        if not self._cleanup_editable():
            return False
        changed = self.cleanup.selection.toggle_item(item_id, checked)
        self._render()
        return changed

    def toggle_group(self, reason: CleanupReason, checked: bool) -> bool:
        if not self._cleanup_editable():
            return False
        changed = self.cleanup.selection.toggle_group(reason, checked)
        self._render()
        return changed

    def toggle_all(self, checked: bool) -> bool:
        if not self._cleanup_editable():
            return False
        changed = self.cleanup.selection.toggle_all(checked)
        self._render()
        return changed

    async def confirm_cleanup(self) -> bool:
        """Delete exactly the selected cleanup items.

        On success the dialog closes as soon as the delete call returns; on
        failure it stays open with the error attached.
        """
        dialog = self.cleanup
        if dialog is None or not dialog.selection.can_submit():
            return False
        if not self._begin(Phase.CLEANUP_DELETING):
            return False
        file_ids = [item.id for item in dialog.selected_items()]
        try:
            try:
                result = await self.backend.bulk_delete(file_ids)
            except BackendError as e:
                dialog.error = str(e)
                self._fail("Cleanup failed", e)
                return False
            if self.cleanup is dialog:
                self.cleanup = None
            self._after_bulk_delete(file_ids, result)
            await self._refresh()
            return True
        finally:
            self._end(Phase.CLEANUP_DELETING)

    def close_cleanup(self) -> None:
        """Discard the dialog and its selection (cancel, Escape, outside click)."""
        self.cleanup = None
        self._render()

    # -- Intents --

    async def dispatch(self, intent: Intent) -> object:
        """Route a user intent to the matching operation."""
        match intent:
            case Load():
                return await self.load()
            case Rescan():
                return await self.rescan()
            case SelectCategory(category=category):
                return await self.select_category(category)
            case SearchInput(text=text):
                return self.search_input(text)
            case OpenFile(file_id=file_id):
                return await self.open_file(file_id)
            case EditContent(content=content):
                return self.edit(content)
            case Save():
                return await self.save()
            case DeleteCurrent():
                return self.request_delete_current()
            case DeleteVisible():
                return self.request_delete_visible()
            case ConfirmDialog():
                return await self.confirm()
            case CancelDialog():
                return self.cancel_confirmation()
            case AnalyzeCleanup():
                return await self.analyze_cleanup()
            case ToggleItem(item_id=item_id, checked=checked):
                return self.toggle_item(item_id, checked)
            case ToggleGroup(reason=reason, checked=checked):
                return self.toggle_group(reason, checked)
            case ToggleAll(checked=checked):
                return self.toggle_all(checked)
            case ConfirmCleanup():
                return await self.confirm_cleanup()
            case CloseCleanup():
                return self.close_cleanup()
            case _:
                raise TypeError(f"Unknown intent: {intent!r}")

    # -- Presentation --

    def view_state(self) -> ViewState:
        filters = self.store.filters
        mutating = self._mutation_in_flight()
        deletable = bool(self.deletable_visible())
        cleanup = None
        if self.cleanup is not None:
            cleanup = self.cleanup.view(deleting=self.is_busy(Phase.CLEANUP_DELETING))
        return ViewState(
            phase=self.phase,
            categories=tuple(category_entries(self.store.categories, self.store.files, filters)),
            files=tuple(self.visible_files()),
            active_category=filters.active_category,
            search_query=filters.search_query,
            editor=self.editor,
            scan_info=f"{_plural(len(self.store))} found",
            can_save=self.can_save,
            can_delete_current=self.can_delete_current,
            can_delete_visible=self._filter_active() and deletable and not mutating,
            can_rescan=not self.is_busy(Phase.RESCANNING),
            busy=frozenset(self._busy),
            confirmation=self.confirmation,
            cleanup=cleanup,
        )

    def _render(self) -> None:
        self.presenter.render(self.view_state())

    def _fail(self, prefix: str, error: BackendError) -> None:
        log.warning("%s: %s", prefix, error)
        self.presenter.notify(f"{prefix}: {error}", ERROR)
