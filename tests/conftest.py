"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from shelf.models.bulk_result import BulkDeleteError, BulkDeleteResult
from shelf.models.cleanup_result import CleanupItem, CleanupReason, CleanupResult
from shelf.models.file_record import CATEGORIES, FileContent, FileRecord, ScanResult
from shelf.settings import Settings
from shelf_ui.client import BackendError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_record(
    file_id: str,
    name: str | None = None,
    category: str = "other",
    size: int = 10,
    age_days: float = 0,
    read_only: bool = False,
    rel_path: str | None = None,
    **kwargs,
) -> FileRecord:
    name = name or f"{file_id}.md"
    return FileRecord(
        id=file_id,
        path=f"/home/me/.claude/{name}",
        rel_path=rel_path or f"~/.claude/{name}",
        name=name,
        size=size,
        mod_time=NOW - timedelta(days=age_days),
        category=category,
        read_only=read_only,
        **kwargs,
    )


def make_cleanup_item(file_id: str, reason: CleanupReason, size: int = 0) -> CleanupItem:
    return CleanupItem(make_record(file_id, size=size), reason, reason.heading)


class FakeBackend:
    """In-memory backend. ``fail`` maps method names to error messages and
    ``gates`` maps method names to events the call waits on."""

    def __init__(self, files=(), contents=None) -> None:
        self.files: list[FileRecord] = list(files)
        self.contents: dict[str, str] = dict(contents or {})
        self.categories = list(CATEGORIES)
        self.cleanup_result = CleanupResult()
        self.bulk_failures: dict[str, str] = {}
        self.fail: dict[str, str] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail:
            raise BackendError(self.fail[name])

    def _find(self, file_id: str) -> FileRecord:
        for record in self.files:
            if record.id == file_id:
                return record
        raise BackendError("file not found")

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def list_files(self) -> list[FileRecord]:
        await self._enter("list_files")
        return list(self.files)

    async def get_categories(self):
        await self._enter("get_categories")
        return list(self.categories)

    async def get_file(self, file_id: str) -> FileContent:
        await self._enter("get_file", file_id)
        return FileContent(self._find(file_id), self.contents.get(file_id, ""))

    async def put_file(self, file_id: str, content: str) -> FileRecord:
        await self._enter("put_file", file_id, content)
        record = self._find(file_id)
        self.contents[file_id] = content
        return record

    async def delete_file(self, file_id: str) -> None:
        await self._enter("delete_file", file_id)
        record = self._find(file_id)
        self.files.remove(record)

    async def bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult:
        await self._enter("bulk_delete", list(file_ids))
        result = BulkDeleteResult()
        for fid in file_ids:
            if fid in self.bulk_failures:
                result.errors.append(BulkDeleteError(fid, self.bulk_failures[fid]))
                continue
            self.files = [f for f in self.files if f.id != fid]
            result.deleted_ids.append(fid)
        result.deleted = len(result.deleted_ids)
        return result

    async def rescan(self) -> ScanResult:
        await self._enter("rescan")
        return ScanResult(files=list(self.files), categories=list(self.categories))

    async def cleanup_analysis(self) -> CleanupResult:
        await self._enter("cleanup_analysis")
        return self.cleanup_result


class RecordingPresenter:
    def __init__(self) -> None:
        self.states = []
        self.notifications: list[tuple[str, str]] = []

    def render(self, state) -> None:
        self.states.append(state)

    def notify(self, message: str, level: str = "info") -> None:
        self.notifications.append((message, level))

    def messages(self, level: str) -> list[str]:
        return [m for m, lvl in self.notifications if lvl == level]


class ManualTimer:
    def __init__(self, delay: float, fn) -> None:
        self.delay = delay
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled callbacks; ``advance()`` runs the live ones."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, delay: float, fn) -> ManualTimer:
        timer = ManualTimer(delay, fn)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self) -> None:
        timers, self.timers = self.timers, []
        for timer in timers:
            if not timer.cancelled:
                timer.fn()


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point settings at a temp config dir and reset the singleton."""
    config = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    monkeypatch.setattr(Settings, "_instance", None)
    return config / "shelf" / "settings.json"


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """An empty home directory with $HOME pointing at it."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    return path


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
