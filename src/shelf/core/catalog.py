"""Backend catalog: scan results plus read, save, delete and cleanup."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from shelf.core.cleanup import DEFAULT_STALE_DAYS, analyze
from shelf.core.scanner import Scanner
from shelf.models.bulk_result import BulkDeleteError, BulkDeleteResult
from shelf.models.cleanup_result import CleanupResult
from shelf.models.file_record import Category, FileContent, FileRecord, ScanResult
from shelf.settings import Settings

log = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for catalog operation failures."""


class FileNotFoundInCatalog(CatalogError):
    """No file with the requested id is known."""

    def __init__(self, file_id: str) -> None:
        super().__init__("file not found")
        self.file_id = file_id


class ReadOnlyFileError(CatalogError):
    """The file cannot be modified."""

    def __init__(self, record: FileRecord) -> None:
        super().__init__("file is read-only")
        self.record = record


class ShelfCatalog:
    """Owns the current scan result and performs file operations on it."""

    def __init__(self, scanner: Scanner, stale_days: int = DEFAULT_STALE_DAYS) -> None:
        self.scanner = scanner
        self.stale_days = stale_days
        self._result: ScanResult | None = None

    @property
    def result(self) -> ScanResult:
        """Current scan result, scanning lazily on first access."""
        if self._result is None:
            self._result = self.scanner.scan()
        return self._result

    def rescan(self) -> ScanResult:
        """Re-derive the catalog from the filesystem."""
        self._result = self.scanner.scan()
        return self._result

    def categories(self) -> list[Category]:
        return list(self.result.categories)

    def list_files(self, category: str = "", search: str = "") -> list[FileRecord]:
        """List files, optionally filtered by category and name/path search."""
        needle = search.lower()
        files = []
        for record in self.result.files:
            if category and record.category != category:
                continue
            if needle and needle not in record.name.lower() and needle not in record.rel_path.lower():
                continue
            files.append(record)
        return files

    def get(self, file_id: str) -> FileRecord:
        for record in self.result.files:
            if record.id == file_id:
                return record
        raise FileNotFoundInCatalog(file_id)

    def read_file(self, file_id: str) -> FileContent:
        record = self.get(file_id)
        try:
            with open(record.path, encoding="utf-8", errors="replace", newline="") as fh:
                content = fh.read()
        except OSError as e:
            raise CatalogError(f"cannot read file: {e}") from e
        return FileContent(record=record, content=content)

    def save_file(self, file_id: str, content: str) -> FileRecord:
        """Overwrite a file with *content* and return its refreshed record."""
        record = self.get(file_id)
        if record.read_only:
            raise ReadOnlyFileError(record)
        try:
            Path(record.path).write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            raise CatalogError(f"cannot write file: {e}") from e

        refreshed = self.scanner.build_record(Path(record.path)) or record
        self._replace(refreshed)
        log.info("Saved %s (%d bytes)", record.path, refreshed.size)
        return refreshed

    def delete_file(self, file_id: str) -> None:
        record = self.get(file_id)
        if record.read_only:
            raise ReadOnlyFileError(record)
        try:
            Path(record.path).unlink()
        except OSError as e:
            raise CatalogError(f"cannot delete file: {e}") from e
        self._remove({file_id})
        log.info("Deleted %s", record.path)

    def bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult:
        """Delete several files, collecting a per-id error for each failure."""
        result = BulkDeleteResult()
        for fid in file_ids:
            try:
                record = self.get(fid)
            except FileNotFoundInCatalog:
                result.errors.append(BulkDeleteError(fid, "not found"))
                continue
            if record.read_only:
                result.errors.append(BulkDeleteError(fid, f"{record.name}: read-only"))
                continue
            try:
                Path(record.path).unlink()
            except OSError as e:
                result.errors.append(BulkDeleteError(fid, f"{record.name}: {e}"))
                continue
            result.deleted_ids.append(fid)

        result.deleted = len(result.deleted_ids)
        self._remove(set(result.deleted_ids))
        log.info("Bulk delete removed %d files, %d errors", result.deleted, len(result.errors))
        return result

    def analyze_cleanup(self, now: datetime | None = None) -> CleanupResult:
        return analyze(self.result.files, stale_days=self.stale_days, now=now)

    def _replace(self, record: FileRecord) -> None:
        files = self.result.files
        for i, existing in enumerate(files):
            if existing.id == record.id:
                files[i] = record
                return

    def _remove(self, file_ids: set[str]) -> None:
        if file_ids:
            self.result.files = [f for f in self.result.files if f.id not in file_ids]


def build_catalog(root: Path | str | None = None) -> ShelfCatalog:
    """Create a catalog using the configured scan root and staleness threshold."""
    settings = Settings.instance()
    scanner = Scanner(root or settings.get("scan.root"))
    return ShelfCatalog(scanner, stale_days=settings.get_int("cleanup.stale_days"))
