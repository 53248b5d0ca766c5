"""Flags empty, near-empty and stale files as cleanup candidates."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from shelf.models.cleanup_result import CleanupItem, CleanupReason, CleanupResult
from shelf.models.file_record import FileRecord
from shelf.utils import days_since

log = logging.getLogger(__name__)

DEFAULT_STALE_DAYS = 30

_EMPTY_CONTENT_LABELS = {
    "": "Blank file (whitespace only)",
    "[]": "Empty array ([])",
    "{}": "Empty object ({})",
    "null": "Null content",
}


def classify(record: FileRecord, now: datetime, stale_days: int = DEFAULT_STALE_DAYS) -> CleanupItem | None:
    """Return a cleanup item for *record*, or None if it should be kept.

    Checks run in order and the first match wins, so a file appears at
    most once per analysis.
    """
    if record.read_only:
        return None

    if record.size == 0:
        return CleanupItem(record, CleanupReason.EMPTY_FILE, "Empty file (0 bytes)")

    try:
        text = Path(record.path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        log.debug("Cannot read %s, skipping", record.path)
        return None

    label = _EMPTY_CONTENT_LABELS.get(text.strip())
    if label is not None:
        return CleanupItem(record, CleanupReason.EMPTY_CONTENT, label)

    days = days_since(record.mod_time, now)
    if days >= stale_days:
        return CleanupItem(record, CleanupReason.STALE, f"Not modified in {days} days", days_since=days)

    return None


def analyze(
    records: Iterable[FileRecord],
    stale_days: int = DEFAULT_STALE_DAYS,
    now: datetime | None = None,
) -> CleanupResult:
    """Run the cleanup classifier over *records*."""
    now = now or datetime.now(timezone.utc)
    items = [item for item in (classify(r, now, stale_days) for r in records) if item is not None]
    total = sum(item.size for item in items)
    log.info("Cleanup analysis flagged %d files (%d bytes)", len(items), total)
    return CleanupResult(items=items, total_count=len(items), total_size=total)
