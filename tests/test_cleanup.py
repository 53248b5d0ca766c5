"""Tests for the cleanup classifier."""

from __future__ import annotations

import os
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from shelf.core.cleanup import analyze, classify
from shelf.core.scanner import Scanner
from shelf.models.cleanup_result import CleanupReason

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def make(home):
    scanner = Scanner(home=home)

    def _make(name: str, content: str = "content", age_days: float = 0):
        path = home / ".claude" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        record = scanner.build_record(path)
        return replace(record, mod_time=NOW - timedelta(days=age_days))

    return _make


class TestClassify:
    def test_zero_bytes(self, make):
        item = classify(make("empty.md", ""), NOW)
        assert item.reason is CleanupReason.EMPTY_FILE
        assert item.reason_label == "Empty file (0 bytes)"

    @pytest.mark.parametrize(
        "content,label",
        [
            ("   \n\t", "Blank file (whitespace only)"),
            ("[]\n", "Empty array ([])"),
            (" {} ", "Empty object ({})"),
            ("null", "Null content"),
        ],
    )
    def test_empty_content(self, make, content, label):
        item = classify(make("x.json", content), NOW)
        assert item.reason is CleanupReason.EMPTY_CONTENT
        assert item.reason_label == label

    def test_near_empty_but_meaningful_content_is_kept(self, make):
        assert classify(make("x.json", "{ }"), NOW) is None
        assert classify(make("y.json", "[1]"), NOW) is None

    def test_stale_threshold(self, make):
        assert classify(make("fresh.md", age_days=29.9), NOW) is None
        item = classify(make("old.md", age_days=30), NOW)
        assert item.reason is CleanupReason.STALE
        assert item.reason_label == "Not modified in 30 days"
        assert item.days_since == 30

    def test_custom_stale_days(self, make):
        assert classify(make("a.md", age_days=10), NOW, stale_days=7).reason is CleanupReason.STALE
        assert classify(make("b.md", age_days=10), NOW, stale_days=60) is None

    def test_first_reason_wins(self, make):
        item = classify(make("old-empty.md", "", age_days=400), NOW)
        assert item.reason is CleanupReason.EMPTY_FILE

    def test_read_only_is_never_flagged(self, make):
        record = replace(make("locked.md", ""), read_only=True)
        assert classify(record, NOW) is None

    def test_unreadable_file_is_skipped(self, make):
        record = make("gone.md", "data")
        os.remove(record.path)
        assert classify(record, NOW) is None


class TestAnalyze:
    def test_totals_and_order(self, make):
        records = [
            make("keep.md"),
            make("empty.md", ""),
            make("blank.md", "  "),
            make("old.md", "old", age_days=90),
        ]
        result = analyze(records, now=NOW)
        assert [i.record.name for i in result.items] == ["empty.md", "blank.md", "old.md"]
        assert result.total_count == 3
        assert result.total_size == 2 + 3

    def test_nothing_to_clean(self, make):
        result = analyze([make("keep.md")], now=NOW)
        assert result.items == []
        assert result.total_count == 0
        assert result.total_size == 0
