"""Tests for model serialization and helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import NOW, make_record
from shelf.models import BulkDeleteResult, CleanupItem, CleanupReason, FileRecord, ScanResult, normalize_category
from shelf.utils import bytes_to_human, format_relative_time, home_relative


class TestFileRecord:
    def test_from_dict_normalizes_input(self):
        record = FileRecord.from_dict(
            {
                "id": "abc",
                "name": "x.md",
                "size": -5,
                "mod_time": "2026-01-02T03:04:05",
                "category": "bogus",
                "display_name": "",
            }
        )
        assert record.size == 0
        assert record.category == "other"
        assert record.display_name is None
        assert record.mod_time.tzinfo is timezone.utc
        assert record.label == "x.md"

    def test_dict_form_round_trips(self):
        record = make_record("a", "MEMORY.md", category="memory", display_name="app/MEMORY.md", scope="project")
        assert FileRecord.from_dict(record.to_dict()) == record

    def test_normalize_category(self):
        assert normalize_category("memory") == "memory"
        assert normalize_category(None) == "other"


class TestResults:
    def test_cleanup_item_flattens_record(self):
        item = CleanupItem(make_record("a", size=0), CleanupReason.EMPTY_FILE, "Empty file (0 bytes)")
        data = item.to_dict()
        assert data["id"] == "a"
        assert data["reason"] == "empty_file"
        assert CleanupItem.from_dict(data) == item

    def test_reason_headings_follow_declaration_order(self):
        assert [r.heading for r in CleanupReason] == ["Empty Files", "Empty Content", "Stale Files"]

    def test_bulk_result_from_dict(self):
        result = BulkDeleteResult.from_dict(
            {"deleted": 2, "deleted_ids": ["a", "b"], "errors": [{"id": "x", "message": "x.md: read-only"}]}
        )
        assert result.failed_ids == {"x"}
        assert result.errors[0].message == "x.md: read-only"

    def test_scan_result_from_sparse_dict(self):
        result = ScanResult.from_dict({"files": None})
        assert result.files == []
        assert result.root_path is None


class TestUtils:
    def test_home_relative(self, home):
        assert home_relative(home / ".claude" / "a.md", home) == "~/.claude/a.md"
        assert home_relative("/etc/claude/CLAUDE.md", home) == "/etc/claude/CLAUDE.md"
        assert home_relative(str(home) + "-other/x", home) == str(home) + "-other/x"

    def test_bytes_to_human(self):
        assert bytes_to_human(0) == "0 B"
        assert bytes_to_human(512) == "512 B"
        assert bytes_to_human(2048) == "2.0 KB"

    def test_format_relative_time(self):
        assert format_relative_time(NOW - timedelta(seconds=5), NOW) == "just now"
        assert format_relative_time(NOW - timedelta(minutes=5), NOW) == "5m ago"
        assert format_relative_time(NOW - timedelta(hours=3), NOW) == "3h ago"
        assert format_relative_time(NOW - timedelta(days=2), NOW) == "2d ago"
        old = datetime(2025, 6, 15, 12, tzinfo=timezone.utc)
        assert format_relative_time(old, NOW).startswith("2025-06-1")
