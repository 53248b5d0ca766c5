"""Tests for the backend catalog and the local backend."""

from __future__ import annotations

import asyncio
import json

import pytest

from shelf.core.catalog import FileNotFoundInCatalog, ReadOnlyFileError, ShelfCatalog, build_catalog
from shelf.core.scanner import Scanner
from shelf.dbus_service import ERROR_NOT_FOUND, ERROR_READ_ONLY, _to_dbus_error
from shelf_ui.client import BackendError, LocalBackend


@pytest.fixture
def tree(home, monkeypatch):
    monkeypatch.setattr("shelf.core.scanner.is_writable", lambda p: p.name != "locked.md")
    claude = home / ".claude"
    (claude / "memory").mkdir(parents=True)
    (claude / "memory" / "MEMORY.md").write_text("# notes\n")
    (claude / "settings.json").write_text("{}")
    (claude / "locked.md").write_text("")
    (claude / "plans").mkdir()
    (claude / "plans" / "roadmap.md").write_text("ship it")
    return home


@pytest.fixture
def catalog(tree):
    return ShelfCatalog(Scanner(home=tree))


def _id(catalog: ShelfCatalog, name: str) -> str:
    return next(f.id for f in catalog.result.files if f.name == name)


class TestShelfCatalog:
    def test_scans_lazily(self, catalog):
        assert catalog._result is None
        assert len(catalog.list_files()) == 4
        assert catalog._result is not None

    def test_list_files_filters(self, catalog):
        assert [f.name for f in catalog.list_files(category="plans")] == ["roadmap.md"]
        assert {f.name for f in catalog.list_files(search="MEM")} == {"MEMORY.md"}
        assert catalog.list_files(category="memory", search="plans") == []

    def test_read_file(self, catalog):
        content = catalog.read_file(_id(catalog, "MEMORY.md"))
        assert content.content == "# notes\n"
        assert content.record.category == "memory"

    def test_unknown_id(self, catalog):
        with pytest.raises(FileNotFoundInCatalog, match="file not found"):
            catalog.read_file("deadbeef")

    def test_save_file_refreshes_record(self, tree, catalog):
        file_id = _id(catalog, "roadmap.md")
        record = catalog.save_file(file_id, "ship it twice")
        assert (tree / ".claude" / "plans" / "roadmap.md").read_text() == "ship it twice"
        assert record.size == len("ship it twice")
        assert catalog.get(file_id).size == record.size

    def test_crlf_line_endings_survive_read_and_save(self, tree, catalog):
        path = tree / ".claude" / "plans" / "roadmap.md"
        path.write_bytes(b"line1\r\nline2\r\n")
        file_id = _id(catalog, "roadmap.md")

        content = catalog.read_file(file_id).content
        assert content == "line1\r\nline2\r\n"

        catalog.save_file(file_id, content + "x")
        assert path.read_bytes() == b"line1\r\nline2\r\nx"

    def test_save_read_only_refused(self, tree, catalog):
        with pytest.raises(ReadOnlyFileError, match="read-only"):
            catalog.save_file(_id(catalog, "locked.md"), "data")
        assert (tree / ".claude" / "locked.md").read_text() == ""

    def test_delete_file(self, tree, catalog):
        file_id = _id(catalog, "settings.json")
        catalog.delete_file(file_id)
        assert not (tree / ".claude" / "settings.json").exists()
        with pytest.raises(FileNotFoundInCatalog):
            catalog.get(file_id)

    def test_bulk_delete_reports_per_id_errors(self, tree, catalog):
        ok = _id(catalog, "settings.json")
        locked = _id(catalog, "locked.md")
        vanished = _id(catalog, "roadmap.md")
        (tree / ".claude" / "plans" / "roadmap.md").unlink()

        result = catalog.bulk_delete([ok, locked, "missing", vanished])

        assert result.deleted == 1
        assert result.deleted_ids == [ok]
        errors = {e.id: e.message for e in result.errors}
        assert errors[locked] == "locked.md: read-only"
        assert errors["missing"] == "not found"
        assert errors[vanished].startswith("roadmap.md: ")
        assert {f.name for f in catalog.result.files} == {"MEMORY.md", "locked.md", "roadmap.md"}

    def test_rescan_picks_up_new_files(self, tree, catalog):
        assert len(catalog.result.files) == 4
        (tree / ".claude" / "todos").mkdir()
        (tree / ".claude" / "todos" / "t.json").write_text("[1]")
        assert len(catalog.rescan().files) == 5

    def test_analyze_cleanup_skips_read_only(self, catalog):
        result = catalog.analyze_cleanup()
        assert [i.record.name for i in result.items] == ["settings.json"]
        assert result.items[0].reason_label == "Empty object ({})"

    def test_build_catalog_uses_settings(self, tree, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(json.dumps({"scan": {"root": str(tree / ".claude" / "plans")}, "cleanup": {"stale_days": 5}}))
        catalog = build_catalog()
        assert catalog.stale_days == 5
        assert catalog.scanner.search_paths() == [tree / ".claude" / "plans"]

    def test_build_catalog_explicit_root_wins(self, tree):
        catalog = build_catalog(tree / ".claude")
        assert catalog.scanner.search_paths() == [tree / ".claude"]
        assert catalog.stale_days == 30


class TestLocalBackend:
    def test_calls_catalog(self, catalog):
        backend = LocalBackend(catalog)

        async def scenario():
            files = await backend.list_files()
            categories = await backend.get_categories()
            content = await backend.get_file(_id(catalog, "MEMORY.md"))
            return files, categories, content

        files, categories, content = asyncio.run(scenario())
        assert len(files) == 4
        assert categories[0].id == "memory"
        assert content.content == "# notes\n"

    def test_errors_become_backend_errors(self, catalog):
        backend = LocalBackend(catalog)
        with pytest.raises(BackendError, match="file is read-only"):
            asyncio.run(backend.put_file(_id(catalog, "locked.md"), "x"))
        with pytest.raises(BackendError, match="file not found"):
            asyncio.run(backend.delete_file("nope"))


class TestDBusErrors:
    def test_catalog_errors_map_to_dbus_names(self, catalog):
        locked = catalog.get(_id(catalog, "locked.md"))
        assert _to_dbus_error(FileNotFoundInCatalog("x")).type == ERROR_NOT_FOUND
        assert _to_dbus_error(ReadOnlyFileError(locked)).type == ERROR_READ_ONLY
        assert _to_dbus_error(ReadOnlyFileError(locked)).text == "file is read-only"
