"""D-Bus service exposing the file catalog.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "s" are D-Bus protocol types, not Python syntax.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dbus_next import BusType
from dbus_next.aio import MessageBus
from dbus_next.errors import DBusError
from dbus_next.service import ServiceInterface, method, signal

from shelf.core.catalog import CatalogError, FileNotFoundInCatalog, ReadOnlyFileError, ShelfCatalog, build_catalog

log = logging.getLogger(__name__)

BUS_NAME = "io.github.shelf"
OBJECT_PATH = "/io/github/shelf"
INTERFACE = "io.github.shelf.Catalog"

ERROR_NOT_FOUND = "io.github.shelf.Error.NotFound"
ERROR_READ_ONLY = "io.github.shelf.Error.ReadOnly"
ERROR_FAILED = "io.github.shelf.Error.Failed"


def _to_dbus_error(exc: CatalogError) -> DBusError:
    if isinstance(exc, FileNotFoundInCatalog):
        return DBusError(ERROR_NOT_FOUND, str(exc))
    if isinstance(exc, ReadOnlyFileError):
        return DBusError(ERROR_READ_ONLY, str(exc))
    return DBusError(ERROR_FAILED, str(exc))


# noinspection PyPep8Naming
class ShelfDBusService(ServiceInterface):
    """D-Bus service interface for the catalog."""

    def __init__(self, catalog: ShelfCatalog) -> None:
        super().__init__(INTERFACE)
        self._catalog = catalog

    @method()
    def ListFiles(self, category: "s", search: "s") -> "s":  # type: ignore[override]
        """List files as JSON, optionally filtered."""
        files = self._catalog.list_files(category=category, search=search)
        return json.dumps([f.to_dict() for f in files])

    @method()
    def GetCategories(self) -> "s":  # type: ignore[override]
        return json.dumps([c.to_dict() for c in self._catalog.categories()])

    @method()
    def GetFile(self, file_id: "s") -> "s":  # type: ignore[override]
        """Return a file record with its content."""
        try:
            return json.dumps(self._catalog.read_file(file_id).to_dict())
        except CatalogError as e:
            raise _to_dbus_error(e) from e

    @method()
    def PutFile(self, file_id: "s", content: "s") -> "s":  # type: ignore[override]
        """Overwrite a file and return its refreshed record."""
        try:
            record = self._catalog.save_file(file_id, content)
        except CatalogError as e:
            raise _to_dbus_error(e) from e
        self._emit_changed()
        return json.dumps({"success": True, "file": record.to_dict()})

    @method()
    def DeleteFile(self, file_id: "s") -> "s":  # type: ignore[override]
        try:
            self._catalog.delete_file(file_id)
        except CatalogError as e:
            raise _to_dbus_error(e) from e
        self._emit_changed()
        return json.dumps({"success": True})

    @method()
    def BulkDelete(self, file_ids: "as") -> "s":  # type: ignore[override]
        """Delete several files; per-id failures are reported, not raised."""
        result = self._catalog.bulk_delete(list(file_ids))
        if result.deleted:
            self._emit_changed()
        return json.dumps(result.to_dict())

    @method()
    def Rescan(self) -> "s":  # type: ignore[override]
        """Re-scan the filesystem and return the full result."""
        result = self._catalog.rescan()
        self._emit_changed()
        return json.dumps(result.to_dict())

    @method()
    def Cleanup(self) -> "s":  # type: ignore[override]
        """Return cleanup suggestions as JSON."""
        return json.dumps(self._catalog.analyze_cleanup().to_dict())

    @signal()
    def CatalogChanged(self, file_count: int) -> "u":  # type: ignore[override]
        return file_count

    def _emit_changed(self) -> None:
        self.CatalogChanged(len(self._catalog.result.files))


async def run_service(root: Path | str | None = None) -> None:
    """Start the D-Bus service."""
    catalog = build_catalog(root)
    catalog.rescan()
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = ShelfDBusService(catalog)
    bus.export(OBJECT_PATH, service)
    await bus.request_name(BUS_NAME)
    log.info("D-Bus service started on %s", BUS_NAME)
    await bus.wait_for_disconnect()


def start_service(root: Path | str | None = None) -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service(root))
