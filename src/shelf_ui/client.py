"""Backend clients used by the workflow controller.

``LocalBackend`` calls the catalog in-process; ``DBusBackend`` talks to
``shelf service start`` over the session bus. Both raise ``BackendError``
with the backend's message for every failure.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from dbus_next import BusType
from dbus_next.aio import MessageBus
from dbus_next.errors import DBusError

from shelf.core.catalog import CatalogError, ShelfCatalog
from shelf.dbus_service import BUS_NAME, INTERFACE, OBJECT_PATH
from shelf.models.bulk_result import BulkDeleteResult
from shelf.models.cleanup_result import CleanupResult
from shelf.models.file_record import Category, FileContent, FileRecord, ScanResult

log = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend call failed; the message is shown to the user verbatim."""


class Backend(Protocol):
    """Operations the controller needs from the backend."""

    async def list_files(self) -> list[FileRecord]: ...

    async def get_categories(self) -> list[Category]: ...

    async def get_file(self, file_id: str) -> FileContent: ...

    async def put_file(self, file_id: str, content: str) -> FileRecord: ...

    async def delete_file(self, file_id: str) -> None: ...

    async def bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult: ...

    async def rescan(self) -> ScanResult: ...

    async def cleanup_analysis(self) -> CleanupResult: ...


class LocalBackend:
    """Backend that calls a ``ShelfCatalog`` directly, without D-Bus."""

    def __init__(self, catalog: ShelfCatalog) -> None:
        self._catalog = catalog

    async def list_files(self) -> list[FileRecord]:
        return self._call(self._catalog.list_files)

    async def get_categories(self) -> list[Category]:
        return self._call(self._catalog.categories)

    async def get_file(self, file_id: str) -> FileContent:
        return self._call(self._catalog.read_file, file_id)

    async def put_file(self, file_id: str, content: str) -> FileRecord:
        return self._call(self._catalog.save_file, file_id, content)

    async def delete_file(self, file_id: str) -> None:
        self._call(self._catalog.delete_file, file_id)

    async def bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult:
        return self._call(self._catalog.bulk_delete, list(file_ids))

    async def rescan(self) -> ScanResult:
        return self._call(self._catalog.rescan)

    async def cleanup_analysis(self) -> CleanupResult:
        return self._call(self._catalog.analyze_cleanup)

    @staticmethod
    def _call(func, *args: Any) -> Any:
        try:
            return func(*args)
        except (CatalogError, OSError) as e:
            raise BackendError(str(e)) from e


class DBusBackend:
    """Backend that talks to the Shelf D-Bus service."""

    def __init__(self) -> None:
        self._bus = None
        self._iface = None

    async def connect(self) -> DBusBackend:
        """Connect to the session bus and resolve the catalog interface."""
        try:
            self._bus = await MessageBus(bus_type=BusType.SESSION).connect()
            introspection = await self._bus.introspect(BUS_NAME, OBJECT_PATH)
            proxy = self._bus.get_proxy_object(BUS_NAME, OBJECT_PATH, introspection)
            self._iface = proxy.get_interface(INTERFACE)
        except (DBusError, OSError) as e:
            raise BackendError(f"cannot reach {BUS_NAME}: {e}") from e
        log.debug("Connected to %s", BUS_NAME)
        return self

    def disconnect(self) -> None:
        if self._bus is not None:
            self._bus.disconnect()
            self._bus = None
            self._iface = None

    async def list_files(self) -> list[FileRecord]:
        data = await self._call("list_files", "", "")
        return [FileRecord.from_dict(f) for f in data]

    async def get_categories(self) -> list[Category]:
        data = await self._call("get_categories")
        return [Category.from_dict(c) for c in data]

    async def get_file(self, file_id: str) -> FileContent:
        return FileContent.from_dict(await self._call("get_file", file_id))

    async def put_file(self, file_id: str, content: str) -> FileRecord:
        data = await self._call("put_file", file_id, content)
        return FileRecord.from_dict(data["file"])

    async def delete_file(self, file_id: str) -> None:
        await self._call("delete_file", file_id)

    async def bulk_delete(self, file_ids: list[str]) -> BulkDeleteResult:
        return BulkDeleteResult.from_dict(await self._call("bulk_delete", list(file_ids)))

    async def rescan(self) -> ScanResult:
        return ScanResult.from_dict(await self._call("rescan"))

    async def cleanup_analysis(self) -> CleanupResult:
        return CleanupResult.from_dict(await self._call("cleanup"))

    async def _call(self, name: str, *args: Any) -> Any:
        """Invoke ``call_<name>`` on the proxy and decode the JSON reply."""
        if self._iface is None:
            raise BackendError("not connected to the Shelf service")
        try:
            raw = await getattr(self._iface, f"call_{name}")(*args)
        except DBusError as e:
            raise BackendError(e.text) from e
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise BackendError(f"invalid reply from {name}: {e}") from e
