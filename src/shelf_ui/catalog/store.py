"""In-memory catalog of file records and the active filters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from shelf.models.file_record import Category, FileRecord

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterState:
    """Active category ("" = all) and free-text search query."""

    active_category: str = ""
    search_query: str = ""


class CatalogStore:
    """Holds the full catalog and the filter predicates.

    The catalog is only ever replaced wholesale; there is no incremental
    patching. Filter setters report whether anything changed so callers
    can skip redundant work.
    """

    def __init__(self) -> None:
        self._files: tuple[FileRecord, ...] = ()
        self._categories: tuple[Category, ...] = ()
        self._filters = FilterState()

    @property
    def files(self) -> tuple[FileRecord, ...]:
        return self._files

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    @property
    def filters(self) -> FilterState:
        return self._filters

    def replace(self, files: Iterable[FileRecord], categories: Iterable[Category] | None = None) -> None:
        """Swap in a freshly loaded catalog; categories are kept when omitted."""
        self._files = tuple(files)
        if categories is not None:
            self._categories = tuple(categories)
        log.debug("Catalog replaced: %d files, %d categories", len(self._files), len(self._categories))

    def get(self, file_id: str) -> FileRecord | None:
        for record in self._files:
            if record.id == file_id:
                return record
        return None

    def __contains__(self, file_id: str) -> bool:
        return self.get(file_id) is not None

    def __len__(self) -> int:
        return len(self._files)

    def set_category(self, category: str) -> bool:
        """Set the active category; returns True if it changed."""
        category = category or ""
        if category == self._filters.active_category:
            return False
        self._filters = replace(self._filters, active_category=category)
        return True

    def set_search(self, query: str) -> bool:
        """Set the search query; returns True if it changed."""
        query = query or ""
        if query == self._filters.search_query:
            return False
        self._filters = replace(self._filters, search_query=query)
        return True
