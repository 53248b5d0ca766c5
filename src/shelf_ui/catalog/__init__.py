"""Catalog store and view derivation."""

from shelf_ui.catalog.store import CatalogStore, FilterState
from shelf_ui.catalog.view import (
    ALL_CATEGORY,
    CategoryCount,
    CategoryEntry,
    category_counts,
    category_entries,
    matches_category,
    matches_search,
    visible_files,
)

__all__ = [
    "ALL_CATEGORY",
    "CatalogStore",
    "CategoryCount",
    "CategoryEntry",
    "FilterState",
    "category_counts",
    "category_entries",
    "matches_category",
    "matches_search",
    "visible_files",
]
