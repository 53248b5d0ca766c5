"""Pure derivations over the catalog: visible files and category badges.

Nothing here mutates its inputs; every call returns fresh objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from shelf.models.file_record import Category, FileRecord
from shelf_ui.catalog.store import FilterState

ALL_CATEGORY = ""
ALL_LABEL = "All Files"


@dataclass(frozen=True)
class CategoryCount:
    """Number and total size of search-matching files in one category."""

    count: int = 0
    total_size: int = 0


@dataclass(frozen=True)
class CategoryEntry:
    """One row of the rendered category list."""

    id: str
    label: str
    icon: str
    count: int
    total_size: int
    active: bool


def matches_search(record: FileRecord, query: str) -> bool:
    """Case-insensitive substring match over name, path, display and project name."""
    if not query:
        return True
    needle = query.lower()
    fields = (record.name, record.rel_path, record.display_name, record.project_name)
    return any(field and needle in field.lower() for field in fields)


def matches_category(record: FileRecord, category: str) -> bool:
    return not category or record.category == category


def sort_by_recency(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Most recently modified first; ties keep catalog order."""
    return sorted(records, key=lambda r: r.mod_time, reverse=True)


def visible_files(records: Sequence[FileRecord], filters: FilterState) -> list[FileRecord]:
    """Files passing both the category and the search predicate."""
    return sort_by_recency(
        r
        for r in records
        if matches_category(r, filters.active_category) and matches_search(r, filters.search_query)
    )


def category_counts(records: Sequence[FileRecord], query: str) -> dict[str, CategoryCount]:
    """Per-category totals after the search predicate only.

    The active category filter is not applied here.
    """
    counts: dict[str, list[int]] = {}
    for record in records:
        if not matches_search(record, query):
            continue
        bucket = counts.setdefault(record.category, [0, 0])
        bucket[0] += 1
        bucket[1] += record.size
    return {cat: CategoryCount(count=c, total_size=s) for cat, (c, s) in counts.items()}


def category_entries(
    categories: Sequence[Category],
    records: Sequence[FileRecord],
    filters: FilterState,
) -> list[CategoryEntry]:
    """Rendered category list: "all" first, then non-empty categories in order."""
    counts = category_counts(records, filters.search_query)
    matched = CategoryCount(
        count=sum(c.count for c in counts.values()),
        total_size=sum(c.total_size for c in counts.values()),
    )
    entries = [
        CategoryEntry(
            id=ALL_CATEGORY,
            label=ALL_LABEL,
            icon="files",
            count=matched.count,
            total_size=matched.total_size,
            active=filters.active_category == ALL_CATEGORY,
        )
    ]
    for category in categories:
        count = counts.get(category.id)
        if count is None or count.count == 0:
            continue
        entries.append(
            CategoryEntry(
                id=category.id,
                label=category.label,
                icon=category.icon,
                count=count.count,
                total_size=count.total_size,
                active=filters.active_category == category.id,
            )
        )
    return entries


def shown_total_size(entries: Iterable[CategoryEntry]) -> int:
    """Total size across the shown category entries, excluding "all"."""
    return sum(e.total_size for e in entries if e.id != ALL_CATEGORY)


def first_visible(records: Sequence[FileRecord], filters: FilterState) -> FileRecord | None:
    files = visible_files(records, filters)
    return files[0] if files else None
