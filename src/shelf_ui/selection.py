"""Tri-state hierarchical selection for the cleanup dialog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, Iterable, Sequence

log = logging.getLogger(__name__)


class TriState(Enum):
    """Visual state of a checkbox that summarizes its children."""

    UNCHECKED = "unchecked"
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"


def tri_state(selected: int, total: int) -> TriState:
    """Summarize *selected* out of *total* children.

    An empty set of children counts as fully selected.
    """
    if selected >= total:
        return TriState.CHECKED
    if selected == 0:
        return TriState.UNCHECKED
    return TriState.INDETERMINATE


@dataclass(frozen=True)
class GroupSnapshot:
    """Immutable view of one group for the presenter."""

    key: Hashable
    state: TriState
    item_ids: tuple[str, ...]
    selected_count: int
    total_size: int
    selected_size: int


@dataclass(frozen=True)
class SelectionSnapshot:
    """Immutable view of the whole selection for the presenter."""

    all_state: TriState
    groups: tuple[GroupSnapshot, ...]
    selected_ids: frozenset[str]
    selected_count: int
    selected_size: int
    total_count: int
    total_size: int

    @property
    def can_submit(self) -> bool:
        return self.selected_count > 0


class SelectionEngine:
    """Selected-id set over items partitioned into named groups.

    Items need ``id`` and ``size`` attributes; *key* maps an item to its
    group. Three layers of toggles (item, group, select-all) all write
    the same underlying set, and every checkbox state is derived from that
    set on demand.

    The engine copies the items it is given and never mutates them.
    """

    def __init__(
        self,
        items: Iterable[Any],
        key: Callable[[Any], Hashable] = lambda item: item.reason,
        order: Sequence[Hashable] = (),
        selected: bool = True,
    ) -> None:
        self._items: dict[str, Any] = {}
        for item in items:
            if item.id in self._items:
                log.debug("Duplicate selection item %s ignored", item.id)
                continue
            self._items[item.id] = item
        self._key = key
        self._groups = self._partition(order)
        self._selected: set[str] = set(self._items) if selected else set()

    def _partition(self, order: Sequence[Hashable]) -> dict[Hashable, list[str]]:
        """Group ids by key; keys in *order* come first, the rest by first appearance."""
        groups: dict[Hashable, list[str]] = {k: [] for k in order}
        for item_id, item in self._items.items():
            groups.setdefault(self._key(item), []).append(item_id)
        return {k: ids for k, ids in groups.items() if ids}

    # -- Mutators --

    def toggle_item(self, item_id: str, checked: bool) -> bool:
        """Select or deselect one item. Returns True if the selection changed."""
        if item_id not in self._items:
            log.debug("Ignoring toggle for unknown item %s", item_id)
            return False
        return self._apply([item_id], checked)

    def toggle_group(self, key: Hashable, checked: bool) -> bool:
        """Set every item of group *key* to *checked* in one step."""
        ids = self._groups.get(key)
        if not ids:
            log.debug("Ignoring toggle for unknown group %r", key)
            return False
        return self._apply(ids, checked)

    def toggle_all(self, checked: bool) -> bool:
        """Set every known item to *checked*."""
        return self._apply(self._items, checked)

    def _apply(self, ids: Iterable[str], checked: bool) -> bool:
        before = len(self._selected)
        if checked:
            self._selected.update(ids)
        else:
            self._selected.difference_update(ids)
        return len(self._selected) != before

    # -- Queries --

    @property
    def items(self) -> tuple[Any, ...]:
        return tuple(self._items.values())

    @property
    def group_keys(self) -> tuple[Hashable, ...]:
        return tuple(self._groups)

    def items_in(self, key: Hashable) -> tuple[Any, ...]:
        return tuple(self._items[i] for i in self._groups.get(key, ()))

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._selected

    def item_state(self, item_id: str) -> TriState:
        return TriState.CHECKED if item_id in self._selected else TriState.UNCHECKED

    def group_state(self, key: Hashable) -> TriState:
        ids = self._groups.get(key, ())
        return tri_state(sum(1 for i in ids if i in self._selected), len(ids))

    def all_state(self) -> TriState:
        return tri_state(len(self._selected), len(self._items))

    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._selected)

    def selected_count(self) -> int:
        return len(self._selected)

    def selected_total_size(self) -> int:
        return sum(self._items[i].size for i in self._selected)

    def can_submit(self) -> bool:
        """Whether actions that need a non-empty selection are enabled."""
        return bool(self._selected)

    def snapshot(self) -> SelectionSnapshot:
        groups = []
        for key, ids in self._groups.items():
            chosen = [i for i in ids if i in self._selected]
            groups.append(
                GroupSnapshot(
                    key=key,
                    state=tri_state(len(chosen), len(ids)),
                    item_ids=tuple(ids),
                    selected_count=len(chosen),
                    total_size=sum(self._items[i].size for i in ids),
                    selected_size=sum(self._items[i].size for i in chosen),
                )
            )
        return SelectionSnapshot(
            all_state=self.all_state(),
            groups=tuple(groups),
            selected_ids=self.selected_ids(),
            selected_count=self.selected_count(),
            selected_size=self.selected_total_size(),
            total_count=len(self._items),
            total_size=sum(item.size for item in self._items.values()),
        )
