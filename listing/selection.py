"""
Selection tracking for bulk operations on list views.

Selection is independent of filtering: callers pass only the currently
visible ids to select_all()/toggle_all() when "select visible" is wanted.
"""

import logging
from typing import FrozenSet, Hashable, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


class SelectionManager:
    """Set-backed tracker of selected record ids."""

    def __init__(self, initial_ids: Optional[Iterable[Hashable]] = None):
        self._selected: FrozenSet[Hashable] = frozenset(initial_ids or ())

    @property
    def selected_ids(self) -> FrozenSet[Hashable]:
        """Immutable snapshot of the current selection."""
        return self._selected

    @property
    def count(self) -> int:
        return len(self._selected)

    def __contains__(self, record_id: Hashable) -> bool:
        return record_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._selected)

    def is_selected(self, record_id: Hashable) -> bool:
        return record_id in self._selected

    def select(self, record_id: Hashable) -> None:
        self._selected = self._selected | {record_id}

    def deselect(self, record_id: Hashable) -> None:
        self._selected = self._selected - {record_id}

    def toggle(self, record_id: Hashable) -> None:
        if record_id in self._selected:
            self.deselect(record_id)
        else:
            self.select(record_id)

    def select_all(self, record_ids: Iterable[Hashable]) -> None:
        """Replace the selection with ``record_ids``."""
        self._selected = frozenset(record_ids)

    def set_selected(self, record_ids: Iterable[Hashable]) -> None:
        self.select_all(record_ids)

    def clear(self) -> None:
        self._selected = frozenset()

    def all_selected(self, record_ids: Iterable[Hashable]) -> bool:
        """True if every id in ``record_ids`` is selected (vacuously true for none)."""
        return all(record_id in self._selected for record_id in record_ids)

    def toggle_all(self, record_ids: Iterable[Hashable]) -> None:
        """Deselect everything if all ``record_ids`` are selected, else select exactly them."""
        record_ids = list(record_ids)
        if self.all_selected(record_ids):
            self.clear()
        else:
            self.select_all(record_ids)
        logger.debug(f"Selection now holds {len(self._selected)} ids")
