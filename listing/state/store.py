"""
Filter state store for one list view.

The store owns the current Criteria snapshot of a view. It is seeded from
persistent storage (falling back to the schema defaults) and writes every
new snapshot back under its StorageKey right after the transition.
Listeners are notified after persistence, so a failing backend never blocks
or corrupts the in-memory state.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional

from listing.state.models import Criteria, FilterSchema
from state_manager import StateManager, get_state_manager

logger = logging.getLogger(__name__)

CriteriaListener = Callable[[Criteria], None]


class FilterStateStore:
    """
    Holds and persists the Criteria of one list view.

    Args:
        storage_key: Where this view's criteria are persisted
        schema: The view's filter declarations
        state_manager: Persistence adapter (defaults to the process-wide one)
        persist: Disable to keep the criteria in memory only
    """

    def __init__(self, storage_key: str, schema: FilterSchema,
                 state_manager: Optional[StateManager] = None, persist: bool = True):
        self.storage_key = storage_key
        self.schema = schema
        self.persist = persist
        self.state_manager = state_manager or get_state_manager()
        self._listeners: List[CriteriaListener] = []
        self._criteria = self._load()

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    @property
    def defaults(self) -> Criteria:
        return self.schema.defaults()

    def _load(self) -> Criteria:
        defaults = self.schema.defaults()
        if not self.persist:
            return defaults
        stored = self.state_manager.load(self.storage_key, defaults.to_dict())
        criteria = self.schema.normalize(stored)
        logger.debug(f"Loaded criteria for {self.storage_key}: {criteria.to_dict()}")
        return criteria

    def _save(self) -> None:
        if self.persist:
            self.state_manager.save(self.storage_key, self._criteria.to_dict())

    def _transition(self, criteria: Criteria) -> Criteria:
        self._criteria = criteria
        self._save()
        for listener in list(self._listeners):
            listener(criteria)
        return criteria

    def subscribe(self, listener: CriteriaListener) -> Callable[[], None]:
        """Register a listener for new snapshots; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_filter(self, name: str, value: Any) -> Criteria:
        """Set one filter value and persist the new snapshot."""
        return self.set_filters({name: value})

    def set_filters(self, changes: Mapping[str, Any]) -> Criteria:
        """
        Apply several filter values at once.

        Unknown names are ignored and values that do not fit their field fall
        back to that field's default; both are logged.
        """
        known = {}
        for name, value in changes.items():
            if name not in self.schema:
                logger.warning(f"Ignoring unknown filter '{name}' for {self.storage_key}")
                continue
            known[name] = value
        criteria = self.schema.normalize(self._criteria.merge(known))
        return self._transition(criteria)

    def replace(self, values: Mapping[str, Any]) -> Criteria:
        """Replace the whole snapshot (missing keys take their defaults)."""
        return self._transition(self.schema.normalize(values))

    def reset(self) -> Criteria:
        """Restore the schema defaults and persist them."""
        logger.debug(f"Resetting criteria for {self.storage_key}")
        return self._transition(self.schema.defaults())

    def clear_storage(self) -> bool:
        """Forget the persisted snapshot; in-memory criteria are untouched."""
        return self.state_manager.delete(self.storage_key)

    @property
    def active_filters(self) -> List[str]:
        return self.schema.active_fields(self._criteria)
