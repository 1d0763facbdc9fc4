"""
Registry of filter state stores keyed by StorageKey.

Views own their stores by default. The registry is only for views that must
deliberately share one Criteria instance (e.g. a list and its export dialog).
"""

import logging
import threading
from typing import Dict, List, Optional

from listing.state.models import FilterSchema
from listing.state.store import FilterStateStore
from state_manager import StateManager

logger = logging.getLogger(__name__)


class StoreRegistry:
    """Hands out one FilterStateStore per StorageKey."""

    def __init__(self, state_manager: Optional[StateManager] = None):
        self.state_manager = state_manager
        self._stores: Dict[str, FilterStateStore] = {}
        self._lock = threading.Lock()

    def get_or_create(self, storage_key: str, schema: FilterSchema) -> FilterStateStore:
        with self._lock:
            store = self._stores.get(storage_key)
            if store is None:
                store = FilterStateStore(storage_key, schema, state_manager=self.state_manager)
                self._stores[storage_key] = store
                logger.debug(f"Registered filter store {storage_key}")
            elif store.schema is not schema:
                logger.warning(f"Store {storage_key} already registered with a different schema")
            return store

    def release(self, storage_key: str) -> bool:
        """Drop the in-memory store; its persisted criteria survive."""
        with self._lock:
            return self._stores.pop(storage_key, None) is not None

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._stores)
