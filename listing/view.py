"""
ListView - per-view composition of the list query engine.

A ListView owns, for one StorageKey, the record collection, the filter
state store, pagination, selection and sort, plus an optional URL
synchronizer. Derivations (visible subset, current page, page markers) are
pure recomputations over that state; every criteria change or record
replacement re-clamps the current page.
"""

import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence

from config_manager import get_config
from core.config import Config
from listing.pagination import PageMarker, PaginationState
from listing.predicates import filter_records, resolve_path
from listing.selection import SelectionManager
from listing.sorting import SortConfig, sort_records
from listing.state.models import Criteria, FilterSchema
from listing.state.snapshots import ListViewSnapshot
from listing.state.store import FilterStateStore
from listing.url_sync import Location, UrlSynchronizer
from state_manager import StateManager, get_state_manager

logger = logging.getLogger(__name__)


class ListView:
    """
    State of one list screen (doctors, providers, tasks, ...).

    Args:
        storage_key: Identifies this view's persisted criteria and sort
        schema: The view's filter declarations
        records: Already-fetched records; replace with set_records()
        state_manager: Persistence adapter (defaults to the process-wide one)
        location: Navigable location to keep in sync while mounted
        page_size: Initial page size (defaults to configuration)
        sibling_count: Pages shown either side of the current page
        omit_keys: Query parameters the URL synchronizer must ignore
        id_field: Record field path holding the record id
        default_sort: Sort used when none was persisted
        config: Configuration (defaults to the process-wide one)
    """

    def __init__(self, storage_key: str, schema: FilterSchema,
                 records: Optional[Sequence[Any]] = None,
                 state_manager: Optional[StateManager] = None,
                 location: Optional[Location] = None,
                 page_size: Optional[int] = None,
                 sibling_count: Optional[int] = None,
                 omit_keys: Iterable[str] = (),
                 id_field: str = 'id',
                 default_sort: Optional[SortConfig] = None,
                 config: Optional[Config] = None):
        config = config or get_config()
        self.storage_key = storage_key
        self.schema = schema
        self.id_field = id_field
        self.location = location
        self.omit_keys = tuple(omit_keys) or tuple(config.url.omit_keys)
        self.sync_enabled = config.url.sync_enabled
        self.sibling_count = config.pagination.sibling_count if sibling_count is None else sibling_count
        self.state_manager = state_manager or get_state_manager()

        self.store = FilterStateStore(storage_key, schema, state_manager=self.state_manager)
        self.selection = SelectionManager()
        self._sort = self._load_sort(default_sort)
        self._records: Sequence[Any] = records if records is not None else []
        self._visible_cache = None
        self._synchronizer: Optional[UrlSynchronizer] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        self._pagination = PaginationState(
            page_size=page_size or config.pagination.default_page_size,
            total_count=len(self.visible_records)
        )
        self._unsubscribe = self.store.subscribe(self._on_criteria_change)

    # Lifecycle

    def mount(self) -> None:
        """Start URL synchronization (URL or storage seeds the criteria)."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_criteria_change)
            self._refresh_pagination()
        if self.location is None or not self.sync_enabled or self._synchronizer is not None:
            return
        self._synchronizer = UrlSynchronizer(self.store, self.location, self.omit_keys)
        self._synchronizer.attach()
        logger.debug(f"Mounted list view {self.storage_key}")

    def unmount(self) -> None:
        """Stop URL synchronization; criteria keep driving pagination."""
        if self._synchronizer is not None:
            self._synchronizer.detach()
            self._synchronizer = None
        logger.debug(f"Unmounted list view {self.storage_key}")

    def close(self) -> None:
        """Unmount and stop listening to the store; mount() resumes both."""
        self.unmount()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # Records and criteria

    @property
    def records(self) -> Sequence[Any]:
        return self._records

    def set_records(self, records: Optional[Sequence[Any]]) -> None:
        """Replace the record collection (e.g. after a refetch)."""
        self._records = records if records is not None else []
        self._refresh_pagination()

    @property
    def criteria(self) -> Criteria:
        return self.store.criteria

    def set_filter(self, name: str, value: Any) -> Criteria:
        return self.store.set_filter(name, value)

    def set_filters(self, changes: Dict[str, Any]) -> Criteria:
        return self.store.set_filters(changes)

    def reset_filters(self) -> Criteria:
        return self.store.reset()

    @property
    def active_filters(self) -> List[str]:
        return self.store.active_filters

    def _on_criteria_change(self, criteria: Criteria) -> None:
        self._refresh_pagination()

    @property
    def visible_records(self) -> List[Any]:
        """Filtered and sorted records, memoized on records identity, criteria and sort."""
        criteria = self.store.criteria
        cached = self._visible_cache
        if cached is not None and cached[0] is self._records and cached[1] == criteria and cached[2] == self._sort:
            return cached[3]

        visible = sort_records(filter_records(self._records, criteria, self.schema), self._sort)
        self._visible_cache = (self._records, criteria, self._sort, visible)
        return visible

    # Sorting

    @property
    def sort(self) -> Optional[SortConfig]:
        return self._sort

    def _sort_storage_key(self) -> str:
        return f"{self.storage_key}_sort"

    def _load_sort(self, default_sort: Optional[SortConfig]) -> Optional[SortConfig]:
        stored = SortConfig.from_dict(self.state_manager.load_value(self._sort_storage_key()))
        return stored or default_sort

    def set_sort(self, field: str, descending: Optional[bool] = None) -> SortConfig:
        """
        Sort by ``field``. Without an explicit direction, sorting again by the
        current field flips the direction.
        """
        if descending is None:
            descending = bool(self._sort and self._sort.field == field and not self._sort.descending)
        self._sort = SortConfig(field=field, descending=descending)
        self.state_manager.save_value(self._sort_storage_key(), self._sort.to_dict())
        return self._sort

    # Pagination

    @property
    def pagination(self) -> PaginationState:
        return self._pagination

    def _refresh_pagination(self) -> None:
        self._pagination = self._pagination.with_total_count(len(self.visible_records))

    def go_to_page(self, page: int) -> PaginationState:
        self._pagination = self._pagination.go_to(page)
        return self._pagination

    def next_page(self) -> PaginationState:
        self._pagination = self._pagination.next_page()
        return self._pagination

    def previous_page(self) -> PaginationState:
        self._pagination = self._pagination.previous_page()
        return self._pagination

    def set_page_size(self, page_size: int) -> PaginationState:
        self._pagination = self._pagination.with_page_size(page_size)
        return self._pagination

    @property
    def page_records(self) -> List[Any]:
        return list(self._pagination.slice(self.visible_records))

    @property
    def page_range(self) -> List[PageMarker]:
        return self._pagination.page_range(self.sibling_count)

    # Selection

    def record_id(self, record: Any) -> Hashable:
        return resolve_path(record, self.id_field)

    @property
    def visible_ids(self) -> List[Hashable]:
        return [self.record_id(record) for record in self.visible_records]

    def select_visible(self) -> None:
        self.selection.select_all(self.visible_ids)

    def toggle_visible(self) -> None:
        self.selection.toggle_all(self.visible_ids)

    @property
    def selected_records(self) -> List[Any]:
        return [record for record in self._records
                if record is not None and self.record_id(record) in self.selection]

    # Snapshot

    def snapshot(self) -> ListViewSnapshot:
        """JSON-safe summary of the view state, e.g. for a Dash store."""
        return {
            'storage_key': self.storage_key,
            'criteria': self.store.criteria.to_dict(),
            'active_filters': self.active_filters,
            'pagination': self._pagination.to_dict(),
            'page_range': self.page_range,
            'sort': self._sort.to_param() if self._sort else None,
            'selected_ids': sorted(self.selection.selected_ids, key=str),
        }
