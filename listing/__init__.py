"""
List query engine for the admin console's entity lists.

This package provides:
- state: filter schemas, immutable criteria and the persisted filter store
- predicates / frame_filters: record and DataFrame filtering
- pagination, selection, sorting: list view mechanics
- url_sync: two-way criteria <-> query string binding
- view: ListView composing all of the above for one screen
- callbacks: Dash wiring for a list view
"""

from .pagination import DOTS, PaginationState, pagination_range
from .predicates import filter_records, matches
from .selection import SelectionManager
from .sorting import SortConfig, sort_records
from .state import (
    ANY_OF,
    CONTAINS,
    CUSTOM,
    DATE_BEFORE,
    EXACT,
    SEARCH,
    Criteria,
    FilterField,
    FilterSchema,
    FilterStateStore,
    StoreRegistry,
)
from .url_sync import MemoryLocation, UrlSynchronizer
from .view import ListView

__all__ = [
    'ANY_OF',
    'CONTAINS',
    'CUSTOM',
    'DATE_BEFORE',
    'DOTS',
    'EXACT',
    'SEARCH',
    'Criteria',
    'FilterField',
    'FilterSchema',
    'FilterStateStore',
    'ListView',
    'MemoryLocation',
    'PaginationState',
    'SelectionManager',
    'SortConfig',
    'StoreRegistry',
    'UrlSynchronizer',
    'filter_records',
    'matches',
    'pagination_range',
    'sort_records',
]
