"""
State management package for list views.

Provides the typed criteria model, the persisted filter state store and a
registry for stores that are intentionally shared between views.
"""

from .models import (
    ANY_OF,
    CONTAINS,
    CUSTOM,
    DATE_BEFORE,
    EXACT,
    SEARCH,
    Criteria,
    FilterField,
    FilterSchema,
)
from .store import FilterStateStore
from .registry import StoreRegistry

__all__ = [
    'ANY_OF',
    'CONTAINS',
    'CUSTOM',
    'DATE_BEFORE',
    'EXACT',
    'SEARCH',
    'Criteria',
    'FilterField',
    'FilterSchema',
    'FilterStateStore',
    'StoreRegistry',
]
