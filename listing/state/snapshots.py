"""
Typed shapes of the JSON-safe view state held in dcc.Store components.
"""

from typing import Any, Dict, Hashable, List, Optional, Union
from typing_extensions import TypedDict


class PaginationData(TypedDict):
    """Pagination state as stored client-side."""
    current_page: int
    page_size: int
    total_count: int
    total_pages: int


class PageStoreData(TypedDict):
    """Page store payload: pagination plus the markers to render."""
    pagination: PaginationData
    page_range: List[Union[int, str]]
    page_size_options: List[int]


class ListViewSnapshot(TypedDict):
    """Summary of one list view's state."""
    storage_key: str
    criteria: Dict[str, Any]
    active_filters: List[str]
    pagination: PaginationData
    page_range: List[Union[int, str]]
    sort: Optional[str]
    selected_ids: List[Hashable]
