"""
Callbacks deriving the visible count and page state of a list view.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from listing.frame_filters import filter_frame
from listing.pagination import DEFAULT_PAGE_SIZE, DEFAULT_SIBLING_COUNT, PaginationState
from listing.state.models import FilterSchema
from listing.state.snapshots import PageStoreData

logger = logging.getLogger(__name__)


def count_visible_records(criteria_data: Optional[Dict[str, Any]],
                          records: Optional[List[Dict[str, Any]]],
                          schema: FilterSchema) -> int:
    """Number of records passing the criteria."""
    if not records:
        return 0
    # Nested objects become dotted columns, matching the schema's paths
    frame = pd.json_normalize(records)
    visible = filter_frame(frame, schema.normalize(criteria_data), schema)
    return len(visible)


def _current_state(page_data: Optional[Dict[str, Any]], default_page_size: int) -> PaginationState:
    pagination = (page_data or {}).get('pagination') or {}
    return PaginationState(
        current_page=pagination.get('current_page', 1),
        page_size=pagination.get('page_size', default_page_size),
        total_count=pagination.get('total_count', 0),
    )


def apply_page_request(state: PaginationState, request: Optional[Dict[str, Any]]) -> PaginationState:
    """
    Apply a page request: ``{'page': n}``, ``{'page_size': n}`` or
    ``{'action': 'next' | 'previous' | 'first' | 'last'}``.
    """
    if not request:
        return state
    if 'page_size' in request:
        state = state.with_page_size(request['page_size'])
    if 'page' in request:
        state = state.go_to(request['page'])
    action = request.get('action')
    if action == 'next':
        state = state.next_page()
    elif action == 'previous':
        state = state.previous_page()
    elif action == 'first':
        state = state.go_to(1)
    elif action == 'last':
        state = state.go_to(state.total_pages)
    elif action is not None:
        logger.warning(f"Ignoring unknown page action {action!r}")
    return state


def update_page_state(total_count: Optional[int], request: Optional[Dict[str, Any]],
                      page_data: Optional[Dict[str, Any]], triggered_id: Optional[str],
                      ids: Dict[str, str], sibling_count: int = DEFAULT_SIBLING_COUNT,
                      default_page_size: int = DEFAULT_PAGE_SIZE,
                      page_size_options: Optional[List[int]] = None) -> PageStoreData:
    """Clamped pagination, page markers and the page size choices for the page store."""
    state = _current_state(page_data, default_page_size).with_total_count(total_count or 0)
    if triggered_id == ids['page_request']:
        state = apply_page_request(state, request)
    return {
        'pagination': state.to_dict(),
        'page_range': state.page_range(sibling_count),
        'page_size_options': list(page_size_options or [state.page_size]),
    }
