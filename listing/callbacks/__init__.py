"""
Dash callbacks for list views.

Callback bodies live in plain functions so they can be tested without a
server:
- url_state: criteria store <-> location search
- paging: visible count and page store
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from dash import Input, Output, State, callback_context

from config_manager import get_config
from listing.state.models import FilterSchema
from state_manager import StateManager, get_state_manager

from .components import component_ids, list_view_components
from .paging import apply_page_request, count_visible_records, update_page_state
from .url_state import (
    criteria_from_location,
    initial_sync,
    location_from_criteria,
    sync_location_and_criteria,
)

logger = logging.getLogger(__name__)

# Track registered views per app to prevent duplicate outputs
_registered_callbacks = set()


def _registration_key(app, view_id: str) -> Tuple[int, str]:
    return id(app), view_id


def register_list_view_callbacks(app, view_id: str, schema: FilterSchema,
                                 storage_key: Optional[str] = None,
                                 omit_keys: Iterable[str] = (),
                                 sibling_count: Optional[int] = None,
                                 page_size: Optional[int] = None,
                                 state_manager: Optional[StateManager] = None) -> Dict[str, str]:
    """
    Register the callbacks of one list view with the Dash app.

    Args:
        app: The Dash application instance
        view_id: Prefix of the view's component ids
        schema: The view's filter declarations
        storage_key: Key the criteria persist under (defaults to view_id)
        omit_keys: Query parameters left alone by URL sync
        sibling_count: Pages shown either side of the current page
        page_size: Initial page size
        state_manager: Persistence adapter (defaults to the process-wide one)

    Returns:
        The view's component ids
    """
    if not app:
        raise ValueError("Valid Dash app instance required for callback registration")

    ids = component_ids(view_id)
    key = _registration_key(app, view_id)
    if key in _registered_callbacks:
        logger.info(f"List view callbacks for {view_id} already registered for this app instance")
        return ids

    config = get_config()
    storage_key = storage_key or view_id
    omit_keys = tuple(omit_keys) or tuple(config.url.omit_keys)
    sibling_count = config.pagination.sibling_count if sibling_count is None else sibling_count
    page_size = page_size or config.pagination.default_page_size
    state_manager = state_manager or get_state_manager()

    if config.url.sync_enabled:
        def sync_url(search, criteria_data):
            return sync_location_and_criteria(
                search, criteria_data, callback_context.triggered_id, ids,
                schema, storage_key, state_manager, omit_keys
            )

        app.callback(
            [Output(ids['location'], 'search'),
             Output(ids['criteria'], 'data')],
            [Input(ids['location'], 'search'),
             Input(ids['criteria'], 'data')]
        )(sync_url)

    def count_records(criteria_data, records):
        if not config.url.sync_enabled and callback_context.triggered_id == ids['criteria']:
            state_manager.save(storage_key, schema.normalize(criteria_data).to_dict())
        return count_visible_records(criteria_data, records, schema)

    app.callback(
        Output(ids['count'], 'data'),
        [Input(ids['criteria'], 'data'),
         Input(ids['records'], 'data')]
    )(count_records)

    def page_state(total_count, request, page_data):
        return update_page_state(
            total_count, request, page_data, callback_context.triggered_id, ids,
            sibling_count=sibling_count, default_page_size=page_size,
            page_size_options=config.pagination.page_size_options
        )

    app.callback(
        Output(ids['page'], 'data'),
        [Input(ids['count'], 'data'),
         Input(ids['page_request'], 'data')],
        State(ids['page'], 'data')
    )(page_state)

    _registered_callbacks.add(key)
    logger.info(f"Registered list view callbacks for {view_id}")
    return ids


def is_registered(app, view_id: str) -> bool:
    """Check if a view's callbacks are registered for a specific app."""
    return _registration_key(app, view_id) in _registered_callbacks


def unregister_callbacks(app, view_id: str) -> bool:
    """
    Mark a view's callbacks as unregistered for a specific app.
    Note: This doesn't actually remove callbacks from Dash,
    just allows re-registration.
    """
    key = _registration_key(app, view_id)
    if key in _registered_callbacks:
        _registered_callbacks.remove(key)
        return True
    return False


__all__ = [
    'apply_page_request',
    'component_ids',
    'count_visible_records',
    'criteria_from_location',
    'initial_sync',
    'is_registered',
    'list_view_components',
    'location_from_criteria',
    'register_list_view_callbacks',
    'sync_location_and_criteria',
    'unregister_callbacks',
    'update_page_state',
]
