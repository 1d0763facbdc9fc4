"""
Callbacks keeping a list view's criteria store and the browser URL in step.

Both directions compare the candidate with the current state and return
no_update when they agree, so a round trip settles after one pass.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from dash import no_update

from listing.state.models import FilterSchema
from listing.url_sync import criteria_from_query, query_from_criteria, query_has_criteria, same_query
from state_manager import StateManager

logger = logging.getLogger(__name__)


def _as_search(query: str) -> str:
    return f'?{query}' if query else ''


def criteria_from_location(search: Optional[str], criteria_data: Optional[Dict[str, Any]],
                           schema: FilterSchema, omit_keys: Iterable[str] = ()):
    """Criteria store data for a new location search, or no_update."""
    candidate = criteria_from_query(search or '', schema, omit_keys)
    if candidate == schema.normalize(criteria_data):
        return no_update
    return candidate.to_dict()


def location_from_criteria(criteria_data: Optional[Dict[str, Any]], search: Optional[str],
                           schema: FilterSchema, storage_key: str,
                           state_manager: StateManager, omit_keys: Iterable[str] = ()):
    """Persist the criteria and return the location search for them, or no_update."""
    criteria = schema.normalize(criteria_data)
    state_manager.save(storage_key, criteria.to_dict())
    query = query_from_criteria(criteria, schema, (search or '').lstrip('?'), omit_keys)
    if same_query(query, search or ''):
        return no_update
    return _as_search(query)


def initial_sync(search: Optional[str], schema: FilterSchema, storage_key: str,
                 state_manager: StateManager, omit_keys: Iterable[str] = ()) -> Tuple[Any, Any]:
    """
    First sync after page load.

    A search naming any filter seeds the criteria; otherwise the persisted
    criteria are used. The location is then rewritten in canonical form.
    """
    if query_has_criteria(search or '', schema, omit_keys):
        criteria = criteria_from_query(search or '', schema, omit_keys)
        state_manager.save(storage_key, criteria.to_dict())
        logger.debug(f"Seeded {storage_key} from location")
    else:
        criteria = schema.normalize(state_manager.load(storage_key, schema.defaults().to_dict()))

    # Written back either way so default-valued params drop out
    query = query_from_criteria(criteria, schema, (search or '').lstrip('?'), omit_keys)
    new_search = no_update if same_query(query, search or '') else _as_search(query)
    return new_search, criteria.to_dict()


def sync_location_and_criteria(search: Optional[str], criteria_data: Optional[Dict[str, Any]],
                               triggered_id: Optional[str], ids: Dict[str, str],
                               schema: FilterSchema, storage_key: str,
                               state_manager: StateManager,
                               omit_keys: Iterable[str] = ()) -> Tuple[Any, Any]:
    """Dispatch on the triggering component; returns (search, criteria data)."""
    if triggered_id == ids['location']:
        return no_update, criteria_from_location(search, criteria_data, schema, omit_keys)
    if triggered_id == ids['criteria']:
        return location_from_criteria(criteria_data, search, schema, storage_key,
                                      state_manager, omit_keys), no_update
    return initial_sync(search, schema, storage_key, state_manager, omit_keys)
