"""
Dash components backing one list view.

Every list view gets a fixed set of ids derived from its view id, so the
callbacks in this package can be wired without knowing the page layout.
"""

from typing import Any, Dict, List, Optional, Sequence

from dash import dcc

from listing.state.models import FilterSchema
from state_manager import StateManager, get_state_manager


def component_ids(view_id: str) -> Dict[str, str]:
    """Component ids for a list view."""
    return {
        'location': f'{view_id}-location',
        'criteria': f'{view_id}-criteria-store',
        'records': f'{view_id}-records-store',
        'count': f'{view_id}-count-store',
        'page_request': f'{view_id}-page-request-store',
        'page': f'{view_id}-page-store',
    }


def list_view_components(view_id: str, storage_key: str, schema: FilterSchema,
                         records: Optional[Sequence[Dict[str, Any]]] = None,
                         state_manager: Optional[StateManager] = None) -> List[Any]:
    """
    Location and stores for one list view.

    Call this from a layout function so the criteria store is seeded from
    the persisted criteria on every page load.
    """
    ids = component_ids(view_id)
    state_manager = state_manager or get_state_manager()
    stored = schema.normalize(state_manager.load(storage_key, schema.defaults().to_dict()))

    return [
        dcc.Location(id=ids['location'], refresh=False),
        dcc.Store(id=ids['criteria'], data=stored.to_dict()),
        dcc.Store(id=ids['records'], data=list(records) if records is not None else []),
        dcc.Store(id=ids['count'], data=0),
        dcc.Store(id=ids['page_request'], data=None),
        dcc.Store(id=ids['page'], data=None),
    ]
