"""
Query-string synchronization for list view criteria.

serialize_criteria()/deserialize_query() map Criteria to and from query
parameters, omitting every parameter whose value equals its default so
shared URLs stay minimal. UrlSynchronizer keeps a FilterStateStore and a
navigable Location in step in both directions without oscillating: each
direction compares the candidate state with the current one and skips the
write when they already agree.
"""

import datetime
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

from listing.helpers import hashable, to_plain
from listing.state.models import CONTAINS, EXACT, SEARCH, Criteria, FilterSchema
from listing.state.store import FilterStateStore

logger = logging.getLogger(__name__)

LocationListener = Callable[[str], None]


class Location:
    """
    Navigable location interface consumed by the synchronizer.

    ``get_query()`` returns the current query string without the leading
    ``?``; ``replace_query()`` swaps it without adding a history entry.
    """

    def get_query(self) -> str:
        raise NotImplementedError

    def replace_query(self, query: str) -> None:
        raise NotImplementedError


class MemoryLocation(Location):
    """In-process location for headless shells and tests."""

    def __init__(self, query: str = '', path: str = '/'):
        self.path = path
        self._history: List[str] = [query.lstrip('?')]
        self._listeners: List[LocationListener] = []

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def get_query(self) -> str:
        return self._history[-1]

    def replace_query(self, query: str) -> None:
        self._history[-1] = query.lstrip('?')
        self._notify()

    def navigate(self, query: str) -> None:
        """Push a new entry, as following a shared link would."""
        self._history.append(query.lstrip('?'))
        self._notify()

    def back(self) -> None:
        if len(self._history) > 1:
            self._history.pop()
            self._notify()

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        query = self.get_query()
        for listener in list(self._listeners):
            listener(query)


def encode_value(value: Any) -> str:
    """Render one criteria value as a query parameter value."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        # Canonical JSON so equal values always produce equal URLs
        return json.dumps(to_plain(value), sort_keys=True, separators=(',', ':'))
    return str(value)


def decode_value(raw: str) -> Any:
    """Parse one query parameter value: JSON first, then boolean words, else the string."""
    try:
        return json.loads(raw)
    except ValueError:
        if raw == 'true':
            return True
        if raw == 'false':
            return False
        return raw


def serialize_criteria(criteria: Mapping[str, Any], defaults: Mapping[str, Any],
                       omit_keys: Iterable[str] = ()) -> Dict[str, str]:
    """
    Query parameters for the non-default, non-empty criteria values.

    Default equality is structural, so list order matters but mapping key
    order and list/tuple differences do not.
    """
    omit = set(omit_keys)
    params = {}
    for name, value in criteria.items():
        if name in omit or value is None or value == '':
            continue
        if name in defaults and hashable(value) == hashable(defaults[name]):
            continue
        params[name] = encode_value(value)
    return params


def deserialize_query(query: str, defaults: Mapping[str, Any],
                      omit_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """Start from ``defaults`` and overlay every non-omitted query parameter."""
    omit = set(omit_keys)
    values = dict(defaults)
    for name, raw in parse_qsl(query.lstrip('?'), keep_blank_values=True):
        if name in omit:
            continue
        values[name] = decode_value(raw)
    return values


def _query_items(query: str, omit_keys: Iterable[str] = ()) -> Tuple[Tuple[str, str], ...]:
    omit = set(omit_keys)
    return tuple(sorted(
        (name, raw) for name, raw in parse_qsl(query.lstrip('?'), keep_blank_values=True)
        if name not in omit
    ))


def same_query(left: str, right: str) -> bool:
    """Order-insensitive query string comparison."""
    return _query_items(left) == _query_items(right)


def query_from_criteria(criteria: Mapping[str, Any], schema: FilterSchema,
                        current_query: str = '', omit_keys: Iterable[str] = ()) -> str:
    """
    Query string for ``criteria``. Parameters outside the schema or named in
    ``omit_keys`` are carried over from ``current_query`` unchanged.
    """
    omit = set(omit_keys)
    params = serialize_criteria(criteria, schema.defaults(), omit)
    preserved = [(name, raw) for name, raw in parse_qsl(current_query.lstrip('?'), keep_blank_values=True)
                 if name in omit or name not in schema]
    return urlencode(preserved + list(params.items()))


def criteria_from_query(query: str, schema: FilterSchema, omit_keys: Iterable[str] = ()) -> Criteria:
    """Complete, schema-coerced Criteria for a query string."""
    omit = set(omit_keys)
    values = deserialize_query(query, schema.defaults().to_dict(), omit)
    # Text filters keep the raw parameter so "007" or "1.50" survive intact
    for name, raw in parse_qsl(query.lstrip('?'), keep_blank_values=True):
        if name in omit or name not in schema:
            continue
        kind = schema.field(name).kind
        if kind == SEARCH:
            values[name] = raw
        elif kind in (EXACT, CONTAINS) and not isinstance(values[name], bool):
            values[name] = raw
    return schema.normalize(values)


def query_has_criteria(query: str, schema: FilterSchema, omit_keys: Iterable[str] = ()) -> bool:
    """True if the query names any filter of the schema."""
    return any(name in schema for name, _ in _query_items(query, omit_keys))


class UrlSynchronizer:
    """
    Two-way binding between a FilterStateStore and a Location.

    Parameters named in ``omit_keys`` are neither written nor read. Those
    and any other parameters outside the schema are left on the location
    untouched.
    """

    def __init__(self, store: FilterStateStore, location: Location,
                 omit_keys: Iterable[str] = ()):
        self.store = store
        self.location = location
        self.omit_keys = tuple(omit_keys)
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def query_for(self, criteria: Criteria) -> str:
        return query_from_criteria(criteria, self.store.schema, self.location.get_query(), self.omit_keys)

    def criteria_for(self, query: str) -> Criteria:
        return criteria_from_query(query, self.store.schema, self.omit_keys)

    def url_has_criteria(self) -> bool:
        return query_has_criteria(self.location.get_query(), self.store.schema, self.omit_keys)

    def push(self, criteria: Optional[Criteria] = None) -> bool:
        """Write criteria to the location; returns False when it already matches."""
        criteria = self.store.criteria if criteria is None else criteria
        query = self.query_for(criteria)
        if same_query(query, self.location.get_query()):
            return False
        logger.debug(f"Replacing query for {self.store.storage_key}: {query!r}")
        self.location.replace_query(query)
        return True

    def pull(self, query: Optional[str] = None) -> bool:
        """Apply the location's query to the store; returns False when nothing changes."""
        query = self.location.get_query() if query is None else query
        candidate = self.criteria_for(query)
        if candidate == self.store.criteria:
            return False
        logger.debug(f"Applying query to {self.store.storage_key}: {query!r}")
        self.store.replace(candidate)
        return True

    def attach(self) -> None:
        """
        Start synchronizing.

        A URL that names any filter seeds the criteria (a shared link wins).
        The criteria are then written back, so the URL ends up in canonical
        form with default-valued params dropped.
        """
        if self.attached:
            return
        if self.url_has_criteria():
            self.pull()
        self.push()

        self._unsubscribers.append(self.store.subscribe(self._on_criteria_change))
        subscribe = getattr(self.location, 'subscribe', None)
        if callable(subscribe):
            self._unsubscribers.append(subscribe(self._on_location_change))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_criteria_change(self, criteria: Criteria) -> None:
        try:
            self.push(criteria)
        except Exception as e:
            logger.error(f"Failed to write query for {self.store.storage_key}: {e}")

    def _on_location_change(self, query: str) -> None:
        self.pull(query)
