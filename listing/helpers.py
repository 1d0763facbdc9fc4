"""
Value helpers shared by the predicate, state and URL modules.
"""

import datetime
import logging
from typing import Any, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

# Criterion value meaning "impose no constraint on this field"
ALL = 'all'


def is_unconstrained(value: Any) -> bool:
    """True for None, empty strings/sequences and the "all" sentinel."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == '' or value.lower() == ALL
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def is_missing(value: Any) -> bool:
    """True for None and float NaN (pandas' marker for absent cells)."""
    if value is None:
        return True
    return isinstance(value, float) and value != value


def to_local_date(value: Any) -> Optional[datetime.date]:
    """
    Normalize a date-like value to a calendar day in local time.

    ``YYYY-MM-DD`` strings are taken as local days, naive datetimes as local
    wall-clock time and aware datetimes are converted to the local zone
    before the time of day is dropped. Returns None for anything unparseable.
    """
    if is_missing(value):
        return None

    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()

    if isinstance(value, datetime.date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            if len(text) == 10:
                return datetime.date.fromisoformat(text)
            return to_local_date(datetime.datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def iter_text_values(value: Any) -> Iterator[str]:
    """Yield the lower-cased text of a value, probing lists and mappings element-wise."""
    if is_missing(value):
        return
    if isinstance(value, str):
        yield value.lower()
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from iter_text_values(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from iter_text_values(item)
    elif isinstance(value, bool):
        yield 'true' if value else 'false'
    else:
        yield str(value).lower()


def hashable(value: Any) -> Any:
    """Structural, order-insensitive-for-mappings form of a value."""
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), hashable(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(hashable(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted((hashable(v) for v in value), key=repr))
    return value


def to_plain(value: Any) -> Any:
    """Convert frozen criteria values back to JSON-friendly builtins."""
    if isinstance(value, Mapping):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(v) for v in value]
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value
