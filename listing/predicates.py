"""
Predicate evaluation for in-memory list filtering.

Each matcher tests one record value against one criterion value and never
raises: missing record data is non-matching for constrained containment,
equality and date filters, and simply contributes nothing to text search.
A record matches Criteria when every schema field's matcher passes.
"""

import datetime
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Sequence

from listing.helpers import is_missing, is_unconstrained, iter_text_values, to_local_date
from listing.state.models import (
    ANY_OF,
    CONTAINS,
    CUSTOM,
    DATE_BEFORE,
    EXACT,
    SEARCH,
    FilterField,
    FilterSchema,
)

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def resolve_path(record: Any, path: str) -> Any:
    """
    Read a dot-separated field path from a record.

    Each segment is looked up as a mapping key or an attribute. When an
    intermediate value is a list, the remaining path is resolved on every
    element and the results are flattened into a list.
    """
    current = record
    parts = path.split('.')
    for index, part in enumerate(parts):
        if is_missing(current):
            return None
        if isinstance(current, _SEQUENCE_TYPES):
            rest = '.'.join(parts[index:])
            values = []
            for item in current:
                value = resolve_path(item, rest)
                if isinstance(value, _SEQUENCE_TYPES):
                    values.extend(value)
                elif not is_missing(value):
                    values.append(value)
            return values
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _fold(value: Any, ignore_case: bool) -> Any:
    if ignore_case and isinstance(value, str):
        return value.casefold()
    return value


def match_search(record: Any, term: Any, paths: Sequence[str]) -> bool:
    """True if ``term`` is empty or a case-insensitive substring of any candidate field."""
    if term is None or term == '':
        return True
    needle = str(term).lower()
    for path in paths:
        for text in iter_text_values(resolve_path(record, path)):
            if needle in text:
                return True
    return False


def match_exact(value: Any, criterion: Any, ignore_case: bool = False) -> bool:
    """True if the criterion is unconstrained or equals the record value."""
    if is_unconstrained(criterion):
        return True
    if is_missing(value):
        return False
    return _fold(value, ignore_case) == _fold(criterion, ignore_case)


def match_contains(values: Any, criterion: Any, ignore_case: bool = False) -> bool:
    """True if the criterion is unconstrained or is an element of the record's array field."""
    if is_unconstrained(criterion):
        return True
    if not isinstance(values, _SEQUENCE_TYPES):
        return False
    target = _fold(criterion, ignore_case)
    return any(_fold(item, ignore_case) == target for item in values)


def match_any_of(value: Any, choices: Any, ignore_case: bool = False) -> bool:
    """
    Multi-select match: the record value (or, for array fields, any of its
    elements) must be one of ``choices``. An empty selection passes everything.
    """
    if is_unconstrained(choices):
        return True
    if is_missing(value):
        return False
    if isinstance(choices, str):
        choices = (choices,)
    allowed = {_fold(choice, ignore_case) for choice in choices}
    if isinstance(value, _SEQUENCE_TYPES):
        return any(_fold(item, ignore_case) in allowed for item in value)
    return _fold(value, ignore_case) in allowed


def match_date_on_or_before(value: Any, threshold: Any) -> bool:
    """
    True if no threshold is set, or the record date falls on or before it.

    Both sides are reduced to local calendar days first, so time of day and
    UTC offsets cannot shift the comparison by a day.
    """
    if threshold is None or threshold == '':
        return True
    limit = threshold if type(threshold) is datetime.date else to_local_date(threshold)
    if limit is None:
        return True
    day = to_local_date(value)
    if day is None:
        return False
    return day <= limit


def match_field(record: Any, filter_field: FilterField, value: Any) -> bool:
    """Apply one filter field to one record."""
    kind = filter_field.kind

    if kind == SEARCH:
        return match_search(record, value, filter_field.paths)

    if kind == CUSTOM:
        if is_unconstrained(value):
            return True
        try:
            return bool(filter_field.matcher(record, value))
        except Exception as e:
            logger.warning(f"Custom filter '{filter_field.name}' failed, treating as non-matching: {e}")
            return False

    if kind == DATE_BEFORE:
        return match_date_on_or_before(resolve_path(record, filter_field.path), value)

    if kind == CONTAINS:
        if is_unconstrained(value):
            return True
        return any(
            match_contains(resolve_path(record, path), value, filter_field.ignore_case)
            for path in filter_field.paths
        )

    if kind == ANY_OF:
        return match_any_of(resolve_path(record, filter_field.path), value, filter_field.ignore_case)

    # EXACT
    if is_unconstrained(value):
        return True
    return any(
        match_exact(resolve_path(record, path), value, filter_field.ignore_case)
        for path in filter_field.paths
    )


def matches(record: Any, criteria: Mapping, schema: FilterSchema) -> bool:
    """True if the record passes every filter of the schema (logical AND)."""
    if record is None:
        return False
    for filter_field in schema.fields:
        value = criteria.get(filter_field.name, filter_field.default)
        if not match_field(record, filter_field, value):
            return False
    return True


def filter_records(records: Iterable[Any], criteria: Mapping, schema: FilterSchema) -> List[Any]:
    """
    Derive the visible subset of a record collection.

    Pure: the input is not modified and order is preserved.
    """
    if records is None:
        return []
    return [record for record in records if matches(record, criteria, schema)]
