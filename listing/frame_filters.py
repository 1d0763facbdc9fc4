"""
Criteria filtering for record collections held in a pandas DataFrame.

Frames are expected in ``pd.json_normalize`` shape: nested objects become
dotted columns while lists stay in their cells. A field path that is not a
column is resolved from its longest column prefix, walking list cells the
way listing.predicates.resolve_path does, so both filter paths agree. NaN
is treated as a missing value.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from listing.helpers import is_missing, is_unconstrained
from listing.predicates import (
    match_any_of,
    match_contains,
    match_date_on_or_before,
    match_exact,
    match_field,
    match_search,
    resolve_path,
)
from listing.state.models import ANY_OF, CONTAINS, CUSTOM, DATE_BEFORE, SEARCH, FilterField, FilterSchema

logger = logging.getLogger(__name__)


def _all_rows(frame: pd.DataFrame, value: bool) -> pd.Series:
    return pd.Series(value, index=frame.index, dtype=bool)


def path_values(frame: pd.DataFrame, path: str) -> Optional[pd.Series]:
    """
    Values of a dotted field path for every row, or None if nothing matches.

    ``contact.city`` is read straight from its column; ``addresses.city``
    is read from the ``addresses`` column by resolving ``city`` on each
    list element.
    """
    if path in frame.columns:
        return frame[path]
    parts = path.split('.')
    for split in range(len(parts) - 1, 0, -1):
        prefix = '.'.join(parts[:split])
        if prefix in frame.columns:
            rest = '.'.join(parts[split:])
            return frame[prefix].map(lambda cell: resolve_path(cell, rest))
    return None


def row_record(row: pd.Series) -> Dict[str, Any]:
    """Rebuild a nested record from a flattened row, dropping missing cells."""
    record: Dict[str, Any] = {}
    for column, cell in row.items():
        if not isinstance(cell, (list, tuple, dict)) and is_missing(cell):
            continue
        target = record
        parts = str(column).split('.')
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = cell
    return record


def field_mask(frame: pd.DataFrame, filter_field: FilterField, value) -> pd.Series:
    """Boolean mask of the rows passing one filter field."""
    kind = filter_field.kind

    if kind == SEARCH:
        if value is None or value == '':
            return _all_rows(frame, True)
        mask = _all_rows(frame, False)
        for path in filter_field.paths:
            series = path_values(frame, path)
            if series is None:
                continue
            mask |= series.map(lambda cell: match_search({'v': cell}, value, ('v',))).astype(bool)
        return mask

    if kind == CUSTOM:
        if is_unconstrained(value):
            return _all_rows(frame, True)
        return frame.apply(
            lambda row: match_field(row_record(row), filter_field, value), axis=1
        ).astype(bool)

    if kind == DATE_BEFORE:
        if value is None:
            return _all_rows(frame, True)
        series = path_values(frame, filter_field.path)
        if series is None:
            return _all_rows(frame, False)
        return series.map(lambda cell: match_date_on_or_before(cell, value)).astype(bool)

    if is_unconstrained(value):
        return _all_rows(frame, True)

    mask = _all_rows(frame, False)
    for path in filter_field.paths:
        series = path_values(frame, path)
        if series is None:
            if kind == ANY_OF:
                break
            continue
        if kind == CONTAINS:
            mask |= series.map(lambda cell: match_contains(cell, value, filter_field.ignore_case)).astype(bool)
        elif kind == ANY_OF:
            mask |= series.map(lambda cell: match_any_of(cell, value, filter_field.ignore_case)).astype(bool)
        elif filter_field.ignore_case or path not in frame.columns:
            mask |= series.map(lambda cell: match_exact(cell, value, filter_field.ignore_case)).astype(bool)
        else:
            mask |= (series == value).fillna(False).astype(bool)
        if kind == ANY_OF:
            break
    return mask


def criteria_mask(frame: pd.DataFrame, criteria: Mapping, schema: FilterSchema) -> pd.Series:
    """Boolean mask of the rows passing every filter of the schema."""
    mask = _all_rows(frame, True)
    for filter_field in schema.fields:
        value = criteria.get(filter_field.name, filter_field.default)
        mask &= field_mask(frame, filter_field, value)
    return mask


def filter_frame(frame: pd.DataFrame, criteria: Mapping, schema: FilterSchema) -> pd.DataFrame:
    """Return the visible rows of ``frame``; the input frame is left untouched."""
    if frame is None or frame.empty:
        return frame
    mask = criteria_mask(frame, criteria, schema)
    logger.debug(f"Frame filter kept {int(mask.sum())} of {len(frame)} rows")
    return frame.loc[mask]
