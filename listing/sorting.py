"""
Client-side sorting of the visible record subset.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from listing.helpers import is_missing
from listing.predicates import resolve_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SortConfig:
    """Sort key and direction for one list view."""
    field: str
    descending: bool = False

    def to_param(self) -> str:
        """Render as an API-style sort parameter: ``-field`` for descending."""
        return f"-{self.field}" if self.descending else self.field

    @classmethod
    def from_param(cls, param: Optional[str]) -> Optional['SortConfig']:
        if not param or not isinstance(param, str) or param == '-':
            return None
        if param.startswith('-'):
            return cls(field=param[1:], descending=True)
        return cls(field=param)

    def to_dict(self):
        return {'field': self.field, 'descending': self.descending}

    @classmethod
    def from_dict(cls, data: Any) -> Optional['SortConfig']:
        if not isinstance(data, dict) or not data.get('field'):
            return None
        return cls(field=str(data['field']), descending=bool(data.get('descending', False)))


def _sort_key(value: Any):
    return value.casefold() if isinstance(value, str) else value


def sort_records(records: Iterable[Any], sort: Optional[SortConfig]) -> List[Any]:
    """
    Stable sort of records by one field path.

    Records missing the field always come last. Values of incomparable types
    leave the order unchanged rather than failing.
    """
    records = list(records)
    if sort is None:
        return records

    present = []
    missing = []
    for record in records:
        value = resolve_path(record, sort.field)
        if is_missing(value):
            missing.append(record)
        else:
            present.append((value, record))

    try:
        present.sort(key=lambda pair: _sort_key(pair[0]), reverse=sort.descending)
    except TypeError as e:
        logger.warning(f"Cannot sort on '{sort.field}': {e}")
        return records

    return [record for _, record in present] + missing
