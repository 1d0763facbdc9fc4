"""
State models for list view filtering.

A FilterSchema declares the filters one list view supports; Criteria is the
immutable snapshot of their current values. Every Criteria produced through
a schema carries every schema field, coerced to the field's value type.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from core.exceptions import ValidationError
from listing.helpers import ALL, hashable, to_local_date, to_plain

logger = logging.getLogger(__name__)

# Filter kinds
SEARCH = 'search'
EXACT = 'exact'
CONTAINS = 'contains'
ANY_OF = 'any_of'
DATE_BEFORE = 'date_before'
CUSTOM = 'custom'

FILTER_KINDS = (SEARCH, EXACT, CONTAINS, ANY_OF, DATE_BEFORE, CUSTOM)

_KIND_DEFAULTS = {
    SEARCH: '',
    EXACT: ALL,
    CONTAINS: ALL,
    ANY_OF: (),
    DATE_BEFORE: None,
    CUSTOM: None,
}


class Criteria(Mapping):
    """
    Immutable mapping of filter name to current value.

    Equality and hashing are structural: lists and tuples compare equal and
    mapping values ignore key order, so snapshots can be compared and used
    as memoization keys.
    """

    __slots__ = ('_values',)

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return hashable(dict(self._values)) == hashable(dict(other))

    def __hash__(self) -> int:
        return hash(hashable(self._values))

    def __repr__(self) -> str:
        return f"Criteria({self._values!r})"

    def merge(self, changes: Mapping[str, Any]) -> 'Criteria':
        """Return a new snapshot with ``changes`` applied."""
        values = dict(self._values)
        values.update(changes)
        return Criteria(values)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly copy: sequences as lists, dates as ISO strings."""
        return {name: to_plain(value) for name, value in self._values.items()}


@dataclass(frozen=True)
class FilterField:
    """
    Declaration of one filter of a list view.

    Attributes:
        name: Criteria key (also the query-string parameter name)
        kind: One of FILTER_KINDS
        paths: Dot-separated record field paths the filter reads
        default: Value meaning "no filter applied"; derived from kind when omitted
        ignore_case: Compare text case-insensitively for exact/contains/any_of
        matcher: ``matcher(record, value) -> bool`` for CUSTOM filters
    """
    name: str
    kind: str = EXACT
    paths: Tuple[str, ...] = ()
    default: Any = field(default=None)
    ignore_case: bool = False
    matcher: Optional[Callable[[Any, Any], bool]] = field(default=None, compare=False)

    def __post_init__(self):
        if self.kind not in FILTER_KINDS:
            raise ValidationError(f"Unknown filter kind '{self.kind}'", field=self.name, value=self.kind)
        if isinstance(self.paths, str):
            object.__setattr__(self, 'paths', (self.paths,))
        elif not self.paths and self.kind != CUSTOM:
            object.__setattr__(self, 'paths', (self.name,))
        else:
            object.__setattr__(self, 'paths', tuple(self.paths))
        if self.kind == CUSTOM and self.matcher is None:
            raise ValidationError("Custom filters need a matcher", field=self.name)
        if self.default is None and self.kind != DATE_BEFORE:
            object.__setattr__(self, 'default', _KIND_DEFAULTS[self.kind])
        else:
            object.__setattr__(self, 'default', self.coerce(self.default))

    @property
    def path(self) -> str:
        return self.paths[0] if self.paths else self.name

    def coerce(self, value: Any) -> Any:
        """
        Coerce a raw value (from code, storage or the URL) to this field's type.

        Raises:
            ValidationError: If the value cannot represent this filter
        """
        if self.kind == SEARCH:
            if value is None:
                return ''
            if isinstance(value, (dict, list, tuple)):
                raise ValidationError("Search text must be a string", field=self.name, value=value)
            return value if isinstance(value, str) else str(value)

        if self.kind in (EXACT, CONTAINS):
            return self._coerce_scalar(value)

        if self.kind == ANY_OF:
            if value is None or value == '':
                return ()
            if isinstance(value, str):
                return () if value.lower() == ALL else (value,)
            if isinstance(value, (list, tuple, set, frozenset)):
                return tuple(self._coerce_scalar(item) for item in value)
            raise ValidationError("Multi-select value must be a list", field=self.name, value=value)

        if self.kind == DATE_BEFORE:
            if value is None or value == '':
                return None
            parsed = to_local_date(value)
            if parsed is None:
                raise ValidationError("Unparseable date", field=self.name, value=value)
            return parsed

        # CUSTOM
        if isinstance(value, list):
            return tuple(value)
        return value

    def _coerce_scalar(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(self.default, bool):
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower() in ('true', 'false'):
                return value.lower() == 'true'
            if isinstance(value, str) and value.lower() == ALL:
                return ALL
            raise ValidationError("Expected a boolean", field=self.name, value=value)
        if isinstance(value, (str, bool)):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        raise ValidationError("Expected a single value", field=self.name, value=value)


class FilterSchema:
    """
    Ordered set of FilterFields for one list view (e.g. the doctors list).

    The schema produces the view's DefaultCriteria and validates every value
    that enters Criteria from code, storage or the query string.
    """

    def __init__(self, fields: Iterable[FilterField]):
        self.fields: Tuple[FilterField, ...] = tuple(fields)
        self._by_name: Dict[str, FilterField] = {f.name: f for f in self.fields}
        if len(self._by_name) != len(self.fields):
            raise ValidationError("Duplicate filter field names")

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[FilterField]:
        return iter(self.fields)

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> FilterField:
        try:
            return self._by_name[name]
        except KeyError:
            raise ValidationError(f"Unknown filter field '{name}'", field=name)

    def defaults(self) -> Criteria:
        """The canonical "no filters applied" criteria."""
        return Criteria({f.name: f.default for f in self.fields})

    def coerce(self, name: str, value: Any) -> Any:
        return self.field(name).coerce(value)

    def normalize(self, values: Optional[Mapping[str, Any]]) -> Criteria:
        """
        Build complete Criteria from a possibly partial, untrusted mapping.

        Missing keys take their defaults, unknown keys are dropped and values
        that fail coercion fall back to the field default.
        """
        values = values or {}
        result = {}
        for f in self.fields:
            if f.name not in values:
                result[f.name] = f.default
                continue
            try:
                result[f.name] = f.coerce(values[f.name])
            except ValidationError as e:
                logger.warning(f"Using default for filter '{f.name}': {e}")
                result[f.name] = f.default

        unknown = set(values) - set(self._by_name)
        if unknown:
            logger.debug(f"Ignoring unknown filter keys: {sorted(unknown)}")
        return Criteria(result)

    def is_default(self, criteria: Mapping[str, Any], name: str) -> bool:
        f = self.field(name)
        return hashable(criteria.get(name, f.default)) == hashable(f.default)

    def active_fields(self, criteria: Mapping[str, Any]) -> List[str]:
        """Names of the filters currently narrowing the list."""
        return [f.name for f in self.fields if not self.is_default(criteria, f.name)]

