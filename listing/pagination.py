"""
Pagination for windowed list display.

pagination_range() computes the compact, ellipsis-collapsed page markers for
a pager control; PaginationState keeps the current page valid as the page
size and the visible record count change.
"""

import math
from dataclasses import dataclass, replace
from typing import List, Sequence, Union

from listing.state.snapshots import PaginationData

DEFAULT_PAGE_SIZE = 10
DEFAULT_SIBLING_COUNT = 1

# Marker for a collapsed run of page numbers
DOTS = '...'

PageMarker = Union[int, str]


def _page_span(start: int, end: int) -> List[int]:
    return list(range(start, end + 1))


def total_page_count(total_count: int, page_size: int) -> int:
    """Number of pages for ``total_count`` items; 0 when there is nothing to page."""
    if page_size <= 0 or total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


def clamp_page(page: int, total_count: int, page_size: int) -> int:
    """Clamp a page number into ``1..max(1, page count)``."""
    last_page = max(1, total_page_count(total_count, page_size))
    return max(1, min(int(page), last_page))


def pagination_range(total_count: int, page_size: int, current_page: int,
                     sibling_count: int = DEFAULT_SIBLING_COUNT) -> List[PageMarker]:
    """
    Page markers to render for the current page.

    The window always holds the first page, the last page, the current page
    and ``sibling_count`` pages either side of it; skipped runs collapse into
    DOTS. When the page count fits in ``sibling_count + 5`` slots the full
    range is returned.

    Args:
        total_count: Number of visible items
        page_size: Items per page
        current_page: 1-based current page, already clamped by the caller
        sibling_count: Pages shown on each side of the current page

    Returns:
        Increasing page numbers interleaved with at most two DOTS markers
    """
    total_pages = total_page_count(total_count, page_size)
    sibling_count = max(0, sibling_count)

    # first + last + current + two DOTS, plus the siblings
    total_page_numbers = sibling_count + 5

    if total_page_numbers >= total_pages:
        return _page_span(1, total_pages)

    left_sibling_index = max(current_page - sibling_count, 1)
    right_sibling_index = min(current_page + sibling_count, total_pages)

    # Dots only when at least one page sits between the edge and the siblings
    show_left_dots = left_sibling_index > 2
    show_right_dots = right_sibling_index < total_pages - 2

    edge_item_count = 3 + 2 * sibling_count

    if not show_left_dots and show_right_dots:
        return _page_span(1, edge_item_count) + [DOTS, total_pages]

    if show_left_dots and not show_right_dots:
        return [1, DOTS] + _page_span(total_pages - edge_item_count + 1, total_pages)

    if show_left_dots and show_right_dots:
        return [1, DOTS] + _page_span(left_sibling_index, right_sibling_index) + [DOTS, total_pages]

    return _page_span(1, total_pages)


@dataclass(frozen=True)
class PaginationState:
    """
    Immutable pagination snapshot.

    ``current_page`` is clamped on construction, so
    ``1 <= current_page <= max(1, total_pages)`` always holds.
    """
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'page_size', max(1, int(self.page_size)))
        object.__setattr__(self, 'total_count', max(0, int(self.total_count)))
        object.__setattr__(self, 'current_page',
                           clamp_page(self.current_page, self.total_count, self.page_size))

    @property
    def total_pages(self) -> int:
        return total_page_count(self.total_count, self.page_size)

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    def go_to(self, page: int) -> 'PaginationState':
        return replace(self, current_page=page)

    def next_page(self) -> 'PaginationState':
        return self.go_to(self.current_page + 1)

    def previous_page(self) -> 'PaginationState':
        return self.go_to(self.current_page - 1)

    def with_page_size(self, page_size: int) -> 'PaginationState':
        return replace(self, page_size=page_size)

    def with_total_count(self, total_count: int) -> 'PaginationState':
        return replace(self, total_count=total_count)

    def page_range(self, sibling_count: int = DEFAULT_SIBLING_COUNT) -> List[PageMarker]:
        return pagination_range(self.total_count, self.page_size, self.current_page, sibling_count)

    def slice(self, items: Sequence) -> Sequence:
        """The items shown on the current page."""
        return items[self.offset:self.offset + self.page_size]

    def to_dict(self) -> PaginationData:
        return {
            'current_page': self.current_page,
            'page_size': self.page_size,
            'total_count': self.total_count,
            'total_pages': self.total_pages,
        }
