"""
Tests for page range computation and pagination state.
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listing.pagination import (
    DOTS,
    PaginationState,
    clamp_page,
    pagination_range,
    total_page_count,
)


class TestPaginationRange:
    """Test the ellipsis-collapsed page marker window"""

    def test_small_page_count_returns_full_range(self):
        # 5 pages fit in sibling_count + 5 slots
        assert pagination_range(47, 10, 1, 1) == [1, 2, 3, 4, 5]

    def test_middle_page_shows_both_dots(self):
        assert pagination_range(200, 10, 10, 1) == [1, DOTS, 9, 10, 11, DOTS, 20]

    def test_start_of_range(self):
        assert pagination_range(200, 10, 1, 1) == [1, 2, 3, 4, 5, DOTS, 20]
        assert pagination_range(200, 10, 3, 1) == [1, 2, 3, 4, 5, DOTS, 20]

    def test_end_of_range(self):
        assert pagination_range(200, 10, 20, 1) == [1, DOTS, 16, 17, 18, 19, 20]
        assert pagination_range(200, 10, 18, 1) == [1, DOTS, 16, 17, 18, 19, 20]

    def test_left_sibling_next_to_first_page(self):
        # Left sibling is page 2, so nothing is hidden on the left
        assert pagination_range(100, 10, 3, 1) == [1, 2, 3, 4, 5, DOTS, 10]
        assert pagination_range(100, 10, 4, 1) == [1, DOTS, 3, 4, 5, DOTS, 10]

    def test_wider_sibling_count(self):
        assert pagination_range(300, 10, 15, 2) == [1, DOTS, 13, 14, 15, 16, 17, DOTS, 30]

    def test_zero_sibling_count(self):
        assert pagination_range(200, 10, 10, 0) == [1, DOTS, 10, DOTS, 20]

    def test_no_items(self):
        assert pagination_range(0, 10, 1, 1) == []

    def test_non_positive_page_size(self):
        assert pagination_range(50, 0, 1, 1) == []
        assert pagination_range(50, -5, 1, 1) == []

    @pytest.mark.parametrize('current_page', range(1, 21))
    def test_window_invariants(self, current_page):
        result = pagination_range(200, 10, current_page, 1)
        numbers = [item for item in result if item != DOTS]

        assert result[0] == 1
        assert result[-1] == 20
        assert current_page in numbers
        assert numbers == sorted(set(numbers))
        assert result.count(DOTS) <= 2


class TestPageCount:
    """Test page counting helpers"""

    def test_total_page_count(self):
        assert total_page_count(47, 10) == 5
        assert total_page_count(50, 10) == 5
        assert total_page_count(0, 10) == 0
        assert total_page_count(10, 0) == 0

    def test_clamp_page(self):
        assert clamp_page(8, 30, 10) == 3
        assert clamp_page(0, 30, 10) == 1
        assert clamp_page(5, 0, 10) == 1


class TestPaginationState:
    """Test the immutable pagination snapshot"""

    def test_defaults(self):
        state = PaginationState()
        assert state.current_page == 1
        assert state.page_size == 10
        assert state.total_pages == 0

    def test_current_page_clamps_when_count_drops(self):
        state = PaginationState(current_page=8, page_size=10, total_count=100)
        assert state.current_page == 8

        state = state.with_total_count(30)
        assert state.total_pages == 3
        assert state.current_page == 3

    def test_empty_list_stays_on_page_one(self):
        state = PaginationState(current_page=4, total_count=0)
        assert state.current_page == 1
        assert state.page_range() == []
        assert not state.has_next
        assert not state.has_previous

    def test_navigation_is_bounded(self):
        state = PaginationState(page_size=10, total_count=25)
        assert state.previous_page().current_page == 1

        last = state.go_to(3)
        assert last.current_page == 3
        assert not last.has_next
        assert last.next_page().current_page == 3
        assert state.go_to(99).current_page == 3

    def test_page_size_change_reclamps(self):
        state = PaginationState(current_page=5, page_size=10, total_count=50)
        state = state.with_page_size(25)
        assert state.total_pages == 2
        assert state.current_page == 2

    def test_page_size_has_floor_of_one(self):
        assert PaginationState(page_size=0, total_count=5).page_size == 1

    def test_slice_and_offset(self):
        items = list(range(23))
        state = PaginationState(current_page=3, page_size=10, total_count=len(items))
        assert state.offset == 20
        assert state.slice(items) == [20, 21, 22]

    def test_page_range_delegates(self):
        state = PaginationState(current_page=10, page_size=10, total_count=200)
        assert state.page_range(1) == [1, DOTS, 9, 10, 11, DOTS, 20]

    def test_to_dict(self):
        state = PaginationState(current_page=2, page_size=10, total_count=47)
        assert state.to_dict() == {
            'current_page': 2,
            'page_size': 10,
            'total_count': 47,
            'total_pages': 5,
        }


if __name__ == '__main__':
    pytest.main([__file__])
