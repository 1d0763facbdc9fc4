"""
Tests for client-side sorting.
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listing.sorting import SortConfig, sort_records


RECORDS = [
    {'id': 1, 'name': 'beta', 'rating': 4, 'contact': {'city': 'Haifa'}},
    {'id': 2, 'name': 'Alpha', 'rating': None, 'contact': {'city': 'Eilat'}},
    {'id': 3, 'name': 'gamma', 'rating': 5, 'contact': None},
    {'id': 4, 'name': 'alpha', 'rating': 4, 'contact': {'city': 'Akko'}},
]


class TestSortConfig:
    """Test SortConfig conversions"""

    def test_param_round_trip(self):
        assert SortConfig('name').to_param() == 'name'
        assert SortConfig('name', descending=True).to_param() == '-name'
        assert SortConfig.from_param('-rating') == SortConfig('rating', descending=True)
        assert SortConfig.from_param('rating') == SortConfig('rating')

    def test_empty_params(self):
        assert SortConfig.from_param(None) is None
        assert SortConfig.from_param('') is None
        assert SortConfig.from_param('-') is None

    def test_from_dict(self):
        assert SortConfig.from_dict({'field': 'name', 'descending': True}) == SortConfig('name', True)
        assert SortConfig.from_dict({'descending': True}) is None
        assert SortConfig.from_dict('name') is None


class TestSortRecords:
    """Test sort_records"""

    def test_no_sort_keeps_order(self):
        assert sort_records(RECORDS, None) == RECORDS

    def test_text_sort_ignores_case_and_is_stable(self):
        result = sort_records(RECORDS, SortConfig('name'))
        assert [r['id'] for r in result] == [2, 4, 1, 3]

    def test_missing_values_sort_last_in_both_directions(self):
        ascending = sort_records(RECORDS, SortConfig('rating'))
        descending = sort_records(RECORDS, SortConfig('rating', descending=True))
        assert [r['id'] for r in ascending] == [1, 4, 3, 2]
        assert [r['id'] for r in descending] == [3, 1, 4, 2]

    def test_nested_path(self):
        result = sort_records(RECORDS, SortConfig('contact.city'))
        assert [r['id'] for r in result] == [4, 2, 1, 3]

    def test_incomparable_values_keep_order(self):
        records = [{'v': 'a'}, {'v': 1}, {'v': 'b'}]
        assert sort_records(records, SortConfig('v')) == records

    def test_input_untouched(self):
        records = list(RECORDS)
        sort_records(records, SortConfig('name', descending=True))
        assert records == RECORDS


if __name__ == '__main__':
    pytest.main([__file__])
