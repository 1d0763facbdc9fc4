"""
Tests for DataFrame filtering with pandas masks.
"""

import os
import sys

import pandas as pd
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from listing.frame_filters import criteria_mask, field_mask, filter_frame, path_values, row_record
from listing.predicates import filter_records, resolve_path
from listing.schemas import DOCTOR_FILTERS, PROVIDER_FILTERS, TASK_FILTERS
from listing.state.models import CONTAINS, CUSTOM, SEARCH, FilterField, FilterSchema


@pytest.fixture
def doctors_df():
    return pd.DataFrame([
        {'id': 1, 'first_name_en': 'Dana', 'last_name_en': 'Cohen', 'license_number': 'MD-1001',
         'specialties': ['cardiology'], 'sub_specialties': [], 'city': 'Haifa', 'status': 'active'},
        {'id': 2, 'first_name_en': 'Avi', 'last_name_en': 'Levi', 'license_number': 'MD-2002',
         'specialties': ['surgery'], 'sub_specialties': ['trauma'], 'city': 'Tel Aviv', 'status': 'inactive'},
        {'id': 3, 'first_name_en': 'Noa', 'last_name_en': 'Mizrahi', 'license_number': None,
         'specialties': None, 'sub_specialties': None, 'city': None, 'status': 'active'},
    ])


class TestFieldMask:
    """Test single-field masks"""

    def test_unconstrained_value_keeps_all_rows(self, doctors_df):
        mask = field_mask(doctors_df, DOCTOR_FILTERS.field('status'), 'all')
        assert mask.tolist() == [True, True, True]

    def test_exact_mask(self, doctors_df):
        mask = field_mask(doctors_df, DOCTOR_FILTERS.field('status'), 'active')
        assert mask.tolist() == [True, False, True]

    def test_exact_ignore_case_mask(self, doctors_df):
        mask = field_mask(doctors_df, DOCTOR_FILTERS.field('city'), 'tel aviv')
        assert mask.tolist() == [False, True, False]

    def test_contains_mask_checks_every_path(self, doctors_df):
        mask = field_mask(doctors_df, DOCTOR_FILTERS.field('specialty'), 'trauma')
        assert mask.tolist() == [False, True, False]

    def test_search_mask(self, doctors_df):
        mask = field_mask(doctors_df, DOCTOR_FILTERS.field('search'), 'LEVI')
        assert mask.tolist() == [False, True, False]

    def test_mask_keeps_frame_index(self, doctors_df):
        frame = doctors_df.set_index(pd.Index([10, 20, 30]))
        mask = field_mask(frame, DOCTOR_FILTERS.field('status'), 'inactive')
        assert mask.index.tolist() == [10, 20, 30]


class TestFilterFrame:
    """Test whole-criteria filtering"""

    def test_defaults_keep_every_row(self, doctors_df):
        result = filter_frame(doctors_df, DOCTOR_FILTERS.defaults(), DOCTOR_FILTERS)
        assert len(result) == 3

    def test_combined_filters(self, doctors_df):
        criteria = DOCTOR_FILTERS.normalize({'status': 'active', 'city': 'HAIFA'})
        result = filter_frame(doctors_df, criteria, DOCTOR_FILTERS)
        assert result['id'].tolist() == [1]

    def test_input_frame_untouched(self, doctors_df):
        before = doctors_df.copy()
        filter_frame(doctors_df, DOCTOR_FILTERS.normalize({'status': 'inactive'}), DOCTOR_FILTERS)
        pd.testing.assert_frame_equal(doctors_df, before)

    def test_empty_frame(self):
        empty = pd.DataFrame()
        assert filter_frame(empty, DOCTOR_FILTERS.defaults(), DOCTOR_FILTERS).empty

    def test_missing_search_columns_are_skipped(self, doctors_df):
        # email and the Hebrew name columns are absent from this frame
        criteria = DOCTOR_FILTERS.normalize({'search': 'dana'})
        assert filter_frame(doctors_df, criteria, DOCTOR_FILTERS)['id'].tolist() == [1]

    def test_nested_paths_after_json_normalize(self):
        providers = [
            {'id': 'p1', 'name': 'North Clinic', 'contact': {'city': 'Haifa'}, 'status': 'active'},
            {'id': 'p2', 'name': 'South Lab', 'contact': {'city': 'Eilat'}, 'status': 'active'},
        ]
        frame = pd.json_normalize(providers)
        criteria = PROVIDER_FILTERS.normalize({'city': 'eilat'})
        assert filter_frame(frame, criteria, PROVIDER_FILTERS)['id'].tolist() == ['p2']

    def test_date_filter(self):
        frame = pd.DataFrame([
            {'id': 't1', 'title': 'a', 'due_date': '2024-05-01'},
            {'id': 't2', 'title': 'b', 'due_date': '2024-07-01'},
            {'id': 't3', 'title': 'c', 'due_date': None},
        ])
        criteria = TASK_FILTERS.normalize({'due_date': '2024-06-01'})
        assert filter_frame(frame, criteria, TASK_FILTERS)['id'].tolist() == ['t1']

    def test_agrees_with_record_filtering(self, doctors_df):
        records = doctors_df.to_dict('records')
        for values in ({'status': 'active'}, {'specialty': 'surgery'}, {'search': 'md-'}, {'city': 'haifa'}):
            criteria = DOCTOR_FILTERS.normalize(values)
            expected = [r['id'] for r in filter_records(records, criteria, DOCTOR_FILTERS)]
            mask = criteria_mask(doctors_df, criteria, DOCTOR_FILTERS)
            assert doctors_df.loc[mask, 'id'].tolist() == expected


BRANCHES = FilterSchema([
    FilterField('search', SEARCH, paths=('name', 'addresses.city')),
    FilterField('city', CONTAINS, paths='addresses.city'),
    FilterField('region', CUSTOM, matcher=lambda record, value: resolve_path(record, 'contact.region') == value),
])


@pytest.fixture
def branch_records():
    return [
        {'id': 'b1', 'name': 'North', 'contact': {'region': 'north'},
         'addresses': [{'city': 'Haifa'}, {'city': 'Akko'}]},
        {'id': 'b2', 'name': 'South', 'contact': {'region': 'south'},
         'addresses': [{'city': 'Eilat'}]},
        {'id': 'b3', 'name': 'Remote'},
    ]


class TestNestedPaths:
    """Test paths that reach into list cells of a normalized frame"""

    def test_path_values_walks_list_cells(self, branch_records):
        frame = pd.json_normalize(branch_records)
        assert path_values(frame, 'addresses.city').tolist()[:2] == [['Haifa', 'Akko'], ['Eilat']]
        assert path_values(frame, 'contact.region').tolist()[:2] == ['north', 'south']
        assert path_values(frame, 'nowhere.city') is None

    def test_row_record_rebuilds_nesting(self, branch_records):
        frame = pd.json_normalize(branch_records)
        record = row_record(frame.iloc[2])
        assert record == {'id': 'b3', 'name': 'Remote'}
        assert row_record(frame.iloc[0])['contact'] == {'region': 'north'}

    @pytest.mark.parametrize('values', [
        {'search': 'haif'},
        {'search': 'south'},
        {'city': 'Akko'},
        {'city': 'Tel Aviv'},
        {'region': 'south'},
    ])
    def test_agrees_with_record_filtering(self, branch_records, values):
        frame = pd.json_normalize(branch_records)
        criteria = BRANCHES.normalize(values)

        expected = [r['id'] for r in filter_records(branch_records, criteria, BRANCHES)]

        assert filter_frame(frame, criteria, BRANCHES)['id'].tolist() == expected

    def test_search_inside_list_of_objects(self, branch_records):
        frame = pd.json_normalize(branch_records)
        criteria = BRANCHES.normalize({'search': 'haif'})
        assert filter_frame(frame, criteria, BRANCHES)['id'].tolist() == ['b1']


if __name__ == '__main__':
    pytest.main([__file__])
