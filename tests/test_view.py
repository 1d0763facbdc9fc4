"""
Tests for ListView, the per-screen composition of filters, sort,
pagination, selection and URL sync.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Config
from listing.pagination import DOTS
from listing.schemas import DOCTOR_FILTERS, TASK_FILTERS
from listing.sorting import SortConfig
from listing.url_sync import MemoryLocation, same_query
from listing.view import ListView
from state_manager import StateManager, StateManagerConfig


def make_doctors(count):
    statuses = ['active', 'inactive']
    return [
        {'id': i, 'last_name_en': f'Doctor {i:03d}', 'status': statuses[i % 2],
         'city': 'Haifa' if i % 3 == 0 else 'Eilat', 'specialties': ['cardiology'], 'sub_specialties': []}
        for i in range(1, count + 1)
    ]


@pytest.fixture
def config(tmp_path):
    return Config(config_file_path=str(tmp_path / 'config.toml'))


@pytest.fixture
def state_manager():
    return StateManager(StateManagerConfig())


@pytest.fixture
def view(config, state_manager):
    return ListView('doctors', DOCTOR_FILTERS, records=make_doctors(47),
                    state_manager=state_manager, config=config)


class TestListViewFiltering:
    """Test derived record subsets"""

    def test_initial_state(self, view):
        assert len(view.visible_records) == 47
        assert view.pagination.total_pages == 5
        assert view.page_range == [1, 2, 3, 4, 5]
        assert [r['id'] for r in view.page_records] == list(range(1, 11))

    def test_filter_updates_count(self, view):
        view.set_filter('status', 'active')
        assert len(view.visible_records) == 23
        assert view.pagination.total_count == 23
        assert view.active_filters == ['status']

    def test_filter_change_clamps_page(self, config, state_manager):
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(200),
                        state_manager=state_manager, config=config)
        view.go_to_page(8)
        assert view.pagination.current_page == 8

        view.set_filter('city', 'Haifa')
        assert view.pagination.total_pages == 7
        assert view.pagination.current_page == 7

        view.set_filter('search', 'Doctor 00')
        assert view.pagination.total_pages == 1
        assert view.pagination.current_page == 1

    def test_reset_filters(self, view):
        view.set_filters({'status': 'inactive', 'city': 'Haifa'})
        view.reset_filters()
        assert len(view.visible_records) == 47
        assert view.active_filters == []

    def test_set_records_reclamps(self, view):
        view.go_to_page(5)
        view.set_records(make_doctors(12))
        assert view.pagination.current_page == 2
        assert len(view.page_records) == 2

    def test_none_records(self, view):
        view.set_records(None)
        assert view.visible_records == []
        assert view.page_range == []

    def test_visible_records_are_memoized(self, view):
        first = view.visible_records
        assert view.visible_records is first

        view.set_filter('status', 'active')
        assert view.visible_records is not first

    def test_criteria_restored_across_views(self, config, state_manager, view):
        view.set_filter('status', 'inactive')
        restored = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(47),
                            state_manager=state_manager, config=config)
        assert restored.criteria['status'] == 'inactive'
        assert len(restored.visible_records) == 24

    def test_views_with_different_keys_are_independent(self, config, state_manager, view):
        view.set_filter('status', 'inactive')
        tasks = ListView('tasks', TASK_FILTERS, state_manager=state_manager, config=config)
        assert tasks.criteria['status'] == 'all'


class TestListViewPaging:
    """Test pagination through the view"""

    def test_navigation(self, view):
        view.next_page()
        view.next_page()
        assert view.pagination.current_page == 3
        view.previous_page()
        assert view.pagination.current_page == 2

    def test_page_size(self, view):
        view.go_to_page(5)
        view.set_page_size(25)
        assert view.pagination.total_pages == 2
        assert view.pagination.current_page == 2

    def test_page_size_from_config(self, config, state_manager):
        config.pagination.default_page_size = 5
        config.pagination.sibling_count = 2
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(100),
                        state_manager=state_manager, config=config)
        view.go_to_page(10)

        assert view.pagination.page_size == 5
        assert view.page_range == [1, DOTS, 8, 9, 10, 11, 12, DOTS, 20]


class TestListViewSorting:
    """Test sorting through the view"""

    def test_set_sort_toggles_direction(self, view):
        assert view.set_sort('last_name_en') == SortConfig('last_name_en')
        assert view.visible_records[0]['id'] == 1

        assert view.set_sort('last_name_en') == SortConfig('last_name_en', descending=True)
        assert view.visible_records[0]['id'] == 47

        assert view.set_sort('city') == SortConfig('city')

    def test_sort_is_persisted(self, config, state_manager, view):
        view.set_sort('last_name_en', descending=True)
        restored = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(3),
                            state_manager=state_manager, config=config)
        assert restored.sort == SortConfig('last_name_en', descending=True)

    def test_default_sort(self, config, state_manager):
        view = ListView('tasks', TASK_FILTERS, state_manager=state_manager, config=config,
                        default_sort=SortConfig('due_date'))
        assert view.sort == SortConfig('due_date')


class TestListViewSelection:
    """Test selection through the view"""

    def test_select_visible_only(self, view):
        view.set_filter('city', 'Haifa')
        view.select_visible()
        assert view.selection.count == 15
        assert all(record['city'] == 'Haifa' for record in view.selected_records)

    def test_selection_survives_filtering(self, view):
        view.selection.select(2)
        view.set_filter('status', 'active')
        assert view.selection.is_selected(2)
        assert [r['id'] for r in view.selected_records] == [2]

    def test_toggle_visible(self, view):
        view.set_filter('status', 'active')
        view.toggle_visible()
        assert view.selection.count == 23
        view.toggle_visible()
        assert view.selection.count == 0


class TestListViewUrlSync:
    """Test mounting with a location"""

    def test_mount_from_shared_link(self, config, state_manager):
        location = MemoryLocation('status=active&city=Haifa')
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(47), state_manager=state_manager,
                        location=location, config=config)
        view.mount()

        assert view.criteria['status'] == 'active'
        assert view.pagination.total_count == len(view.visible_records) == 7

    def test_filter_changes_reach_the_url(self, config, state_manager):
        location = MemoryLocation('')
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(47), state_manager=state_manager,
                        location=location, config=config)
        view.mount()

        view.set_filter('status', 'inactive')
        assert same_query(location.get_query(), 'status=inactive')

        view.unmount()
        view.set_filter('status', 'active')
        assert location.get_query() == 'status=inactive'

    def test_sync_disabled_by_config(self, config, state_manager):
        config.url.sync_enabled = False
        location = MemoryLocation('status=active')
        view = ListView('doctors', DOCTOR_FILTERS, state_manager=state_manager,
                        location=location, config=config)
        view.mount()

        assert view.criteria['status'] == 'all'

    def test_omit_keys_from_config(self, config, state_manager):
        config.url.omit_keys = ['status']
        location = MemoryLocation('status=active')
        view = ListView('doctors', DOCTOR_FILTERS, state_manager=state_manager,
                        location=location, config=config)
        view.mount()

        assert view.criteria['status'] == 'all'


    def test_remount_keeps_pagination_in_step(self, config, state_manager):
        location = MemoryLocation('')
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(100), state_manager=state_manager,
                        location=location, config=config)
        view.mount()
        view.unmount()
        view.mount()
        view.go_to_page(8)

        view.set_filter('city', 'Haifa')

        assert view.pagination.total_count == len(view.visible_records) == 33
        assert view.pagination.current_page == 4
        assert same_query(location.get_query(), 'city=Haifa')

    def test_unmount_keeps_clamping_without_url(self, config, state_manager):
        location = MemoryLocation('')
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(100), state_manager=state_manager,
                        location=location, config=config)
        view.mount()
        view.unmount()
        view.go_to_page(8)

        view.set_filter('city', 'Haifa')

        assert view.pagination.current_page == 4
        assert location.get_query() == ''

    def test_close_then_mount_resubscribes(self, config, state_manager):
        view = ListView('doctors', DOCTOR_FILTERS, records=make_doctors(100),
                        state_manager=state_manager, config=config)
        view.close()
        view.set_filter('city', 'Haifa')
        assert view.pagination.total_count == 100

        view.mount()
        assert view.pagination.total_count == 33


class TestListViewSnapshot:
    """Test the JSON-safe summary"""

    def test_snapshot(self, view):
        view.set_filter('status', 'active')
        view.set_sort('last_name_en', descending=True)
        view.selection.select_all([3, 1])

        snapshot = view.snapshot()
        assert snapshot['storage_key'] == 'doctors'
        assert snapshot['criteria']['status'] == 'active'
        assert snapshot['active_filters'] == ['status']
        assert snapshot['pagination']['total_count'] == 23
        assert snapshot['page_range'] == [1, 2, 3]
        assert snapshot['sort'] == '-last_name_en'
        assert snapshot['selected_ids'] == [1, 3]

    @patch('listing.view.get_config')
    def test_uses_global_config_by_default(self, mock_get_config, config, state_manager):
        mock_get_config.return_value = config
        ListView('doctors', DOCTOR_FILTERS, state_manager=state_manager)
        mock_get_config.assert_called_once()


if __name__ == '__main__':
    pytest.main([__file__])
