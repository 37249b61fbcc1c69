"""
Tests for concurrent fan-out loads.
"""

from unittest.mock import MagicMock

from django.test import TestCase

from riderapp.exceptions import (
    AggregateLoadError,
    BackendResponseError,
    BackendUnavailableError,
)
from riderapp.services.api_client import DASHBOARD_ENDPOINTS
from riderapp.services.loaders import (
    fetch_all,
    load_dashboard,
    load_deduction_screen,
    load_settings_screen,
)


class FetchAllTestCase(TestCase):
    """Test cases for the all-or-nothing fan-out."""

    def test_results_by_name(self):
        result = fetch_all({
            'a': lambda: 1,
            'b': lambda: [2],
        })

        self.assertEqual(result, {'a': 1, 'b': [2]})

    def test_empty_load(self):
        self.assertEqual(fetch_all({}), {})

    def test_one_failure_fails_the_load(self):
        calls = {
            'ok': MagicMock(return_value=[1]),
            'broken': MagicMock(side_effect=BackendResponseError(500)),
        }

        with self.assertRaises(AggregateLoadError) as context:
            fetch_all(calls)

        self.assertEqual(list(context.exception.failures), ['broken'])
        self.assertFalse(context.exception.unavailable)
        # Every call settles before the load fails
        calls['ok'].assert_called_once_with()

    def test_unavailable_when_all_failures_are_transport(self):
        with self.assertRaises(AggregateLoadError) as context:
            fetch_all({
                'a': MagicMock(side_effect=BackendUnavailableError('down')),
                'b': MagicMock(side_effect=BackendUnavailableError('down')),
            })

        self.assertTrue(context.exception.unavailable)
        self.assertEqual(sorted(context.exception.failures), ['a', 'b'])

    def test_unauthorized_failure_is_flagged(self):
        with self.assertRaises(AggregateLoadError) as context:
            fetch_all({'a': MagicMock(side_effect=BackendResponseError(401))})

        self.assertTrue(context.exception.unauthorized)

    def test_programming_errors_propagate(self):
        with self.assertRaises(KeyError):
            fetch_all({'a': MagicMock(side_effect=KeyError('x'))})


class ScreenLoadTestCase(TestCase):
    """Test cases for the screen loaders."""

    def setUp(self):
        self.api = MagicMock()

    def test_load_dashboard_orders_employee_joins(self):
        def dashboard(name):
            if name == 'employee_joins':
                return [{'month': 'Mar', 'count': 4}, {'month': 'Jan', 'count': 2}]
            return {'name': name}

        self.api.get_dashboard.side_effect = dashboard

        data = load_dashboard(self.api)

        self.assertEqual(set(data), set(DASHBOARD_ENDPOINTS))
        self.assertEqual([row['month'] for row in data['employee_joins']], ['Jan', 'Mar'])
        self.assertEqual(self.api.get_dashboard.call_count, 7)

    def test_load_dashboard_fails_as_a_whole(self):
        def dashboard(name):
            if name == 'alerts':
                raise BackendResponseError(500)
            return []

        self.api.get_dashboard.side_effect = dashboard

        with self.assertRaises(AggregateLoadError) as context:
            load_dashboard(self.api)

        self.assertEqual(list(context.exception.failures), ['alerts'])

    def test_load_deduction_screen(self):
        self.api.get_deductions.return_value = [{'employee_id': 1}]
        self.api.get_employees.return_value = [{'employee_id': 1, 'name': 'Ali'}]

        data = load_deduction_screen(self.api)

        self.assertEqual(data['deductions'], [{'employee_id': 1}])
        self.assertEqual(data['employees'][0]['name'], 'Ali')

    def test_load_settings_screen(self):
        self.api.get_settings.return_value = {'company_name': 'RiderApp'}
        self.api.get_console_users.return_value = []
        self.api.get_audit_log.side_effect = BackendUnavailableError('down')

        with self.assertRaises(AggregateLoadError) as context:
            load_settings_screen(self.api)

        self.assertTrue(context.exception.unavailable)
