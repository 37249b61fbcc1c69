"""
Tests for the admin settings screen and console user management.
"""

from unittest.mock import patch

from rest_framework import status
from rest_framework.test import APITestCase

from riderapp.exceptions import BackendResponseError, BackendUnavailableError
from riderapp.services.api_client import RiderApiClient
from riderapp.tests.utils import ConsoleTestUtils


SETTINGS = {
    'company_name': 'RiderApp',
    'training_fee': 150,
    'cutoff_date': 25,
    'email_notifications': True,
    'auto_generate_reports': False,
}

USERS = [
    {'id': 1, 'name': 'Admin', 'email': 'admin@example.com', 'role': 'admin'},
    {'id': 2, 'name': 'Sara', 'email': 'sara@example.com', 'role': 'manager'},
]


class SettingsAPITestCase(APITestCase):
    """Test cases for GET/PUT /console/settings/."""

    def setUp(self):
        ConsoleTestUtils.login(self.client, role='admin')

    @patch.object(RiderApiClient, 'get_audit_log', return_value=[{'action': 'login'}])
    @patch.object(RiderApiClient, 'get_console_users', return_value=USERS)
    @patch.object(RiderApiClient, 'get_settings', return_value=SETTINGS)
    def test_get_settings_screen(self, mock_settings, mock_users, mock_audit):
        response = self.client.get('/console/settings/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['settings']['company_name'], 'RiderApp')
        self.assertEqual(len(response.data['users']), 2)
        self.assertEqual(response.data['audit_log'], [{'action': 'login'}])

    @patch.object(RiderApiClient, 'get_audit_log', return_value=[])
    @patch.object(RiderApiClient, 'get_console_users')
    @patch.object(RiderApiClient, 'get_settings', return_value=SETTINGS)
    def test_settings_screen_fails_as_a_whole(self, mock_settings, mock_users, mock_audit):
        mock_users.side_effect = BackendResponseError(500)

        response = self.client.get('/console/settings/')

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Failed to load settings data')
        self.assertEqual(response.data['failed'], ['users'])

    @patch.object(RiderApiClient, 'update_settings')
    def test_save_settings(self, mock_update):
        mock_update.return_value = SETTINGS

        response = self.client.put(
            '/console/settings/',
            {
                'company_name': 'RiderApp',
                'training_fee': '150.00',
                'cutoff_date': 25,
                'email_notifications': True,
                'auto_generate_reports': True,
            },
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Settings saved successfully!')
        payload = mock_update.call_args[0][0]
        self.assertEqual(payload['training_fee'], 150.0)
        self.assertTrue(payload['auto_generate_reports'])

    @patch.object(RiderApiClient, 'update_settings')
    def test_invalid_cutoff_date(self, mock_update):
        response = self.client.put(
            '/console/settings/',
            {**SETTINGS, 'cutoff_date': 40},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('cutoff_date', response.data['details'])
        mock_update.assert_not_called()

    def test_manager_is_forbidden(self):
        ConsoleTestUtils.login(self.client, role='manager')

        response = self.client.get('/console/settings/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ConsoleUserAPITestCase(APITestCase):
    """Test cases for /console/settings/users/."""

    def setUp(self):
        ConsoleTestUtils.login(self.client, role='admin')

    @patch.object(RiderApiClient, 'get_console_users', return_value=USERS)
    def test_list_users(self, mock_users):
        response = self.client.get('/console/settings/users/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    @patch.object(RiderApiClient, 'get_console_users', return_value=USERS)
    @patch.object(RiderApiClient, 'create_console_user')
    def test_create_user_without_password(self, mock_create, mock_users):
        mock_create.return_value = {'id': 3, 'name': 'Omar', 'email': 'omar@example.com', 'role': 'staff'}

        response = self.client.post(
            '/console/settings/users/',
            {'name': 'Omar', 'email': 'omar@example.com', 'role': 'staff', 'password': ''},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'User added successfully!')
        self.assertEqual(response.data['record']['id'], 3)
        payload = mock_create.call_args[0][0]
        self.assertNotIn('password', payload)
        self.assertEqual(payload['role'], 'staff')

    @patch.object(RiderApiClient, 'get_console_users')
    @patch.object(RiderApiClient, 'create_console_user', return_value={'id': 3})
    def test_create_user_reload_failure_is_a_warning(self, mock_create, mock_users):
        mock_users.side_effect = BackendUnavailableError('down')

        response = self.client.post(
            '/console/settings/users/',
            {'name': 'Omar', 'email': 'omar@example.com', 'role': 'manager', 'password': 's3cret'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['results'])
        self.assertEqual(response.data['warning'], 'Failed to reload users')
        self.assertEqual(mock_create.call_args[0][0]['password'], 's3cret')

    @patch.object(RiderApiClient, 'create_console_user')
    def test_create_user_requires_fields(self, mock_create):
        response = self.client.post(
            '/console/settings/users/',
            {'name': 'Omar', 'role': 'staff'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Please fill in all required fields')
        mock_create.assert_not_called()

    @patch.object(RiderApiClient, 'create_console_user')
    def test_create_user_rejects_unknown_role(self, mock_create):
        response = self.client.post(
            '/console/settings/users/',
            {'name': 'Omar', 'email': 'omar@example.com', 'role': 'owner'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data['details'])
        mock_create.assert_not_called()

    @patch.object(RiderApiClient, 'delete_console_user')
    def test_delete_requires_confirmation(self, mock_delete):
        response = self.client.delete('/console/settings/users/2/')

        self.assertEqual(response.status_code, status.HTTP_428_PRECONDITION_REQUIRED)
        mock_delete.assert_not_called()

    @patch.object(RiderApiClient, 'get_console_users', return_value=USERS[:1])
    @patch.object(RiderApiClient, 'delete_console_user')
    def test_delete_confirmed(self, mock_delete, mock_users):
        response = self.client.delete('/console/settings/users/2/?confirm=true')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User deleted successfully!')
        self.assertEqual(len(response.data['results']), 1)
        mock_delete.assert_called_once_with(2)

    @patch.object(RiderApiClient, 'delete_console_user')
    def test_delete_failure(self, mock_delete):
        mock_delete.side_effect = BackendResponseError(404, {'detail': 'User not found'})

        response = self.client.delete('/console/settings/users/9/?confirm=yes')

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Failed to delete user')
        self.assertEqual(response.data['details'], 'User not found')

    def test_staff_cannot_manage_users(self):
        ConsoleTestUtils.login(self.client, role='staff')

        response = self.client.get('/console/settings/users/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
