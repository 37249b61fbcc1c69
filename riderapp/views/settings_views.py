"""
Settings Views Module

Admin-only API views for the settings screen:
- SettingsAPIView: GET /console/settings/ loads settings, users and audit log together;
  PUT /console/settings/ saves the system settings
- ConsoleUserListAPIView: GET/POST /console/settings/users/
- ConsoleUserDetailAPIView: DELETE /console/settings/users/{id}/?confirm=true
"""

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import AggregateLoadError, BackendError, SessionExpiredError
from ..permissions import IsConsoleAdmin
from ..serializers.records import REQUIRED_FIELDS_MESSAGE
from ..serializers.settings import ConsoleSettingsSerializer, ConsoleUserSerializer
from ..services.loaders import load_settings_screen
from .base import ConsoleBackendMixin

logger = logging.getLogger(__name__)


class SettingsAPIView(ConsoleBackendMixin, APIView):
    """
    API View for system settings.

    GET loads settings, console users and the audit log concurrently; the
    screen is only returned when all three loaded.

    Permissions: Admin only
    """

    permission_classes = [IsConsoleAdmin]

    def get(self, request: Request) -> Response:
        try:
            data = self.call_backend(load_settings_screen)
        except (AggregateLoadError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load settings data")

        return Response(
            {
                'settings': data['settings'] or {},
                'users': data['users'] or [],
                'audit_log': data['audit_log'] or [],
            },
            status=status.HTTP_200_OK
        )

    def put(self, request: Request) -> Response:
        serializer = ConsoleSettingsSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, "Invalid settings")

        payload = serializer.backend_payload()
        try:
            saved = self.call_backend(lambda client: client.update_settings(payload))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to save settings")

        logger.info(f"Settings saved by {request.user.email}")
        return Response(
            self.success_payload("Settings saved successfully!", settings=saved),
            status=status.HTTP_200_OK
        )


class ConsoleUserListAPIView(ConsoleBackendMixin, APIView):
    """
    GET/POST /console/settings/users/

    Permissions: Admin only
    """

    permission_classes = [IsConsoleAdmin]

    def get(self, request: Request) -> Response:
        try:
            users = self.call_backend(lambda client: client.get_console_users()) or []
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load settings data")
        return Response({'count': len(users), 'results': users}, status=status.HTTP_200_OK)

    def post(self, request: Request) -> Response:
        serializer = ConsoleUserSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, REQUIRED_FIELDS_MESSAGE)

        payload = serializer.backend_payload()
        if not payload.get('password'):
            payload.pop('password', None)

        try:
            created = self.call_backend(lambda client: client.create_console_user(payload))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to add user")

        logger.info(f"Console user {payload['email']} added with role {payload['role']}")
        return Response(
            self.success_payload("User added successfully!", record=created, **self._reload_users()),
            status=status.HTTP_201_CREATED
        )

    def _reload_users(self):
        try:
            return {'results': self.call_backend(lambda client: client.get_console_users()) or []}
        except (BackendError, SessionExpiredError) as e:
            logger.warning(f"Reloading console users failed: {str(e)}")
            return {'results': None, 'warning': 'Failed to reload users'}


class ConsoleUserDetailAPIView(ConsoleUserListAPIView):
    """
    DELETE /console/settings/users/{id}/?confirm=true

    Permissions: Admin only
    """

    http_method_names = ['delete', 'options']

    def delete(self, request: Request, user_id: int) -> Response:
        unconfirmed = self.confirmation_required()
        if unconfirmed is not None:
            return unconfirmed

        try:
            self.call_backend(lambda client: client.delete_console_user(user_id))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to delete user")

        logger.info(f"Console user {user_id} deleted by {request.user.email}")
        return Response(
            self.success_payload("User deleted successfully!", **self._reload_users()),
            status=status.HTTP_200_OK
        )
