"""
Authentication Views Module

API views for the console session:
- LoginAPIView: POST /console/auth/login/ to open a session
- LogoutAPIView: POST /console/auth/logout/ to close it
- RefreshAPIView: POST /console/auth/refresh/ to renew the access token
- MeAPIView: GET /console/auth/me/ for the current identity
- ForgotPasswordAPIView / ResetPasswordAPIView for password resets
- MenuAPIView: GET /console/menu/ for the role-filtered navigation
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import (
    BackendError,
    BackendUnavailableError,
    InvalidCredentialsError,
)
from ..navigation import PAGE_ROLES, resolve_page, visible_menu
from ..permissions import IsConsoleStaff
from ..serializers.auth import (
    LOGIN_REQUIRED_MESSAGE,
    RESET_REQUIRED_MESSAGE,
    ForgotPasswordSerializer,
    LoginSerializer,
    ResetPasswordSerializer,
)
from ..services.api_client import RiderApiClient
from ..services.authentication import request_password_reset, reset_password, sign_in
from .base import SESSION_EXPIRED_MESSAGE, ConsoleBackendMixin

logger = logging.getLogger(__name__)


LOGIN_FAILED_MESSAGE = "Login failed. Please try again."


class LoginAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/auth/login/

    Verifies the credentials with the backend and stores the returned
    tokens and identity in the session. Invalid credentials (401) and an
    unreachable backend (503) are reported differently.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, LOGIN_REQUIRED_MESSAGE)

        email = serializer.validated_data['email']
        store = self.get_session_store()
        client = RiderApiClient.from_settings()

        try:
            identity = sign_in(store, client, email, serializer.validated_data['password'])
        except InvalidCredentialsError as e:
            logger.info(f"Login rejected for {email}")
            return Response(
                {'error': str(e)},
                status=status.HTTP_401_UNAUTHORIZED
            )
        except BackendUnavailableError as e:
            logger.error(f"Login for {email} failed, backend unreachable: {str(e)}")
            return Response(
                {'error': LOGIN_FAILED_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        except BackendError as e:
            logger.error(f"Login for {email} failed: {str(e)}")
            return Response(
                {'error': LOGIN_FAILED_MESSAGE, 'details': str(e)},
                status=status.HTTP_502_BAD_GATEWAY
            )

        # New session key for the authenticated session
        request.session.cycle_key()

        return Response(
            {
                'message': 'Login successful',
                'user': identity.as_dict(),
                'menu': visible_menu(store),
            },
            status=status.HTTP_200_OK
        )


class LogoutAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/auth/logout/

    Always succeeds: the backend is notified on a best-effort basis and the
    local session is cleared regardless.
    """

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        store = self.get_session_store()
        store.logout(self.get_api_client())
        return Response({'message': 'Logged out successfully'}, status=status.HTTP_200_OK)


class RefreshAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/auth/refresh/

    Renews the access token with the stored refresh token. A failed refresh
    leaves the session as it was; the caller decides whether to log out.
    """

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        store = self.get_session_store()
        if store.refresh_token(self.get_api_client()):
            return Response({'refreshed': True}, status=status.HTTP_200_OK)

        return Response(
            {'refreshed': False, 'error': SESSION_EXPIRED_MESSAGE},
            status=status.HTTP_401_UNAUTHORIZED
        )


class MeAPIView(ConsoleBackendMixin, APIView):
    """
    GET /console/auth/me/
    """

    permission_classes = [IsConsoleStaff]

    def get(self, request: Request) -> Response:
        store = self.get_session_store()
        return Response(
            {
                'user': store.identity.as_dict(),
                'is_admin': store.is_admin(),
                'is_manager': store.is_manager(),
                'is_staff': store.is_staff(),
            },
            status=status.HTTP_200_OK
        )


class MenuAPIView(ConsoleBackendMixin, APIView):
    """
    GET /console/menu/?page=<key>

    Returns the menu entries the session may open, plus whether the
    requested page (unknown keys fall back to the dashboard) is allowed.
    """

    permission_classes = [IsConsoleStaff]

    def get(self, request: Request) -> Response:
        store = self.get_session_store()
        page = resolve_page(request.query_params.get('page', ''))
        return Response(
            {
                'menu': visible_menu(store),
                'page': page,
                'allowed': store.has_access(PAGE_ROLES[page]),
            },
            status=status.HTTP_200_OK
        )


class ForgotPasswordAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/auth/forgot-password/

    Requests a reset token from the backend and returns it to the caller.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = ForgotPasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, "Please enter your email to reset password")

        email = serializer.validated_data['email']
        try:
            token = request_password_reset(RiderApiClient.from_settings(), email)
        except BackendUnavailableError as e:
            return self.backend_error_response(e, "Failed to process password reset")
        except BackendError as e:
            return self.backend_error_response(e, "Failed to generate reset token")

        return Response(
            {
                'message': 'Password reset token generated successfully!',
                'reset_token': token,
            },
            status=status.HTTP_200_OK
        )


class ResetPasswordAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/auth/reset-password/
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = ResetPasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, RESET_REQUIRED_MESSAGE)

        try:
            reset_password(
                RiderApiClient.from_settings(),
                serializer.validated_data['token'],
                serializer.validated_data['new_password'],
            )
        except BackendError as e:
            return self.backend_error_response(e, "Failed to reset password. Please try again.")

        return Response(
            self.success_payload("Password reset successfully! You can now login with your new password."),
            status=status.HTTP_200_OK
        )
