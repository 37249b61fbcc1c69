"""
Shared plumbing for console views.

ConsoleBackendMixin gives a view:
- a RiderApiClient carrying the session's access token
- one transparent token refresh and retry when the backend answers 401
- the mapping of backend failures to console error responses
- the delete confirmation guard
"""

import logging
from typing import Any, Callable, Dict, Optional

from rest_framework import status
from rest_framework.response import Response

from ..authentication import get_session_store
from ..exceptions import (
    AggregateLoadError,
    BackendError,
    BackendResponseError,
    BackendUnavailableError,
    RiderAppError,
    SessionExpiredError,
)
from ..services.api_client import RiderApiClient

logger = logging.getLogger(__name__)


SERVICE_UNAVAILABLE_MESSAGE = "Service unavailable. Please try again."
SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."


def _is_unauthorized(exc: RiderAppError) -> bool:
    if isinstance(exc, AggregateLoadError):
        return exc.unauthorized
    return isinstance(exc, BackendResponseError) and exc.status_code == status.HTTP_401_UNAUTHORIZED


class ConsoleBackendMixin:
    """
    Mixin for views that call the RiderApp backend on behalf of the session.
    """

    def get_session_store(self):
        return get_session_store(self.request)

    def get_api_client(self) -> RiderApiClient:
        return RiderApiClient.from_settings(token=self.get_session_store().access_token)

    def call_backend(self, operation: Callable[[RiderApiClient], Any]) -> Any:
        """
        Run ``operation`` with a client for the current session.

        A 401 from the backend triggers one token refresh; if the refresh
        fails SessionExpiredError is raised, otherwise the operation is
        retried once with the new token.
        """
        client = self.get_api_client()
        try:
            return operation(client)
        except (BackendError, AggregateLoadError) as e:
            if not _is_unauthorized(e):
                raise
            logger.info("Backend rejected the access token, attempting refresh")
            if not self.get_session_store().refresh_token(client):
                raise SessionExpiredError(SESSION_EXPIRED_MESSAGE) from e
        return operation(client)

    def backend_error_response(self, exc: RiderAppError, message: str) -> Response:
        """
        Build the error response for a failed backend call.

        Transport failures map to 503, rejected calls to 502 and an expired
        session to 401.
        """
        logger.error(f"{message}: {str(exc)}")

        if isinstance(exc, SessionExpiredError):
            return Response(
                {'error': SESSION_EXPIRED_MESSAGE, 'details': message},
                status=status.HTTP_401_UNAUTHORIZED
            )

        if isinstance(exc, AggregateLoadError):
            return Response(
                {
                    'error': message,
                    'details': SERVICE_UNAVAILABLE_MESSAGE if exc.unavailable else str(exc),
                    'failed': sorted(exc.failures),
                },
                status=status.HTTP_503_SERVICE_UNAVAILABLE if exc.unavailable else status.HTTP_502_BAD_GATEWAY
            )

        if isinstance(exc, BackendUnavailableError):
            return Response(
                {'error': message, 'details': SERVICE_UNAVAILABLE_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        details = exc.detail if isinstance(exc, BackendResponseError) and exc.detail else str(exc)
        return Response(
            {'error': message, 'details': details},
            status=status.HTTP_502_BAD_GATEWAY
        )

    def validation_error_response(self, serializer, message: str = 'Invalid input') -> Response:
        return Response(
            {'error': message, 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    def confirmation_required(self) -> Optional[Response]:
        """
        Return a 428 response unless the request carries ``confirm=true``.
        """
        confirm = self.request.query_params.get('confirm', '')
        if confirm.lower() in ['true', '1', 'yes']:
            return None
        return Response(
            {
                'error': 'Deletion must be confirmed',
                'details': 'Repeat the request with ?confirm=true to delete this record.'
            },
            status=status.HTTP_428_PRECONDITION_REQUIRED
        )

    @staticmethod
    def success_payload(message: str, level: str = 'success', **data) -> Dict[str, Any]:
        return {'message': message, 'level': level, **data}
