"""
Sign-in and password reset flows.

The backend verifies credentials; these helpers only orchestrate the calls
and update the session store once the backend has answered.
"""

import logging

from ..exceptions import BackendResponseError
from ..session import Identity, SessionStore
from .api_client import RiderApiClient

logger = logging.getLogger(__name__)


def sign_in(store: SessionStore, client: RiderApiClient, email: str, password: str) -> Identity:
    """
    Authenticate against the backend and open a console session.

    Raises:
        InvalidCredentialsError: If the backend rejected the credentials
        BackendUnavailableError: If the backend could not be reached
        BackendResponseError: If the login response carried no access token
        ValueError: If email or password is empty
    """
    if not email or not password:
        raise ValueError("Please enter both email and password")

    data = client.login(email, password)

    access_token = data.get('access_token') if isinstance(data, dict) else None
    if not access_token:
        logger.error(f"Login for {email} succeeded without an access token")
        raise BackendResponseError(200, data, message="Login response is missing an access token")

    store.store_tokens(access_token, data.get('refresh_token'))
    return store.login(data.get('email') or email, data.get('role'))


def request_password_reset(client: RiderApiClient, email: str) -> str:
    """Ask the backend for a password reset token for ``email``."""
    data = client.generate_reset_token(email)
    logger.info(f"Password reset token generated for {email}")
    return (data or {}).get('reset_token', '')


def reset_password(client: RiderApiClient, token: str, new_password: str) -> None:
    client.reset_password(token, new_password)
    logger.info("Password reset applied")
