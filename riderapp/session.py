"""
Session and role authorization for the RiderApp console.

The session store tracks the authenticated identity and answers access
control queries. It wraps a durable mapping (the Django session in
production, a plain dict in tests) holding the access token, the refresh
token and the cached identity.

States:
    LOADING -> AUTHENTICATED | UNAUTHENTICATED   (initialize)
    any     -> AUTHENTICATED                     (login)
    any     -> UNAUTHENTICATED                   (logout)
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, MutableMapping, Optional

from django.db import models

from .exceptions import BackendError

if TYPE_CHECKING:
    from .services.api_client import RiderApiClient

logger = logging.getLogger(__name__)


TOKEN_KEY = 'riderapp.token'
REFRESH_TOKEN_KEY = 'riderapp.refresh_token'
IDENTITY_KEY = 'riderapp.user'


class Role(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MANAGER = 'manager', 'Manager'
    STAFF = 'staff', 'Staff'


ROLE_LEVELS = {
    Role.STAFF: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}

# Backend role names mapped to console roles; 'user' is the legacy name for staff
BACKEND_ROLE_MAPPING = {
    'admin': Role.ADMIN,
    'manager': Role.MANAGER,
    'staff': Role.STAFF,
    'user': Role.STAFF,
}


def map_backend_role(role) -> Role:
    """Map a backend role string to a console role, defaulting to staff."""
    if not isinstance(role, str):
        return Role.STAFF
    return BACKEND_ROLE_MAPPING.get(role, Role.STAFF)


def role_level(role) -> int:
    """Privilege level of a role; absent or unknown roles have level 0."""
    if role is None:
        return 0
    try:
        return ROLE_LEVELS[Role(role)]
    except ValueError:
        return 0


class SessionState(models.TextChoices):
    LOADING = 'loading', 'Loading'
    AUTHENTICATED = 'authenticated', 'Authenticated'
    UNAUTHENTICATED = 'unauthenticated', 'Unauthenticated'


@dataclass(frozen=True)
class Identity:
    email: str
    role: Role

    def as_dict(self):
        return {'email': self.email, 'role': self.role.value}


class SessionStore:
    """
    Holds the current identity and the persisted credentials.

    Only ``login``, ``logout``, ``refresh_token`` and ``store_tokens`` write
    to the session; every other method is a read.
    """

    def __init__(self, storage: MutableMapping):
        self._storage = storage
        self._identity: Optional[Identity] = None
        self._state = SessionState.LOADING

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    @property
    def role(self) -> Optional[Role]:
        return self._identity.role if self._identity else None

    @property
    def access_token(self) -> Optional[str]:
        return self._storage.get(TOKEN_KEY) or None

    @property
    def stored_refresh_token(self) -> Optional[str]:
        return self._storage.get(REFRESH_TOKEN_KEY) or None

    def initialize(self) -> SessionState:
        """
        Settle the LOADING state from the durable store.

        A persisted access token plus a cached identity restore the session;
        anything less clears the store and leaves the session unauthenticated.
        """
        cached = self._storage.get(IDENTITY_KEY)
        if self.access_token and isinstance(cached, dict) and cached.get('email'):
            self._identity = Identity(email=cached['email'], role=map_backend_role(cached.get('role')))
            self._state = SessionState.AUTHENTICATED
        else:
            self._clear()
        return self._state

    def login(self, email: str, role) -> Identity:
        """
        Overwrite the current session with an authenticated identity.

        Credentials are not checked here; callers only invoke this after the
        backend accepted them.
        """
        identity = Identity(email=email, role=map_backend_role(role))
        self._identity = identity
        self._state = SessionState.AUTHENTICATED
        self._storage[IDENTITY_KEY] = identity.as_dict()
        logger.info(f"Session authenticated for {email} as {identity.role.value}")
        return identity

    def store_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self._storage[TOKEN_KEY] = access_token
        if refresh_token is not None:
            self._storage[REFRESH_TOKEN_KEY] = refresh_token

    def logout(self, client: Optional['RiderApiClient'] = None) -> None:
        """
        Notify the backend (best effort) and clear all session state.

        Backend failures are logged and ignored; local state is always
        cleared.
        """
        email = self._identity.email if self._identity else None
        token = self.access_token
        try:
            if client is not None and token:
                client.token = token
                client.logout()
        except BackendError as e:
            logger.warning(f"Backend logout failed, clearing local session anyway: {str(e)}")
        finally:
            self._clear()
            logger.info(f"Session cleared for {email or 'anonymous user'}")

    def refresh_token(self, client: 'RiderApiClient') -> bool:
        """
        Exchange the stored refresh token for a new access token.

        Returns:
            True if a new access token was stored, False otherwise. The
            current session is left untouched on failure.
        """
        refresh = self.stored_refresh_token
        if not refresh:
            return False

        try:
            data = client.refresh(refresh)
        except BackendError as e:
            logger.warning(f"Token refresh failed: {str(e)}")
            return False

        access = data.get('access_token') if isinstance(data, dict) else None
        if not access:
            logger.warning("Token refresh succeeded but returned no access token")
            return False

        self._storage[TOKEN_KEY] = access
        client.token = access
        return True

    def has_access(self, required_role) -> bool:
        # Raises ValueError for an unknown required role
        required_level = ROLE_LEVELS[Role(required_role)]
        return role_level(self.role) >= required_level

    def is_admin(self) -> bool:
        return self.has_access(Role.ADMIN)

    def is_manager(self) -> bool:
        return self.has_access(Role.MANAGER)

    def is_staff(self) -> bool:
        return self.has_access(Role.STAFF)

    def _clear(self) -> None:
        self._identity = None
        self._state = SessionState.UNAUTHENTICATED
        for key in (TOKEN_KEY, REFRESH_TOKEN_KEY, IDENTITY_KEY):
            self._storage.pop(key, None)
