"""
DRF authentication backed by the console session store.

The session store lives in the Django session. Each request gets one store,
initialized once, and views receive the identity as a read-only ConsoleUser
on ``request.user``.
"""

from django.http import HttpRequest
from rest_framework.authentication import SessionAuthentication

from .session import Identity, SessionStore

SESSION_STORE_ATTR = '_riderapp_session_store'


class ConsoleUser:
    """Read-only view of the authenticated console identity."""

    is_authenticated = True
    is_anonymous = False
    is_active = True

    def __init__(self, identity: Identity):
        self._identity = identity

    @property
    def email(self) -> str:
        return self._identity.email

    @property
    def role(self):
        return self._identity.role

    @property
    def identity(self) -> Identity:
        return self._identity

    def get_username(self) -> str:
        return self.email

    def __str__(self):
        return f"{self.email} ({self.role.value})"


def get_session_store(request) -> SessionStore:
    """Return the initialized session store of a Django or DRF request."""
    django_request: HttpRequest = getattr(request, '_request', request)
    store = getattr(django_request, SESSION_STORE_ATTR, None)
    if store is None:
        store = SessionStore(django_request.session)
        store.initialize()
        setattr(django_request, SESSION_STORE_ATTR, store)
    return store


class ConsoleSessionAuthentication(SessionAuthentication):
    """
    Authenticate requests from the console's persisted session.

    CSRF is enforced the same way DRF's SessionAuthentication does.
    """

    def authenticate(self, request):
        store = get_session_store(request)
        if not store.is_authenticated:
            return None

        self.enforce_csrf(request)
        return (ConsoleUser(store.identity), store)

    def authenticate_header(self, request):
        # Makes DRF answer 401 rather than 403 for requests without a session
        return 'Session'
