"""
Exceptions raised by the RiderApp console when talking to the backend.

The hierarchy lets callers tell apart the failure modes the console has to
surface differently:
- BackendUnavailableError: no response at all (network down, timeout)
- BackendResponseError: the backend answered with a non-success status
- InvalidCredentialsError: the login endpoint rejected the credentials
- AggregateLoadError: one or more requests of a concurrent load failed
"""

from typing import Any, Dict, Optional


class RiderAppError(Exception):
    """Base exception for console errors"""
    pass


class BackendError(RiderAppError):
    """A call to the RiderApp backend did not succeed"""
    pass


class BackendUnavailableError(BackendError):
    """The backend could not be reached (no response received)"""
    pass


class BackendResponseError(BackendError):
    """
    The backend responded with a non-success status code.

    The decoded response body is kept in ``payload`` so callers can inspect
    backend error details.
    """

    def __init__(self, status_code: int, payload: Any = None, message: Optional[str] = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message or f"API error: {status_code}")

    @property
    def detail(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            detail = self.payload.get('detail')
            return str(detail) if detail is not None else None
        return None


class InvalidCredentialsError(BackendResponseError):
    """The backend rejected the submitted email/password"""

    def __init__(self, status_code: int, payload: Any = None):
        super().__init__(status_code, payload, message="Invalid email or password")


class SessionExpiredError(RiderAppError):
    """The backend rejected the access token and it could not be refreshed"""
    pass


class AggregateLoadError(RiderAppError):
    """
    Raised when a fan-out load has at least one failed request.

    ``failures`` maps each failed request name to its exception.
    """

    def __init__(self, failures: Dict[str, BaseException]):
        self.failures = failures
        names = ', '.join(sorted(failures))
        super().__init__(f"Failed to load: {names}")

    @property
    def unavailable(self) -> bool:
        """True when every failure was a transport failure"""
        return all(isinstance(exc, BackendUnavailableError) for exc in self.failures.values())

    @property
    def unauthorized(self) -> bool:
        """True when the backend rejected the access token for any request"""
        return any(
            isinstance(exc, BackendResponseError) and exc.status_code == 401
            for exc in self.failures.values()
        )
