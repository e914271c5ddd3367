"""Exceptions raised by the backend HTTP layer.

The HTTP wrappers raise these; the service layer turns them into result
objects or degraded read state, so views never see raw httpx exceptions.
"""


class BackendError(Exception):
    """Base class for failures talking to the ordering backend."""


class BackendUnavailableError(BackendError):
    """The backend could not be reached (timeout, DNS, connection refused)."""


class BackendUnauthorizedError(BackendError):
    """The backend rejected the stored credentials with a 401."""


class BackendResponseError(BackendError):
    """The backend answered with a non-2xx status other than 401."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code
