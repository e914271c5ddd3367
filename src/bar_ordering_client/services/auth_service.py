"""Staff session management over HTTP Basic credentials."""

import base64
import logging
from collections.abc import Callable

from bar_ordering_client.errors import BackendError
from bar_ordering_client.models.auth_models import StaffUser
from bar_ordering_client.repositories.credential_store import CredentialStore
from bar_ordering_client.services.backend_client import BackendClient

logger = logging.getLogger(__name__)

SessionListener = Callable[[StaffUser | None], None]


def encode_basic_token(username: str, password: str) -> str:
    """Base64 token for an HTTP Basic ``Authorization`` header."""
    return base64.b64encode(f"{username}:{password}".encode()).decode("ascii")


class StaffAuthService:
    """Holds the logged-in staff member for this terminal.

    The backend has no token endpoint: the Base64 of ``username:password`` is
    sent as Basic credentials on every staff call. Credentials are written to
    the store only after the backend accepts them, and a stored session is
    re-validated against ``/auth/me`` on startup.
    """

    def __init__(self, backend: BackendClient, credential_store: CredentialStore) -> None:
        """Initialize the auth service.

        Args:
            backend: Shared backend HTTP client
            credential_store: Persistent session store
        """
        self.backend = backend
        self.credential_store = credential_store
        self.user: StaffUser | None = None
        self.error: str | None = None
        self._listeners: list[SessionListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a callback for login/logout; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def login(self, username: str, password: str) -> StaffUser:
        """Log in a staff member.

        Args:
            username: Staff login name
            password: Staff password

        Returns:
            The authenticated staff profile

        Raises:
            BackendError: If the backend rejects the credentials or is unreachable
        """
        self.error = None
        token = encode_basic_token(username, password)

        try:
            data = await self.backend.get("auth/login", headers={"Authorization": f"Basic {token}"})
        except BackendError as e:
            self.error = str(e)
            logger.warning(f"Login failed for {username}: {e}")
            raise

        user = StaffUser.from_api_payload(data)
        self.credential_store.save(token, user)
        self._set_user(user)

        logger.info(f"Staff member {user.username} logged in")
        return user

    async def restore_session(self) -> StaffUser | None:
        """Load a stored session and verify it is still accepted.

        Returns:
            The verified staff profile, or None if there is no valid session
        """
        token = self.credential_store.get_token()
        stored_user = self.credential_store.get_user()

        if not token or stored_user is None:
            return None

        self._set_user(stored_user)

        try:
            data = await self.backend.get("auth/me", headers={"Authorization": f"Basic {token}"})
        except BackendError as e:
            logger.warning(f"Stored staff session rejected, clearing it: {e}")
            self.credential_store.clear()
            self._set_user(None)
            return None

        user = StaffUser.from_api_payload(data)
        self.credential_store.save_user(user)
        self._set_user(user)
        return user

    def logout(self) -> None:
        if self.user is not None:
            logger.info(f"Staff member {self.user.username} logged out")
        self.credential_store.clear()
        self._set_user(None)

    def _set_user(self, user: StaffUser | None) -> None:
        self.user = user
        for listener in list(self._listeners):
            listener(user)
