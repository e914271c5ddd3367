"""Persistent storage for the staff session.

The staff session is two values under fixed keys: the Base64 Basic-auth token
(``authToken``) and the last known user profile (``user``). They are kept in a
small JSON file so a terminal restart keeps the waiter logged in. Without a
path the store lives in memory only.

Following the repository pattern used elsewhere in the package, read failures
return None rather than raising.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bar_ordering_client.models.auth_models import StaffUser

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "authToken"
USER_KEY = "user"


class CredentialStore:
    """Key-value store for the persisted staff session."""

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize the store.

        Args:
            path: JSON file backing the store; None keeps values in memory
        """
        self.path = Path(path) if path is not None else None
        self._values: dict[str, Any] = self._load()

    def get_token(self) -> str | None:
        token = self._values.get(AUTH_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def get_user(self) -> StaffUser | None:
        """Return the stored user profile.

        A stored profile that no longer parses is treated as a corrupt session
        and the whole store is cleared.

        Returns:
            StaffUser if a valid profile is stored, None otherwise
        """
        data = self._values.get(USER_KEY)
        if data is None:
            return None

        try:
            return StaffUser.from_api_payload(data)
        except (KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable stored staff profile: {e}")
            self.clear()
            return None

    def save(self, token: str, user: StaffUser) -> None:
        self._values = {AUTH_TOKEN_KEY: token, USER_KEY: user.to_storage()}
        self._flush()

    def save_user(self, user: StaffUser) -> None:
        self._values[USER_KEY] = user.to_storage()
        self._flush()

    def clear(self) -> None:
        self._values = {}
        self._flush()

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        if self.path is None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values), encoding="utf-8")
