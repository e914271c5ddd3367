"""Shared HTTP transport for the ordering backend API."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from bar_ordering_client.errors import (
    BackendResponseError,
    BackendUnauthorizedError,
    BackendUnavailableError,
)
from bar_ordering_client.repositories.credential_store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8090"
DEFAULT_TIMEOUT_SECONDS = 10.0


def path_segment(value: Any) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(str(value), safe="")


class BackendClient:
    """HTTP client for the ordering backend REST API.

    Every request carries a JSON content type and, unless the caller supplies
    its own ``Authorization`` header, the stored staff token as HTTP Basic
    credentials. A 401 response clears the stored session. Failures are raised
    as ``BackendError`` subclasses so the service layer can decide how to
    degrade.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        credential_store: CredentialStore | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend client.

        Args:
            base_url: Base URL of the backend (e.g., "http://localhost:8090")
            credential_store: Store holding the staff Basic-auth token
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.credential_store = credential_store
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    async def get(self, path: str, headers: dict[str, str] | None = None) -> Any:
        return await self.request("GET", path, headers=headers)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def get_bytes(self, path: str) -> bytes:
        content: bytes = await self.request("GET", path, binary=True)
        return content

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
        binary: bool = False,
    ) -> Any:
        """Send a request to the backend and decode the response.

        Args:
            method: HTTP method
            path: Path below ``/api`` (e.g., "order/all")
            json: Optional JSON body
            headers: Extra headers; an explicit Authorization header wins
            binary: Return the raw body instead of decoding JSON

        Returns:
            Decoded JSON body, the text of a non-JSON body, raw bytes when
            ``binary`` is set, or None for an empty body

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendUnauthorizedError: If the backend answers 401
            BackendResponseError: If the backend answers any other non-2xx status
        """
        url = self.url(path)
        request_headers = self._build_headers(headers)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.request(method, url, headers=request_headers, json=json)
        except httpx.RequestError as e:
            logger.error(f"Backend unreachable for {method} {path}: {e}")
            raise BackendUnavailableError(f"Could not reach the ordering service: {e}") from e

        if response.status_code == 401:
            logger.warning(f"Backend rejected credentials for {method} {path}")
            if self.credential_store is not None:
                self.credential_store.clear()
            raise BackendUnauthorizedError("Invalid username or password")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(response)
            logger.error(f"Backend returned {response.status_code} for {method} {path}: {detail}")
            message = detail or f"Ordering service returned HTTP {response.status_code}"
            raise BackendResponseError(message, status_code=response.status_code) from e

        if binary:
            return response.content

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            # Some write endpoints acknowledge with a plain-text message
            logger.debug(f"Non-JSON body for {method} {path}, returning text")
            return response.text

    def _build_headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if extra:
            headers.update(extra)

        if "Authorization" not in headers and self.credential_store is not None:
            token = self.credential_store.get_token()
            if token:
                headers["Authorization"] = f"Basic {token}"

        return headers


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()

    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or "")
    return ""
