"""
Base API client for the KeyEnv request pipeline.

Builds requests, maps HTTP status codes to results or KeyEnvError, and leaves the
actual network exchange to a transport subclass.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..config.settings import DEFAULT_TIMEOUT_MS
from ..exceptions import KeyEnvError
from .response import APIResponse

logger = logging.getLogger(__name__)

USER_AGENT = 'keyenv-python/0.1.0'


class APIClient(ABC):
    """Abstract base class for KeyEnv API transports.

    Subclasses implement ``_send``; everything else (headers, status mapping,
    error normalization, body decoding) lives here so every transport behaves
    the same way.
    """

    def __init__(self, base_url: str, token: str, timeout: int = DEFAULT_TIMEOUT_MS):
        """Initialize the client.

        Args:
            base_url: Base URL of the API (e.g., https://api.keyenv.dev)
            token: Bearer token sent with every request
            timeout: Request timeout in milliseconds
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout

    @property
    def headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self.token}',
            'Content-Type': 'application/json',
            'User-Agent': USER_AGENT,
        }

    @abstractmethod
    def _send(self, method: str, url: str, headers: Dict[str, str],
              body: Optional[Any] = None) -> APIResponse:
        """Perform one network exchange.

        Implementations raise KeyEnvError with status 408 on timeout and status 0
        on any other transport-level failure.
        """
        pass

    def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        """Issue one request and return the decoded body.

        Args:
            method: HTTP method
            path: Path relative to the base URL (e.g., /api/v1/users/me)
            body: Optional JSON-serializable request body

        Returns:
            Decoded JSON body, or None for a 204 response

        Raises:
            KeyEnvError: On any non-2xx status, timeout or transport failure
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {path}")

        response = self._send(method, url, self.headers, body)
        logger.debug(f"{method} {path} -> {response.status_code}")

        if not response.ok:
            raise self._error_from_response(response)

        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise KeyEnvError(f"Invalid JSON in response: {e}", 0) from e

    def get(self, path: str) -> Any:
        return self.request('GET', path)

    def post(self, path: str, body: Optional[Any] = None) -> Any:
        return self.request('POST', path, body)

    def put(self, path: str, body: Optional[Any] = None) -> Any:
        return self.request('PUT', path, body)

    def delete(self, path: str) -> Any:
        return self.request('DELETE', path)

    @staticmethod
    def _error_from_response(response: APIResponse) -> KeyEnvError:
        """Build a KeyEnvError from a failed response.

        Uses the ``error``, ``code`` and ``details`` fields of a JSON error body.
        Falls back to the HTTP reason phrase when the body cannot be used.
        """
        fallback = response.reason or f"HTTP {response.status_code}"
        try:
            data = response.json()
        except ValueError:
            return KeyEnvError(fallback, response.status_code)

        if not isinstance(data, dict):
            return KeyEnvError(fallback, response.status_code)

        message = data.get('error')
        if not isinstance(message, str) or not message:
            message = fallback
        details = data.get('details')
        return KeyEnvError(
            message,
            response.status_code,
            code=data.get('code'),
            details=details if isinstance(details, dict) else None,
        )
