"""
Remote HTTP API client using requests library.

Used by KeyEnv for all calls against a real API server.
"""
import logging
from typing import Any, Dict, Optional

import requests

from ..exceptions import KeyEnvError
from .base_client import APIClient, DEFAULT_TIMEOUT_MS
from .response import APIResponse

logger = logging.getLogger(__name__)


class RemoteAPIClient(APIClient):
    """HTTP transport backed by a requests Session.

    Connection reuse is left to the session; no retries are configured.

    The timeout is handed to requests as a single value, so it bounds the
    connect and each socket read separately rather than the whole exchange.
    A server that keeps trickling bytes can hold a request past it.
    """

    def __init__(self, base_url: str, token: str, timeout: int = DEFAULT_TIMEOUT_MS,
                 session: Optional[requests.Session] = None):
        """Initialize with base URL for remote API.

        Args:
            base_url: Base URL for the remote API (e.g., https://api.keyenv.dev)
            token: Bearer token
            timeout: Connect and per-read timeout in milliseconds
            session: Optional pre-configured session (e.g., custom CA bundle)
        """
        super().__init__(base_url, token, timeout)
        self.session = session or requests.Session()

    def _send(self, method: str, url: str, headers: Dict[str, str],
              body: Optional[Any] = None) -> APIResponse:
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=self.timeout / 1000.0,
            )
        except requests.Timeout as e:
            raise KeyEnvError('Request timeout', 408) from e
        except requests.RequestException as e:
            raise KeyEnvError(str(e) or type(e).__name__, 0) from e

        return APIResponse(
            status_code=response.status_code,
            reason=response.reason or '',
            text=response.text,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
