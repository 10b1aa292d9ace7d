"""
In-memory API client wrapping a FastAPI/Starlette TestClient.

Lets the full KeyEnv client run against an in-process ASGI app without a network.
"""
from typing import Any, Dict, Optional

from ..exceptions import KeyEnvError
from .base_client import APIClient, DEFAULT_TIMEOUT_MS
from .response import APIResponse


class InMemoryAPIClient(APIClient):
    """Transport that routes requests through an in-process test client.

    The timeout is accepted for interface parity but not enforced; the
    in-process app answers synchronously.
    """

    def __init__(self, test_client, token: str, base_url: str = 'http://testserver',
                 timeout: int = DEFAULT_TIMEOUT_MS):
        """Initialize with a test client.

        Args:
            test_client: FastAPI TestClient (or anything exposing
                ``request(method, url, headers=..., json=...)``)
            token: Bearer token
            base_url: Base URL the test client serves
            timeout: Request timeout in milliseconds
        """
        super().__init__(base_url, token, timeout)
        self.test_client = test_client

    def _send(self, method: str, url: str, headers: Dict[str, str],
              body: Optional[Any] = None) -> APIResponse:
        try:
            response = self.test_client.request(method, url, headers=headers, json=body)
        except ConnectionError as e:
            raise KeyEnvError(str(e), 0) from e

        return APIResponse(
            status_code=response.status_code,
            reason=getattr(response, 'reason_phrase', '') or '',
            text=response.text,
            headers=dict(response.headers),
        )
