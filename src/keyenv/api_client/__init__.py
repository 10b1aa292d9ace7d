"""
API client package.

Request pipeline shared by the remote (HTTP) and in-memory transports.
"""

from .base_client import APIClient, USER_AGENT, DEFAULT_TIMEOUT_MS
from .in_memory_client import InMemoryAPIClient
from .remote_client import RemoteAPIClient
from .response import APIResponse

__all__ = [
    'APIClient',
    'InMemoryAPIClient',
    'RemoteAPIClient',
    'APIResponse',
    'USER_AGENT',
    'DEFAULT_TIMEOUT_MS',
]
