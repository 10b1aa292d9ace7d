"""
Client configuration.

Settings resolution from constructor arguments and environment variables, and
logging bootstrap for entry points.
"""

from .settings import (
    ClientSettings,
    resolve_settings,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_CACHE_TTL,
    API_URL_ENV_VAR,
    CACHE_TTL_ENV_VAR,
)
from .logging import bootstrap_logging

__all__ = [
    'ClientSettings',
    'resolve_settings',
    'DEFAULT_BASE_URL',
    'DEFAULT_TIMEOUT_MS',
    'DEFAULT_CACHE_TTL',
    'API_URL_ENV_VAR',
    'CACHE_TTL_ENV_VAR',
    'bootstrap_logging',
]
