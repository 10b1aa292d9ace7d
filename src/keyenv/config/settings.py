"""
Client settings resolution.

Combines constructor arguments, environment variables and defaults into a
ClientSettings instance. Constructor arguments always win; environment variables
are read once, when the client is constructed.
"""
import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from ..exceptions import KeyEnvConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api.keyenv.dev'
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_CACHE_TTL = 0

API_URL_ENV_VAR = 'KEYENV_API_URL'
CACHE_TTL_ENV_VAR = 'KEYENV_CACHE_TTL'


@dataclass(frozen=True)
class ClientSettings:
    """Resolved client configuration."""
    token: str
    timeout: int = DEFAULT_TIMEOUT_MS
    base_url: str = DEFAULT_BASE_URL
    cache_ttl: float = DEFAULT_CACHE_TTL

    def __repr__(self):
        # Keep the token out of reprs and logs
        return (f"ClientSettings(token='***', timeout={self.timeout}, "
                f"base_url={self.base_url!r}, cache_ttl={self.cache_ttl})")


def _cache_ttl_from_env(environ: Mapping[str, str]) -> float:
    """Read the cache TTL from the environment, disabling caching on bad values."""
    raw = environ.get(CACHE_TTL_ENV_VAR)
    if raw is None or not raw.strip():
        return DEFAULT_CACHE_TTL

    try:
        return float(raw.strip())
    except ValueError:
        logger.warning(f"Ignoring invalid {CACHE_TTL_ENV_VAR} value '{raw}'; export cache disabled")
        return DEFAULT_CACHE_TTL


def resolve_settings(token: Optional[str], timeout: Optional[int] = None,
                     base_url: Optional[str] = None, cache_ttl: Optional[float] = None,
                     environ: Optional[Mapping[str, str]] = None) -> ClientSettings:
    """Resolve client settings.

    Args:
        token: Service or user token (required, non-empty)
        timeout: Request timeout in milliseconds
        base_url: API base URL; falls back to KEYENV_API_URL, then the production host
        cache_ttl: Export cache TTL in seconds; falls back to KEYENV_CACHE_TTL, then 0
        environ: Environment mapping (defaults to os.environ)

    Returns:
        ClientSettings

    Raises:
        KeyEnvConfigError: If the token is missing or the timeout is not positive
    """
    if environ is None:
        environ = os.environ

    if not token:
        raise KeyEnvConfigError('KeyEnv token is required')

    if timeout is None:
        timeout = DEFAULT_TIMEOUT_MS
    elif timeout <= 0:
        raise KeyEnvConfigError(f"Timeout must be a positive number of milliseconds, got {timeout}")

    if not base_url:
        base_url = environ.get(API_URL_ENV_VAR) or DEFAULT_BASE_URL
    base_url = base_url.rstrip('/')

    if cache_ttl is None:
        cache_ttl = _cache_ttl_from_env(environ)

    settings = ClientSettings(token=token, timeout=timeout, base_url=base_url, cache_ttl=cache_ttl)
    logger.debug(f"Resolved {settings!r}")
    return settings
