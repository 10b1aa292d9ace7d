"""
Thread-safe in-memory TTL cache for exported secrets.

One ExportCache belongs to one KeyEnv instance. Entries are keyed by the exact
(project_id, environment) pair and hold the list returned by the export
endpoint together with its expiry time. Expired entries are dropped lazily on
read; there is no background sweep.

Every invalidation advances a generation counter. A fetch that started before
an invalidation carries the older generation and is not stored.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from .models import SecretWithValue

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]
Generation = Tuple[int, int, int]


def _copy_secrets(secrets: List[SecretWithValue]) -> List[SecretWithValue]:
    return [s.model_copy(deep=True) for s in secrets]


class ExportCache:
    """TTL cache for ``export_secrets`` results.

    A TTL of zero or less disables caching: ``get`` always misses and ``set`` is
    a no-op. Invalidation works regardless of the TTL.

    Examples:
        >>> cache = ExportCache(ttl=300)
        >>> generation = cache.generation("proj-1", "production")
        >>> cache.set("proj-1", "production", secrets, generation)
        >>> cache.get("proj-1", "production")  # cache hit
        >>> cache.invalidate("proj-1", "production")
        >>> cache.get("proj-1", "production")  # None
    """

    def __init__(self, ttl: float = 0, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            ttl: Time-to-live in seconds; <= 0 disables caching
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[List[SecretWithValue], float]] = {}
        self._epoch = 0
        self._project_generations: Dict[str, int] = {}
        self._pair_generations: Dict[CacheKey, int] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _generation(self, key: CacheKey) -> Generation:
        # Caller holds the lock
        return (self._epoch, self._project_generations.get(key[0], 0), self._pair_generations.get(key, 0))

    def generation(self, project_id: str, environment: str) -> Generation:
        """Current generation of a pair; read before fetching and pass it to ``set``."""
        with self._lock:
            return self._generation((project_id, environment))

    def get(self, project_id: str, environment: str) -> Optional[List[SecretWithValue]]:
        """Return a deep copy of the cached list, or None on a miss or expired entry."""
        if not self.enabled:
            return None

        key = (project_id, environment)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            secrets, expires_at = entry
            if expires_at > self._clock():
                logger.debug(f"Export cache hit for {project_id}/{environment}")
                return _copy_secrets(secrets)

            del self._entries[key]
            logger.debug(f"Export cache entry expired for {project_id}/{environment}")
            return None

    def set(self, project_id: str, environment: str, secrets: List[SecretWithValue],
            generation: Optional[Generation] = None) -> bool:
        """Store an export result with expiry = now + ttl.

        When ``generation`` is given and the pair has been invalidated since it
        was read, the result is discarded.

        Returns:
            True if the result was stored
        """
        if not self.enabled:
            return False

        key = (project_id, environment)
        with self._lock:
            if generation is not None and generation != self._generation(key):
                logger.debug(f"Discarding stale export for {project_id}/{environment}")
                return False
            self._entries[key] = (_copy_secrets(secrets), self._clock() + self._ttl)
            return True

    def invalidate(self, project_id: str, environment: str) -> None:
        """Drop the entry for one (project, environment) pair."""
        key = (project_id, environment)
        with self._lock:
            self._pair_generations[key] = self._pair_generations.get(key, 0) + 1
            if self._entries.pop(key, None) is not None:
                logger.debug(f"Invalidated export cache for {project_id}/{environment}")

    def invalidate_project(self, project_id: str) -> None:
        """Drop every entry belonging to a project."""
        with self._lock:
            self._project_generations[project_id] = self._project_generations.get(project_id, 0) + 1
            stale = [key for key in self._entries if key[0] == project_id]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} export cache entries for project {project_id}")

    def clear(self) -> None:
        with self._lock:
            self._epoch += 1
            self._entries.clear()

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet read."""
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries
