"""
Environment writers used by KeyEnv.load_env.

Abstracts the process environment so exported secrets can be loaded into
os.environ in production and into a plain dict in isolation.
"""

import os
from abc import ABC, abstractmethod
from typing import Dict, MutableMapping, Optional


class EnvironmentWriter(ABC):
    """Abstract destination for environment variables."""

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        """Set a variable, overwriting any existing value."""
        pass

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Get a variable, or None if unset."""
        pass


class ProcessEnvironmentWriter(EnvironmentWriter):
    """Writes to the process environment (os.environ)."""

    def set(self, name: str, value: str) -> None:
        os.environ[name] = value

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name)


class DictEnvironmentWriter(EnvironmentWriter):
    """Writes to a caller-supplied mapping instead of the process environment."""

    def __init__(self, target: Optional[MutableMapping[str, str]] = None):
        self.values: MutableMapping[str, str] = target if target is not None else {}

    def set(self, name: str, value: str) -> None:
        self.values[name] = value

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.values)
