"""
Root pytest configuration for the KeyEnv client tests.
"""

import pytest

from keyenv.config.logging import bootstrap_logging

# Auto-bootstrap logging for all tests
bootstrap_logging()


@pytest.fixture(autouse=True)
def isolated_keyenv_environment(monkeypatch):
    """Keep developer KEYENV_* settings from leaking into tests.

    Live integration tests read their settings at import time, before this runs.
    """
    monkeypatch.delenv('KEYENV_API_URL', raising=False)
    monkeypatch.delenv('KEYENV_CACHE_TTL', raising=False)
    yield
