"""
Logging bootstrap for applications and tests using the KeyEnv client.

The client itself only emits records through module-level loggers under the
``keyenv`` namespace. This module gives entry points one call that configures
handlers consistently, using Python's native INI format when a logging.ini is
available.
"""

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV_VAR = 'KEYENV_LOG_LEVEL'
VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
DEFAULT_FORMAT = '%(levelname)s: %(name)s: %(message)s'

_bootstrapped = False


def _find_logging_config() -> Optional[Path]:
    """
    Find the logging configuration file.

    Looks for logging.ini in the current working directory, then config/.

    Returns:
        Path to logging configuration file, or None if not found.
    """
    for candidate in (Path('logging.ini'), Path('config/logging.ini')):
        if candidate.exists():
            return candidate
    return None


def _level_from_env() -> Optional[str]:
    """Return the validated KEYENV_LOG_LEVEL value, or None if unset or invalid."""
    raw = os.environ.get(LOG_LEVEL_ENV_VAR)
    if not raw or not raw.strip():
        return None

    level = raw.strip().upper()
    if level not in VALID_LEVELS:
        print(f"Warning: Invalid {LOG_LEVEL_ENV_VAR} '{level}', ignoring", file=sys.stderr)
        return None
    return level


def bootstrap_logging(config_path: Optional[Path] = None, force: bool = False) -> None:
    """
    Bootstrap logging configuration.

    This function:
    1. Loads logging.ini via logging.config.fileConfig() when one is found
    2. Falls back to logging.basicConfig() otherwise (or if the INI file is invalid)
    3. Applies the KEYENV_LOG_LEVEL override to the ``keyenv`` logger

    Repeated calls are no-ops unless ``force`` is set.

    Args:
        config_path: Explicit logging.ini path (defaults to discovery)
        force: Re-run configuration even if already bootstrapped
    """
    global _bootstrapped
    if _bootstrapped and not force:
        return

    if config_path is None:
        config_path = _find_logging_config()

    if config_path is None:
        logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT, stream=sys.stderr)
    else:
        try:
            logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
        except Exception as e:
            print(f"Warning: Failed to load logging config from {config_path}: {e}", file=sys.stderr)
            logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT, stream=sys.stderr)

    env_level = _level_from_env()
    if env_level:
        logging.getLogger('keyenv').setLevel(getattr(logging, env_level))

    _bootstrapped = True
    logging.getLogger(__name__).debug(
        f"Logging configured from {config_path}" if config_path else "Logging configured with defaults"
    )

