"""
Exception classes for the KeyEnv client.
"""
from typing import Any, Dict, Optional


class KeyEnvError(Exception):
    """Raised for every failed call against the KeyEnv API.

    Attributes:
        message: Human-readable message (the ``error`` field of the response body,
            or the HTTP reason phrase when the body is unusable)
        status: HTTP status code, 0 for transport failures, 408 for client-side timeouts
        code: Optional machine-readable error category from the response body
        details: Optional structured details from the response body
    """

    def __init__(self, message: str, status: int, code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __repr__(self):
        return f"KeyEnvError(message={self.message!r}, status={self.status}, code={self.code!r})"


class KeyEnvConfigError(ValueError):
    """Raised when the client is constructed with invalid settings."""
    pass
