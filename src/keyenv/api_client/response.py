"""
Transport-neutral HTTP response wrapper.

Provides a consistent interface regardless of underlying HTTP library.
"""
import json as jsonlib
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class APIResponse:
    """Unified response wrapper for both in-memory and HTTP transports."""
    status_code: int
    reason: str = ''
    text: str = ''
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is empty or not valid JSON
        """
        return jsonlib.loads(self.text)
