"""
Rendering of .env documents from exported secrets.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import SecretWithValue

# Characters that force a value to be double-quoted
_QUOTE_TRIGGERS = (' ', '"', "'", '\n', '$')


def format_env_value(value: str) -> str:
    """Format a value for a .env line.

    Plain values are emitted as-is. Values containing a space, a quote, a newline
    or ``$`` are double-quoted with backslashes, double quotes, newlines and
    dollar signs escaped so shells and dotenv loaders do not reinterpret them.
    """
    if not any(ch in value for ch in _QUOTE_TRIGGERS):
        return value

    escaped = (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('$', '\\$')
    )
    return f'"{escaped}"'


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def render_env_file(environment: str, secrets: Iterable[SecretWithValue],
                    generated_at: Optional[datetime] = None) -> str:
    """Render a .env document.

    Args:
        environment: Environment name written to the header
        secrets: Secrets in the order they should appear
        generated_at: Timestamp for the header (defaults to now)

    Returns:
        Newline-joined document ending with a trailing newline
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    lines = [
        '# Generated by KeyEnv',
        f'# Environment: {environment}',
        f'# Generated at: {format_timestamp(generated_at)}',
        '',
    ]
    for secret in secrets:
        lines.append(f'{secret.key}={format_env_value(secret.value)}')

    return '\n'.join(lines) + '\n'
