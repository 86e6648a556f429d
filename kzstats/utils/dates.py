"""
Date parsing utilities for query parameters.

All timestamps are handled as naive UTC, which is how the store keeps them.
"""

from datetime import datetime, timezone
from typing import Optional

from kzstats.utils.exceptions import InvalidIdentityError


EXPECTED_DATE = "an ISO-8601 timestamp such as 2023-01-31 or 2023-01-31T12:00:00Z"


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.

    Supported formats:
    - YYYY-MM-DD
    - YYYY-MM-DDTHH:MM:SS (optionally with fractional seconds)
    - any of the above with a `Z` or `+HH:MM` suffix

    Raises:
        InvalidIdentityError: If the text is not a timestamp
    """
    text = value.strip() if isinstance(value, str) else value
    if not text or not isinstance(text, str):
        raise InvalidIdentityError(value, EXPECTED_DATE)

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidIdentityError(value, EXPECTED_DATE)

    return to_naive_utc(parsed)


def to_naive_utc(value: datetime) -> datetime:
    """Drop timezone info after converting to UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as YYYY-MM-DDTHH:MM:SS."""
    if value is None:
        return None
    return to_naive_utc(value).strftime("%Y-%m-%dT%H:%M:%S")
