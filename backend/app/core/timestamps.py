"""
Timestamp parsing and formatting.

Query parameters use one fixed format; source rows accept any ISO-8601 form.
Everything is stored and compared as naive UTC.
"""

from datetime import datetime, timezone
from typing import Optional

QUERY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_query_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a `YYYY-MM-DD HH:MM:SS` query parameter.

    Returns None for a missing or blank value.
    Raises ValueError for anything else that does not match the format.
    """
    if value is None or not value.strip():
        return None
    return datetime.strptime(value.strip(), QUERY_TIMESTAMP_FORMAT)


def parse_source_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp from the source file into naive UTC."""
    value = value.strip()
    # fromisoformat only accepts the "Z" suffix from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    return to_naive_utc(parsed)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    return value.strftime(QUERY_TIMESTAMP_FORMAT)
