"""Timestamp utilities (UTC with timezone)."""

from datetime import datetime, timezone


def truncate_to_hour(ts: int) -> datetime:
    """Truncate unix timestamp to start of hour (floor). Returns timezone-aware UTC."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.replace(minute=0, second=0, microsecond=0)
