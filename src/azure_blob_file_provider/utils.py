"""Utility functions for azure-blob-file-provider."""

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_timestamp(dt: datetime) -> str:
    """Format a timestamp for display in UTC.

    Examples:
        datetime(2025, 8, 26, 2, 51, 17, 317839, tzinfo=utc) -> "2025-08-26 02:51:17"
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def to_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def mtime_ns_to_datetime(mtime_ns: int) -> datetime:
    """Convert a stat() nanosecond mtime to a UTC datetime.

    Integer arithmetic keeps the value exact to the microsecond, so a
    timestamp written with datetime_to_ns() reads back unchanged.
    """
    return EPOCH + timedelta(microseconds=mtime_ns // 1000)


def datetime_to_ns(dt: datetime) -> int:
    """Convert a datetime to integer nanoseconds since the epoch."""
    return (to_utc(dt) - EPOCH) // timedelta(microseconds=1) * 1000
