"""Time Utilities - UTC timestamps, date/time splitting and comparison"""
from datetime import datetime, timezone
from typing import Optional, Tuple
from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string

    Args:
        dt: Datetime object

    Returns:
        ISO formatted string with Z suffix for UTC
    """
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 string to datetime

    Args:
        iso_string: ISO formatted datetime string

    Returns:
        Datetime object in UTC
    """
    dt = date_parser.isoparse(iso_string)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(date_string: str) -> datetime:
    """Parse a calendar date (YYYY-MM-DD) as midnight UTC"""
    return datetime.combine(
        date_parser.isoparse(date_string).date(),
        datetime.min.time(),
        tzinfo=timezone.utc
    )


def compare_dates(a: datetime, b: datetime, descending: bool = False) -> int:
    """
    Three-way comparison of two datetimes

    Returns:
        Negative if a sorts first, positive if b sorts first, zero if equal
    """
    result = (a > b) - (a < b)
    return -result if descending else result


def to_date_string(dt: Optional[datetime]) -> Optional[str]:
    """Datetime into "YYYY-MM-DD" (UTC)"""
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d")


def to_time_string(dt: Optional[datetime]) -> Optional[str]:
    """Datetime into "HH:MM:SS.mmmZ" (UTC)"""
    if dt is None:
        return None
    dt = dt.astimezone(timezone.utc)
    return f"{dt.strftime('%H:%M:%S')}.{dt.microsecond // 1000:03d}Z"


def split_date_time(dt: datetime) -> Tuple[str, str]:
    """
    Split a timestamp into the separate date and time strings stored on permits

    Examples:
        >>> split_date_time(parse_iso("2024-03-01T12:00:00Z"))
        ('2024-03-01', '12:00:00.000Z')
    """
    return to_date_string(dt), to_time_string(dt)


def combine_date_time(date: Optional[str], time: Optional[str] = None) -> Optional[datetime]:
    """
    Rebuild a UTC datetime from split date and time strings

    A missing time is read as midnight UTC.
    """
    if not date:
        return None
    if not time:
        return parse_date(date)
    return parse_iso(f"{date}T{time}")
