"""Time Utilities - UTC timestamps and formatting

Timestamps are kept as naive UTC datetimes truncated to milliseconds,
which is what MongoDB stores and hands back.
"""
from datetime import datetime, timezone, timedelta
from typing import Tuple
from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Get current UTC datetime (naive, millisecond precision)"""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_naive_utc(dt: datetime) -> datetime:
    """Normalise an aware or naive datetime to naive UTC"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string

    Args:
        dt: Datetime object (naive values are treated as UTC)

    Returns:
        ISO formatted string with Z suffix, millisecond precision
    """
    dt = to_naive_utc(dt)
    return dt.isoformat(timespec="milliseconds") + "Z"


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 string to naive UTC datetime

    Raises:
        ValueError: If the string is not a valid ISO timestamp
    """
    dt = date_parser.isoparse(iso_string)
    return to_naive_utc(dt)


def add_minutes(dt: datetime, minutes: int) -> datetime:
    """Add minutes to datetime"""
    return dt + timedelta(minutes=minutes)


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative if end is earlier)"""
    return (end - start).total_seconds() / 60


def month_window(year: int, month_index: int) -> Tuple[datetime, datetime]:
    """
    UTC calendar month as a half-open interval [start, end)

    Args:
        year: Four digit year
        month_index: Zero-based month (0 = January)
    """
    start = datetime(year, month_index + 1, 1)
    if month_index == 11:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month_index + 2, 1)
    return start, end

