"""
Helper utilities
"""
import uuid
from datetime import datetime, timezone


def generate_uuid():
    """
    Generate a unique UUID

    Returns:
        str: UUID string
    """
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(dt):
    """
    Normalize a datetime to an aware UTC datetime

    Naive values are read as UTC (SQLite drops tzinfo on the way back).

    Args:
        dt: datetime or None

    Returns:
        datetime: Aware UTC datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value):
    """
    Parse an ISO-8601 string (or datetime) into an aware UTC datetime

    Args:
        value: str, datetime or None

    Returns:
        datetime: Aware UTC datetime or None if missing/invalid
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def isoformat(dt):
    """Render a datetime as an ISO-8601 UTC string (None passes through)"""
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def safe_int(value, default=0):
    """
    Safely convert value to int

    Args:
        value: Value to convert
        default (int): Default value if conversion fails

    Returns:
        int: Converted value or default
    """
    try:
        return int(value)
    except (ValueError, TypeError):
        return default
