"""Utilities package"""
from .helpers import generate_uuid, utcnow, as_utc, parse_datetime, isoformat, safe_int

__all__ = [
    'generate_uuid',
    'utcnow',
    'as_utc',
    'parse_datetime',
    'isoformat',
    'safe_int',
]
