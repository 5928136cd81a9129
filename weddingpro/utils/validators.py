"""
Validation utilities
"""
from weddingpro.errors import ValidationError
from weddingpro.utils.helpers import parse_datetime


def require_fields(data, fields):
    """
    Ensure every named field is present and non-blank in a request payload

    Args:
        data (dict): Parsed JSON body (may be None)
        fields (list): Required field names

    Raises:
        ValidationError: naming the missing fields
    """
    data = data or {}
    missing = [f for f in fields if data.get(f) in (None, '') or
               (isinstance(data.get(f), str) and not data[f].strip())]
    if missing:
        raise ValidationError(f'Missing required field(s): {", ".join(missing)}')
    return data


def validate_time_window(start_value, end_value):
    """
    Parse and validate a job's [start, end) window

    Args:
        start_value: ISO-8601 string or datetime
        end_value: ISO-8601 string or datetime

    Returns:
        tuple: (start, end) as aware UTC datetimes

    Raises:
        ValidationError: if either bound is unparsable or end <= start
    """
    start = parse_datetime(start_value)
    end = parse_datetime(end_value)
    if start is None or end is None:
        raise ValidationError('start_time and end_time must be ISO-8601 timestamps')
    if end <= start:
        raise ValidationError('end_time must be after start_time')
    return start, end


def validate_coordinates(lat, lng):
    """
    Validate an optional latitude/longitude pair

    Returns:
        tuple: (lat, lng) as floats, or (None, None) when both are missing
    """
    if lat is None and lng is None:
        return None, None
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        raise ValidationError('latitude and longitude must both be numbers')
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError('latitude/longitude out of range')
    return lat, lng
