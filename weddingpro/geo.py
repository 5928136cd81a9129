"""
Location utilities for WeddingPro.

Great-circle distance between workers, venues and the organization's home
base. Used to rank interested employees and to compute travel pay.
"""

from math import radians, cos, sin, asin, sqrt

EARTH_RADIUS_MILES = 3958.8


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def haversine_miles(lat1, lng1, lat2, lng2):
    """Return the great-circle distance in miles between two points."""
    lat1, lng1, lat2, lng2 = map(radians, [float(lat1), float(lng1), float(lat2), float(lng2)])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * asin(sqrt(a))


def distance_between(origin, destination):
    """Distance in miles (one decimal) between two ``(lat, lng)`` pairs.

    Returns None when either location is unknown.
    """
    if origin is None or destination is None:
        return None
    return round(haversine_miles(origin[0], origin[1], destination[0], destination[1]), 1)


def worker_location(user):
    """Return the worker's ``(lat, lng)``.

    Falls back to the organization's home base when the worker has not
    registered a location, and to None when neither is known.
    """
    if user is None:
        return None
    own = _coords(user)
    if own is not None:
        return own
    return _coords(getattr(user, "organization", None))


def venue_location(venue):
    """Return the venue's ``(lat, lng)`` or None."""
    return _coords(venue)


def organization_location(org):
    """Return the organization's home-base ``(lat, lng)`` or None."""
    return _coords(org)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _coords(obj):
    if obj is None:
        return None
    lat = getattr(obj, "latitude", None)
    lng = getattr(obj, "longitude", None)
    if lat is None or lng is None:
        return None
    return float(lat), float(lng)
