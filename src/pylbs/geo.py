"""Great-circle helpers."""

from __future__ import annotations

import math

from pylbs._constants import EARTH_RADIUS_M


def haversine(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    *,
    radius: float = EARTH_RADIUS_M,
) -> float:
    """Return the great-circle distance in metres between two points in degrees.

    ``sqrt(a)`` is clamped to 1 before ``asin`` so floating point overshoot
    near antipodal points cannot produce a domain error.
    """
    d_lat = math.radians(lat2 - lat1) / 2.0
    d_lon = math.radians(lon2 - lon1) / 2.0
    a = math.sin(d_lat) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon) ** 2
    c = 2.0 * math.asin(min(1.0, math.sqrt(a)))
    return radius * c
