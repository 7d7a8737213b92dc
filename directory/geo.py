"""
Great-circle distance helpers.

Points are ``(lat, lng)`` tuples in decimal degrees.  Locations are
persisted as GeoJSON points, ``{'type': 'Point', 'coordinates': [lng, lat]}``,
longitude first.
"""
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from .exceptions import ValidationError

EARTH_RADIUS_M = 6371000

Point = Tuple[float, float]


def distance(a: Point, b: Point) -> float:
    """Haversine distance in meters between two ``(lat, lng)`` points."""
    lat1, lng1, lat2, lng2 = map(math.radians, [a[0], a[1], b[0], b[1]])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def format_distance(meters: float) -> str:
    """Render ``meters`` as ``'850 m'`` below one kilometre, else ``'12.3 km'``."""
    if meters < 1000:
        m = Decimal(str(meters)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        if m < 1000:
            return f'{m} m'
    km = (Decimal(str(meters)) / 1000).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
    return f'{km} km'


def validate_point(lat, lng) -> Point:
    """Coerce ``lat``/``lng`` to floats or raise ``ValidationError``."""
    try:
        lat_f = float(lat)
    except (TypeError, ValueError):
        raise ValidationError('Latitude must be a number', field='latitude')
    try:
        lng_f = float(lng)
    except (TypeError, ValueError):
        raise ValidationError('Longitude must be a number', field='longitude')
    if not math.isfinite(lat_f) or not -90 <= lat_f <= 90:
        raise ValidationError('Latitude must be between -90 and 90', field='latitude')
    if not math.isfinite(lng_f) or not -180 <= lng_f <= 180:
        raise ValidationError('Longitude must be between -180 and 180', field='longitude')
    return lat_f, lng_f


def geojson_point(lat: float, lng: float) -> dict:
    lat, lng = validate_point(lat, lng)
    return {'type': 'Point', 'coordinates': [lng, lat]}


def point_from_geojson(location: Optional[dict]) -> Optional[Point]:
    """Return ``(lat, lng)`` for a stored location, or None if absent or malformed."""
    if not location:
        return None
    coords = location.get('coordinates')
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    try:
        lng, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng
