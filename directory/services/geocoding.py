"""
Best-effort geocoding through OpenStreetMap Nominatim.

Both lookups return None instead of raising: a failed or disabled
lookup must never block a registration.  Answers (including misses)
are cached so repeated addresses do not hit the public service again.
An unreachable cache only costs the cached answer, never the lookup.
"""
import hashlib
import logging
from typing import Optional, Tuple

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

_MISS = '__miss__'


def _cache_key(kind: str, value: str) -> str:
    return f"geocode:{kind}:{hashlib.sha1(value.encode('utf-8')).hexdigest()}"


def _cache_get(key: str):
    try:
        return cache.get(key)
    except Exception as e:
        logger.warning('Geocoding cache read failed: %s', e)
        return None


def _cache_set(key: str, value) -> None:
    try:
        cache.set(key, value, settings.GEOCODING_CACHE_SECONDS)
    except Exception as e:
        logger.warning('Geocoding cache write failed: %s', e)


def _get(path: str, params: dict):
    r = requests.get(
        f"{settings.GEOCODING_BASE_URL.rstrip('/')}/{path}",
        params={**params, 'format': 'json'},
        headers={'User-Agent': settings.GEOCODING_USER_AGENT},
        timeout=settings.GEOCODING_TIMEOUT,
    )
    r.raise_for_status()
    return r.json()


def forward(street: str = '', city: str = '', postcode: str = '') -> Optional[Tuple[float, float]]:
    """Return ``(lat, lng)`` for a text address, or None."""
    if not settings.GEOCODING_ENABLE:
        return None
    address = ', '.join(p.strip() for p in (street, city, postcode) if p and p.strip())
    if not address:
        return None

    key = _cache_key('fwd', address.lower())
    cached = _cache_get(key)
    if cached is not None:
        return None if cached == _MISS else tuple(cached)

    try:
        results = _get('search', {'q': address, 'limit': 1})
        point = (float(results[0]['lat']), float(results[0]['lon'])) if results else None
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning('Geocoding failed for %r: %s', address, e)
        return None

    if point is None:
        logger.warning('No geocoding result for %r', address)
    _cache_set(key, list(point) if point else _MISS)
    return point


def reverse(lat: float, lng: float) -> Optional[str]:
    """Return the city name for a coordinate, or None."""
    if not settings.GEOCODING_ENABLE:
        return None

    key = _cache_key('rev', f'{lat:.5f},{lng:.5f}')
    cached = _cache_get(key)
    if cached is not None:
        return None if cached == _MISS else cached

    try:
        result = _get('reverse', {'lat': lat, 'lon': lng})
        address = (result or {}).get('address') or {}
        city = (
            address.get('city')
            or address.get('town')
            or address.get('village')
            or address.get('municipality')
            or address.get('county')
        )
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning('Reverse geocoding failed for (%s, %s): %s', lat, lng, e)
        return None

    _cache_set(key, city or _MISS)
    return city or None
