"""
Listing and proximity search over donors, hospitals and ambulance owners.

Three modes, picked from the validated query:

* point mode (latitude and longitude given): entities with a stored
  location within ``maxDistance`` metres, nearest first, each annotated
  with ``distance``;
* text mode: case-insensitive substring filters on city, postcode and
  street, sorted by display name;
* unfiltered: the whole default scope, sorted by display name.

Distances are computed in Python with the haversine formula, so the
search works on any database backend.
"""
from __future__ import annotations

import logging

from django.db.models import Prefetch
from django.db.models.functions import Lower

from directory.geo import distance, format_distance
from directory.models import AmbulanceVehicle
from directory.serializers.search import SearchQuerySerializer
from directory.services.registry import format_registrant, kind_spec
from directory.services.vehicles import format_vehicle
from directory.validation import gate

logger = logging.getLogger(__name__)

# Hospitals and ambulance owners are only listed while active; donors
# are always listed and may be filtered with ``isActive``.
DEFAULT_SCOPE = {
    'donor': {},
    'hospital': {'is_active': True},
    'ambulance': {'is_active': True},
}

TEXT_FIELDS = ('city', 'postcode', 'street')


def _base_queryset(kind: str, data: dict):
    model = kind_spec(kind)['model']
    qs = model.objects.filter(**DEFAULT_SCOPE[kind])
    if kind == 'donor':
        if data['bloodGroup']:
            qs = qs.filter(blood_group=data['bloodGroup'])
        if data.get('isActive') is not None:
            qs = qs.filter(is_active=data['isActive'])
    elif data.get('verified') is not None:
        qs = qs.filter(is_verified=data['verified'])
    if kind == 'ambulance':
        qs = qs.prefetch_related(Prefetch(
            'vehicles',
            queryset=AmbulanceVehicle.objects.filter(is_active=True).order_by('-created_at'),
            to_attr='active_vehicles',
        ))
    return qs


def search(kind: str, query) -> list:
    data = gate(SearchQuerySerializer, query)
    qs = _base_queryset(kind, data)

    if data.get('latitude') is not None:
        origin = (data['latitude'], data['longitude'])
        radius = data['maxDistance']
        results = []
        for obj in qs.filter(location__isnull=False):
            point = obj.point
            if point is None:
                continue
            meters = distance(origin, point)
            if meters <= radius:
                obj.distance = meters
                results.append(obj)
        results.sort(key=lambda o: (o.distance, o.display_name.lower()))
        logger.debug('%s point search at %s within %sm: %d hits', kind, origin, radius, len(results))
        return results

    for field in TEXT_FIELDS:
        if data[field]:
            qs = qs.filter(**{f'{field}__icontains': data[field]})
    return list(qs.order_by(Lower(qs.model.display_field), 'pk'))


def format_result(obj) -> dict:
    data = format_registrant(obj)
    meters = getattr(obj, 'distance', None)
    if meters is not None:
        data['distance'] = round(meters, 1)
        data['distanceText'] = format_distance(meters)
    vehicles = getattr(obj, 'active_vehicles', None)
    if vehicles is not None:
        data['vehicles'] = [format_vehicle(v) for v in vehicles]
        data['totalVehicles'] = len(vehicles)
        data['availableVehicles'] = sum(1 for v in vehicles if v.is_available)
    return data
