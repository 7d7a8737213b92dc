"""
Vehicles run by ambulance owners.

Vehicles are soft-deleted (``is_active=False``) and their registration
numbers are unique across all owners.  The three documents of a new
vehicle are uploaded all-or-nothing before the row is written.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from directory.exceptions import DuplicateVehicleNumber, NotFound, UploadFailed
from directory.models import AmbulanceOwner, AmbulanceVehicle
from directory.serializers.vehicles import (
    VehicleAvailabilitySerializer,
    VehicleCreateSerializer,
    VehicleUpdateSerializer,
)
from directory.services import uploads
from directory.validation import gate, parse_uuid

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = 'ambulance-vehicles'

# request field, model attribute, upload sub-folder
DOCUMENTS = (
    ('registrationPaper', 'registration_paper', 'registration'),
    ('driverLicense', 'driver_license', 'license'),
    ('fitnessPaper', 'fitness_paper', 'fitness'),
)

FIELD_MAP = {
    'vehicleNumber': 'vehicle_number',
    'model': 'model',
    'year': 'year',
    'driverName': 'driver_name',
    'driverPhone': 'driver_phone',
    'isAvailable': 'is_available',
}


def format_vehicle(v: AmbulanceVehicle) -> dict:
    return {
        'id': str(v.pk),
        'ownerId': str(v.owner_id),
        'vehicleNumber': v.vehicle_number,
        'model': v.model,
        'year': v.year,
        'driverName': v.driver_name,
        'driverPhone': v.driver_phone,
        'registrationPaper': v.registration_paper,
        'driverLicense': v.driver_license,
        'fitnessPaper': v.fitness_paper,
        'isActive': v.is_active,
        'isAvailable': v.is_available,
        'createdAt': v.created_at.isoformat() if v.created_at else None,
        'updatedAt': v.updated_at.isoformat() if v.updated_at else None,
    }


def _number_taken(number: str, exclude=None) -> bool:
    qs = AmbulanceVehicle.objects.filter(vehicle_number__iexact=number)
    if exclude is not None:
        qs = qs.exclude(pk=exclude)
    return qs.exists()


def _upload_documents(data: dict) -> dict:
    urls = {}
    try:
        for key, attr, sub in DOCUMENTS:
            urls[attr] = uploads.upload(data[key], f'{UPLOAD_FOLDER}/{sub}')
    except UploadFailed:
        for url in urls.values():
            uploads.discard(url)
        raise
    return urls


def add_vehicle(payload) -> AmbulanceVehicle:
    data = gate(VehicleCreateSerializer, payload)
    owner_id = parse_uuid(data['ownerId'], 'owner id')
    if not AmbulanceOwner.objects.filter(pk=owner_id).exists():
        raise NotFound('Ambulance owner not found')
    if _number_taken(data['vehicleNumber']):
        raise DuplicateVehicleNumber()

    urls = _upload_documents(data)
    try:
        with transaction.atomic():
            vehicle = AmbulanceVehicle.objects.create(
                owner_id=owner_id,
                vehicle_number=data['vehicleNumber'],
                model=data['model'],
                year=data['year'],
                driver_name=data['driverName'],
                driver_phone=data['driverPhone'],
                **urls,
            )
    except IntegrityError:
        for url in urls.values():
            uploads.discard(url)
        raise DuplicateVehicleNumber()
    except Exception:
        for url in urls.values():
            uploads.discard(url)
        raise
    logger.info('Vehicle %s added for owner %s', vehicle.vehicle_number, owner_id)
    return vehicle


def list_by_owner(owner_id, active_only: bool = True) -> list[AmbulanceVehicle]:
    """Vehicles of one owner, newest first."""
    owner_id = parse_uuid(owner_id, 'owner id')
    if not AmbulanceOwner.objects.filter(pk=owner_id).exists():
        raise NotFound('Ambulance owner not found')
    qs = AmbulanceVehicle.objects.filter(owner_id=owner_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return list(qs.order_by('-created_at', '-pk'))


def get_vehicle(pk) -> AmbulanceVehicle:
    vehicle = AmbulanceVehicle.objects.filter(pk=parse_uuid(pk, 'vehicle id')).first()
    if vehicle is None:
        raise NotFound('Vehicle not found')
    return vehicle


def update_vehicle(pk, patch) -> AmbulanceVehicle:
    vehicle = get_vehicle(pk)
    data = gate(VehicleUpdateSerializer, patch, partial=True)
    if not data:
        return vehicle
    if 'vehicleNumber' in data and _number_taken(data['vehicleNumber'], exclude=vehicle.pk):
        raise DuplicateVehicleNumber()

    changed = []
    for key, value in data.items():
        setattr(vehicle, FIELD_MAP[key], value)
        changed.append(FIELD_MAP[key])
    try:
        with transaction.atomic():
            vehicle.save(update_fields=changed + ['updated_at'])
    except IntegrityError:
        raise DuplicateVehicleNumber()
    return vehicle


def soft_delete(pk) -> AmbulanceVehicle:
    vehicle = get_vehicle(pk)
    vehicle.is_active = False
    vehicle.save(update_fields=['is_active', 'updated_at'])
    logger.info('Vehicle %s deactivated', vehicle.pk)
    return vehicle


def toggle_availability(pk, is_available) -> AmbulanceVehicle:
    data = gate(VehicleAvailabilitySerializer, {'isAvailable': is_available})
    vehicle = get_vehicle(pk)
    vehicle.is_available = data['isAvailable']
    vehicle.save(update_fields=['is_available', 'updated_at'])
    return vehicle
