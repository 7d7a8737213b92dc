"""
Registration, login and profile maintenance for the three registrant kinds.

A *kind* is one of ``donor``, ``hospital`` or ``ambulance`` (ambulance
owner).  Every operation validates its input with one request serializer
before touching storage, uploads or the database.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from directory.exceptions import DuplicateEmail, InvalidCredentials, NotFound, ValidationError
from directory.geo import geojson_point
from directory.models import AmbulanceOwner, Donor, Hospital
from directory.passwords import hash_password, verify_password
from directory.serializers.registrants import (
    AmbulanceRegisterSerializer,
    AmbulanceUpdateSerializer,
    AvailabilitySerializer,
    ChangePasswordSerializer,
    DonorRegisterSerializer,
    DonorUpdateSerializer,
    HospitalRegisterSerializer,
    HospitalUpdateSerializer,
    LoginSerializer,
)
from directory.services import geocoding, uploads
from directory.validation import gate, parse_uuid

logger = logging.getLogger(__name__)

KINDS = {
    'donor': {
        'model': Donor,
        'label': 'Donor',
        'register': DonorRegisterSerializer,
        'update': DonorUpdateSerializer,
        'upload': ('picture', 'donors'),
    },
    'hospital': {
        'model': Hospital,
        'label': 'Hospital',
        'register': HospitalRegisterSerializer,
        'update': HospitalUpdateSerializer,
        'upload': ('license', 'hospitals'),
    },
    'ambulance': {
        'model': AmbulanceOwner,
        'label': 'Ambulance owner',
        'register': AmbulanceRegisterSerializer,
        'update': AmbulanceUpdateSerializer,
        'upload': ('picture', 'ambulances'),
    },
}

# camelCase request field -> model attribute, where they differ
FIELD_MAP = {
    'bloodGroup': 'blood_group',
    'hospitalName': 'hospital_name',
    'ownerName': 'owner_name',
}


def kind_spec(kind: str) -> dict:
    try:
        return KINDS[kind]
    except KeyError:
        raise ValidationError(f'Unknown registrant kind: {kind}', field='kind')


def format_registrant(obj) -> dict:
    """Public projection of a registrant; never includes the password hash."""
    data = {
        'id': str(obj.pk),
        'phone': obj.phone,
        'email': obj.email,
        'street': obj.street,
        'city': obj.city,
        'postcode': obj.postcode,
        'location': obj.location,
        'isActive': obj.is_active,
        'createdAt': obj.created_at.isoformat() if obj.created_at else None,
        'updatedAt': obj.updated_at.isoformat() if obj.updated_at else None,
    }
    if isinstance(obj, Donor):
        data.update(name=obj.name, age=obj.age, bloodGroup=obj.blood_group, picture=obj.picture)
    elif isinstance(obj, Hospital):
        data.update(hospitalName=obj.hospital_name, license=obj.license, isVerified=obj.is_verified)
    else:
        data.update(ownerName=obj.owner_name, age=obj.age, picture=obj.picture, isVerified=obj.is_verified)
    return data


def _attach_location(data: dict) -> None:
    """Fill ``location`` (and possibly ``city``) on validated registration data."""
    lat, lng = data.pop('latitude', None), data.pop('longitude', None)
    if lat is None:
        point = geocoding.forward(data['street'], data['city'], data['postcode'])
        if point:
            lat, lng = point
    elif not data['city']:
        city = geocoding.reverse(lat, lng)
        if city:
            data['city'] = city[:128]
    data['location'] = geojson_point(lat, lng) if lat is not None else None


def register(kind: str, payload) -> object:
    spec = kind_spec(kind)
    model = spec['model']
    data = dict(gate(spec['register'], payload))

    if model.objects.filter(email__iexact=data['email']).exists():
        raise DuplicateEmail()

    _attach_location(data)
    upload_field, folder = spec['upload']
    url = uploads.upload(data.pop(upload_field), folder)

    fields = {FIELD_MAP.get(k, k): v for k, v in data.items()}
    fields[upload_field] = url
    fields['password'] = hash_password(fields['password'])
    try:
        with transaction.atomic():
            obj = model.objects.create(**fields)
    except IntegrityError:
        uploads.discard(url)
        raise DuplicateEmail()
    except Exception:
        uploads.discard(url)
        raise
    logger.info('Registered %s %s', kind, obj.pk)
    return obj


def login(kind: str, email, password) -> object:
    """Verify credentials.  Unknown email and wrong password fail identically."""
    model = kind_spec(kind)['model']
    data = gate(LoginSerializer, {'email': email, 'password': password})
    obj = model.objects.filter(email=data['email']).first()
    if obj is None or not verify_password(data['password'], obj.password):
        logger.info('Failed %s login', kind)
        raise InvalidCredentials()
    logger.info('%s %s logged in', kind, obj.pk)
    return obj


def get_by_id(kind: str, pk) -> object:
    spec = kind_spec(kind)
    obj = spec['model'].objects.filter(pk=parse_uuid(pk, f"{spec['label'].lower()} id")).first()
    if obj is None:
        raise NotFound(f"{spec['label']} not found")
    return obj


def update_profile(kind: str, pk, patch) -> object:
    spec = kind_spec(kind)
    obj = get_by_id(kind, pk)
    data = dict(gate(spec['update'], patch, partial=True))
    if not data:
        return obj

    if 'email' in data and spec['model'].objects.filter(email__iexact=data['email']).exclude(pk=obj.pk).exists():
        raise DuplicateEmail()

    lat, lng = data.pop('latitude', None), data.pop('longitude', None)
    if lat is not None:
        data['location'] = geojson_point(lat, lng)

    changed = []
    for key, value in data.items():
        attr = FIELD_MAP.get(key, key)
        setattr(obj, attr, value)
        changed.append(attr)
    try:
        with transaction.atomic():
            obj.save(update_fields=changed + ['updated_at'])
    except IntegrityError:
        raise DuplicateEmail()
    return obj


def change_password(kind: str, pk, current_password, new_password) -> None:
    data = gate(ChangePasswordSerializer, {'currentPassword': current_password, 'newPassword': new_password})
    obj = get_by_id(kind, pk)
    if not verify_password(data['currentPassword'], obj.password):
        raise InvalidCredentials('Current password is incorrect')
    obj.password = hash_password(data['newPassword'])
    obj.save(update_fields=['password', 'updated_at'])
    logger.info('Password changed for %s %s', kind, obj.pk)


def set_availability(pk, is_active) -> Donor:
    """Donor availability toggle; ``is_active`` must be a real boolean."""
    data = gate(AvailabilitySerializer, {'isActive': is_active})
    donor = get_by_id('donor', pk)
    donor.is_active = data['isActive']
    donor.save(update_fields=['is_active', 'updated_at'])
    return donor
