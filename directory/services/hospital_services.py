"""
Hospital service profiles: doctors, medical services, beds and blood bank.

A profile is created on first access with the default bed categories
and all eight blood groups at zero.  Doctors and services are added one
row at a time, so concurrent additions never overwrite each other.  Beds
and blood stock are replaced as a whole inside a transaction holding the
profile row lock; the last writer wins.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from directory.exceptions import NotFound
from directory.models import (
    BLOOD_GROUPS,
    DEFAULT_BEDS,
    BedCategory,
    BloodStock,
    Doctor,
    Hospital,
    HospitalServiceProfile,
    MedicalService,
)
from directory.serializers.hospital_services import (
    BedsSerializer,
    BloodBankSerializer,
    DoctorSerializer,
    MedicalServiceSerializer,
    NotesSerializer,
)
from directory.validation import gate, parse_int_id, parse_uuid

logger = logging.getLogger(__name__)


def _num(value: float):
    return int(value) if float(value).is_integer() else value


def format_doctor(d: Doctor) -> dict:
    return {
        'id': d.pk,
        'name': d.name,
        'specialty': d.specialty,
        'phone': d.phone,
        'email': d.email,
        'availability': d.availability,
    }


def format_service(s: MedicalService) -> dict:
    return {'id': s.pk, 'name': s.name, 'type': s.type, 'description': s.description}


def format_bed(b: BedCategory) -> dict:
    return {'id': b.pk, 'name': b.name, 'total': _num(b.total), 'available': _num(b.available)}


def format_blood_stock(b: BloodStock) -> dict:
    return {'id': b.pk, 'bloodGroup': b.blood_group, 'units': _num(b.units)}


def format_profile(profile: HospitalServiceProfile) -> dict:
    return {
        'id': profile.pk,
        'hospitalId': str(profile.hospital_id),
        'doctors': [format_doctor(d) for d in profile.doctors.all()],
        'services': [format_service(s) for s in profile.services.all()],
        'beds': [format_bed(b) for b in profile.beds.all()],
        'bloodBank': [format_blood_stock(b) for b in profile.blood_bank.all()],
        'notes': profile.notes,
        'createdAt': profile.created_at.isoformat() if profile.created_at else None,
        'updatedAt': profile.updated_at.isoformat() if profile.updated_at else None,
    }


def _hospital_pk(hospital_id):
    pk = parse_uuid(hospital_id, 'hospital id')
    if not Hospital.objects.filter(pk=pk).exists():
        raise NotFound('Hospital not found')
    return pk


def ensure_profile(hospital_id) -> HospitalServiceProfile:
    """Return the hospital's profile, creating it with defaults if missing."""
    pk = _hospital_pk(hospital_id)
    profile = HospitalServiceProfile.objects.filter(hospital_id=pk).first()
    if profile is not None:
        return profile
    try:
        with transaction.atomic():
            profile = HospitalServiceProfile.objects.create(hospital_id=pk)
            BedCategory.objects.bulk_create([
                BedCategory(profile=profile, position=i, **bed) for i, bed in enumerate(DEFAULT_BEDS)
            ])
            BloodStock.objects.bulk_create([
                BloodStock(profile=profile, blood_group=g, units=0, position=i) for i, g in enumerate(BLOOD_GROUPS)
            ])
    except IntegrityError:
        # created concurrently by another request
        return HospitalServiceProfile.objects.get(hospital_id=pk)
    logger.info('Created service profile for hospital %s', pk)
    return profile


def update_notes(hospital_id, notes) -> HospitalServiceProfile:
    pk = _hospital_pk(hospital_id)
    data = gate(NotesSerializer, {'notes': notes} if notes is not None else {})
    profile = ensure_profile(pk)
    profile.notes = data['notes']
    profile.save(update_fields=['notes', 'updated_at'])
    return profile


# Doctors

def add_doctor(hospital_id, payload) -> Doctor:
    pk = _hospital_pk(hospital_id)
    data = gate(DoctorSerializer, payload)
    profile = ensure_profile(pk)
    return Doctor.objects.create(
        profile=profile,
        name=data['name'],
        specialty=data['specialty'],
        phone=data.get('phone', ''),
        email=data.get('email', ''),
        availability=data.get('availability') or 'Available',
    )


def _doctor(hospital_pk, doctor_id) -> Doctor:
    doctor = Doctor.objects.filter(pk=parse_int_id(doctor_id, 'doctor id'), profile__hospital_id=hospital_pk).first()
    if doctor is None:
        raise NotFound('Doctor not found')
    return doctor


def update_doctor(hospital_id, doctor_id, patch) -> Doctor:
    doctor = _doctor(_hospital_pk(hospital_id), doctor_id)
    data = dict(gate(DoctorSerializer, patch, partial=True))
    if 'availability' in data:
        data['availability'] = data['availability'] or 'Available'
    for key, value in data.items():
        setattr(doctor, key, value)
    if data:
        doctor.save(update_fields=list(data))
    return doctor


def delete_doctor(hospital_id, doctor_id) -> None:
    doctor = _doctor(_hospital_pk(hospital_id), doctor_id)
    doctor.delete()


# Medical services

def add_service(hospital_id, payload) -> MedicalService:
    pk = _hospital_pk(hospital_id)
    data = gate(MedicalServiceSerializer, payload)
    profile = ensure_profile(pk)
    return MedicalService.objects.create(
        profile=profile,
        name=data['name'],
        type=data.get('type') or MedicalService.TYPE_TEST,
        description=data.get('description', ''),
    )


def _service(hospital_pk, service_id) -> MedicalService:
    service = MedicalService.objects.filter(
        pk=parse_int_id(service_id, 'service id'), profile__hospital_id=hospital_pk
    ).first()
    if service is None:
        raise NotFound('Service not found')
    return service


def update_service(hospital_id, service_id, patch) -> MedicalService:
    service = _service(_hospital_pk(hospital_id), service_id)
    data = gate(MedicalServiceSerializer, patch, partial=True)
    for key, value in data.items():
        setattr(service, key, value)
    if data:
        service.save(update_fields=list(data))
    return service


def delete_service(hospital_id, service_id) -> None:
    service = _service(_hospital_pk(hospital_id), service_id)
    service.delete()


# Full replacements

def _kept_id(value, existing: set):
    """Return ``value`` as an int if it names one of ``existing``, consuming it."""
    try:
        pk = int(str(value))
    except (TypeError, ValueError):
        return None
    if pk in existing:
        existing.discard(pk)
        return pk
    return None


def replace_beds(hospital_id, beds) -> list[BedCategory]:
    """Replace every bed category.  An empty list restores the defaults."""
    pk = _hospital_pk(hospital_id)
    data = gate(BedsSerializer, {'beds': beds} if beds is not None else {})
    entries = data['beds'] or DEFAULT_BEDS
    ensure_profile(pk)
    with transaction.atomic():
        profile = HospitalServiceProfile.objects.select_for_update().get(hospital_id=pk)
        existing = set(profile.beds.values_list('pk', flat=True))
        profile.beds.all().delete()
        rows = []
        for position, entry in enumerate(entries):
            bed = BedCategory(
                profile=profile,
                name=entry['name'],
                total=entry.get('total', 0),
                available=entry.get('available', 0),
                position=position,
            )
            bed.pk = _kept_id(entry.get('id'), existing)
            rows.append(bed)
        BedCategory.objects.bulk_create(rows)
        profile.save(update_fields=['updated_at'])
    logger.info('Replaced %d bed categories for hospital %s', len(rows), pk)
    return list(profile.beds.all())


def replace_blood_bank(hospital_id, entries) -> list[BloodStock]:
    """Replace the blood bank.  An empty list leaves it empty."""
    pk = _hospital_pk(hospital_id)
    data = gate(BloodBankSerializer, {'bloodBank': entries} if entries is not None else {})
    ensure_profile(pk)
    with transaction.atomic():
        profile = HospitalServiceProfile.objects.select_for_update().get(hospital_id=pk)
        existing = set(profile.blood_bank.values_list('pk', flat=True))
        profile.blood_bank.all().delete()
        rows = []
        for position, entry in enumerate(data['bloodBank']):
            stock = BloodStock(
                profile=profile,
                blood_group=entry['bloodGroup'],
                units=entry.get('units', 0),
                position=position,
            )
            stock.pk = _kept_id(entry.get('id'), existing)
            rows.append(stock)
        BloodStock.objects.bulk_create(rows)
        profile.save(update_fields=['updated_at'])
    logger.info('Replaced blood bank (%d groups) for hospital %s', len(rows), pk)
    return list(profile.blood_bank.all())
