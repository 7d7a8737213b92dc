"""
Database models for the EmerCare directory.

Three registrant kinds (donors, hospitals and ambulance owners) each get
their own table.  Ambulance owners own vehicles; hospitals own a lazily
created service profile whose doctors, services, bed categories and
blood stock are stored as separate rows so that each can be addressed,
updated and deleted on its own.

Locations are stored as GeoJSON points, ``{'type': 'Point',
'coordinates': [lng, lat]}``.
"""
from __future__ import annotations

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .geo import point_from_geojson

BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']
BLOOD_GROUP_CHOICES = [(g, g) for g in BLOOD_GROUPS]

DEFAULT_BEDS = [
    {'name': 'ICU', 'total': 0, 'available': 0},
    {'name': 'HDU', 'total': 0, 'available': 0},
    {'name': 'Cabin', 'total': 0, 'available': 0},
    {'name': 'General Ward', 'total': 0, 'available': 0},
]


class Registrant(models.Model):
    """Fields shared by every kind of registered account.

    ``email`` is stored trimmed and lower-cased which makes the unique
    index case-insensitive.  ``password`` holds a Django password hash.
    Either a complete text address or ``location`` is present.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    phone = models.CharField(max_length=32)
    email = models.EmailField(max_length=254, unique=True)
    password = models.CharField(max_length=255)
    street = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=128, blank=True, default='', db_index=True)
    postcode = models.CharField(max_length=32, blank=True, default='', db_index=True)
    location = models.JSONField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Attribute holding the human readable name; used for sorting.
    display_field = 'name'

    class Meta:
        abstract = True

    @property
    def display_name(self) -> str:
        return getattr(self, self.display_field)

    @property
    def point(self):
        """``(lat, lng)`` of the stored location or None."""
        return point_from_geojson(self.location)

    def __str__(self) -> str:
        return f"{self.display_name} <{self.email}>"


class Donor(Registrant):
    """A blood donor.  ``is_active`` doubles as the donation availability toggle."""
    name = models.CharField(max_length=255)
    age = models.PositiveSmallIntegerField(validators=[MinValueValidator(18), MaxValueValidator(65)])
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES, db_index=True)
    picture = models.CharField(max_length=1024)

    class Meta:
        indexes = [models.Index(fields=['city', 'blood_group'])]


class Hospital(Registrant):
    hospital_name = models.CharField(max_length=255)
    license = models.CharField(max_length=1024)
    # Set by staff through the Django admin; there is no API flow for it.
    is_verified = models.BooleanField(default=False)

    display_field = 'hospital_name'

    class Meta:
        indexes = [models.Index(fields=['is_verified', 'is_active'])]


class AmbulanceOwner(Registrant):
    owner_name = models.CharField(max_length=255)
    age = models.PositiveSmallIntegerField(validators=[MinValueValidator(18), MaxValueValidator(70)])
    picture = models.CharField(max_length=1024)
    is_verified = models.BooleanField(default=False)

    display_field = 'owner_name'

    class Meta:
        indexes = [models.Index(fields=['is_verified', 'is_active'])]


class AmbulanceVehicle(models.Model):
    """A vehicle run by an ambulance owner.

    Vehicles are never physically removed: deleting one clears
    ``is_active``.  ``vehicle_number`` is unique across all owners.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(AmbulanceOwner, on_delete=models.CASCADE, related_name='vehicles')
    vehicle_number = models.CharField(max_length=64, unique=True)
    model = models.CharField(max_length=128)
    year = models.PositiveSmallIntegerField()
    driver_name = models.CharField(max_length=255)
    driver_phone = models.CharField(max_length=32)
    registration_paper = models.CharField(max_length=1024)
    driver_license = models.CharField(max_length=1024)
    fitness_paper = models.CharField(max_length=1024)
    is_active = models.BooleanField(default=True, db_index=True)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['owner', 'is_active'])]

    def __str__(self) -> str:
        return f"{self.vehicle_number} ({self.owner_id})"


class HospitalServiceProfile(models.Model):
    """Resources a hospital publishes: doctors, services, beds and blood stock."""
    hospital = models.OneToOneField(Hospital, on_delete=models.CASCADE, related_name='service_profile')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Services of {self.hospital_id}"


class Doctor(models.Model):
    profile = models.ForeignKey(HospitalServiceProfile, on_delete=models.CASCADE, related_name='doctors')
    name = models.CharField(max_length=255)
    specialty = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, default='')
    email = models.CharField(max_length=254, blank=True, default='')
    availability = models.CharField(max_length=128, default='Available')

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.name} ({self.specialty})"


class MedicalService(models.Model):
    TYPE_TEST = 'Test'
    TYPE_TREATMENT = 'Treatment'
    TYPE_CHOICES = ((TYPE_TEST, 'Test'), (TYPE_TREATMENT, 'Treatment'))

    profile = models.ForeignKey(HospitalServiceProfile, on_delete=models.CASCADE, related_name='services')
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_TEST)
    description = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.name} [{self.type}]"


class BedCategory(models.Model):
    profile = models.ForeignKey(HospitalServiceProfile, on_delete=models.CASCADE, related_name='beds')
    name = models.CharField(max_length=128)
    total = models.FloatField(default=0)
    available = models.FloatField(default=0)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']
        constraints = [
            models.UniqueConstraint(fields=['profile', 'name'], name='uniq_bed_name_per_profile'),
            models.CheckConstraint(condition=models.Q(available__lte=models.F('total')), name='bed_available_lte_total'),
        ]

    def __str__(self) -> str:
        return f"{self.name}: {self.available}/{self.total}"


class BloodStock(models.Model):
    profile = models.ForeignKey(HospitalServiceProfile, on_delete=models.CASCADE, related_name='blood_bank')
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES)
    units = models.FloatField(default=0)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'id']
        constraints = [
            models.UniqueConstraint(fields=['profile', 'blood_group'], name='uniq_blood_group_per_profile'),
        ]

    def __str__(self) -> str:
        return f"{self.blood_group}: {self.units}"
