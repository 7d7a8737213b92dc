from django.utils import timezone
from rest_framework import serializers

from directory.validation import CleanCharField, StrictBooleanField

MIN_VEHICLE_YEAR = 1950


def _check_year(value):
    latest = timezone.now().year + 1
    if value < MIN_VEHICLE_YEAR or value > latest:
        raise serializers.ValidationError(f'Year must be between {MIN_VEHICLE_YEAR} and {latest}')
    return value


class VehicleCreateSerializer(serializers.Serializer):
    ownerId = serializers.CharField()
    vehicleNumber = CleanCharField(max_length=64)
    model = CleanCharField(max_length=128)
    year = serializers.IntegerField()
    driverName = CleanCharField(max_length=255)
    driverPhone = CleanCharField(max_length=32)
    registrationPaper = serializers.CharField()
    driverLicense = serializers.CharField()
    fitnessPaper = serializers.CharField()

    def validate_vehicleNumber(self, v):
        return v.upper()

    def validate_year(self, v):
        return _check_year(v)


class VehicleUpdateSerializer(serializers.Serializer):
    vehicleNumber = CleanCharField(max_length=64)
    model = CleanCharField(max_length=128)
    year = serializers.IntegerField()
    driverName = CleanCharField(max_length=255)
    driverPhone = CleanCharField(max_length=32)
    isAvailable = StrictBooleanField()

    def validate_vehicleNumber(self, v):
        return v.upper()

    def validate_year(self, v):
        return _check_year(v)


class VehicleAvailabilitySerializer(serializers.Serializer):
    isAvailable = StrictBooleanField()
