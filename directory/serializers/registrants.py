from rest_framework import serializers

from directory.models import BLOOD_GROUPS
from directory.passwords import policy_errors
from directory.validation import CleanCharField, FiniteFloatField, StrictBooleanField


def _check_password(value):
    errors = policy_errors(value)
    if errors:
        raise serializers.ValidationError(errors[0])
    return value


class AddressMixin(serializers.Serializer):
    """Free-text address and/or GPS coordinates."""
    street = CleanCharField(required=False, allow_blank=True, max_length=255)
    city = CleanCharField(required=False, allow_blank=True, max_length=128)
    postcode = CleanCharField(required=False, allow_blank=True, max_length=32)
    latitude = FiniteFloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = FiniteFloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def _check_coordinates(self, attrs):
        lat, lng = attrs.get('latitude'), attrs.get('longitude')
        if (lat is None) != (lng is None):
            missing = 'latitude' if lat is None else 'longitude'
            raise serializers.ValidationError({missing: 'Latitude and longitude must be supplied together'})
        return lat is not None


class RegistrantRegisterSerializer(AddressMixin):
    phone = CleanCharField(max_length=32)
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(write_only=True, trim_whitespace=False, max_length=128)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        return _check_password(v)

    def validate(self, attrs):
        has_gps = self._check_coordinates(attrs)
        street, city, postcode = (attrs.get(k) or '' for k in ('street', 'city', 'postcode'))
        has_text = bool(street or city or postcode)
        if not has_text and not has_gps:
            raise serializers.ValidationError(
                {'location': 'Either text address (street, city, postcode) or GPS location is required'}
            )
        if has_text and not has_gps:
            for key, value in (('street', street), ('city', city), ('postcode', postcode)):
                if not value:
                    raise serializers.ValidationError(
                        {key: 'Street, city, and postcode are required for text address'}
                    )
        for key in ('street', 'city', 'postcode'):
            attrs[key] = attrs.get(key) or ''
        return attrs


class DonorRegisterSerializer(RegistrantRegisterSerializer):
    name = CleanCharField(max_length=255)
    age = serializers.IntegerField(min_value=18, max_value=65)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS)
    picture = serializers.CharField(trim_whitespace=True)


class HospitalRegisterSerializer(RegistrantRegisterSerializer):
    hospitalName = CleanCharField(max_length=255)
    license = serializers.CharField(trim_whitespace=True)


class AmbulanceRegisterSerializer(RegistrantRegisterSerializer):
    ownerName = CleanCharField(max_length=255)
    age = serializers.IntegerField(min_value=18, max_value=70)
    picture = serializers.CharField(trim_whitespace=True)


class RegistrantUpdateSerializer(AddressMixin):
    """Partial profile update; used with ``partial=True``."""
    phone = CleanCharField(max_length=32)
    email = serializers.EmailField(max_length=254)

    def validate_email(self, v):
        return v.strip().lower()

    def validate(self, attrs):
        self._check_coordinates(attrs)
        return attrs


class DonorUpdateSerializer(RegistrantUpdateSerializer):
    name = CleanCharField(max_length=255)
    age = serializers.IntegerField(min_value=18, max_value=65)


class HospitalUpdateSerializer(RegistrantUpdateSerializer):
    hospitalName = CleanCharField(max_length=255)


class AmbulanceUpdateSerializer(RegistrantUpdateSerializer):
    ownerName = CleanCharField(max_length=255)
    age = serializers.IntegerField(min_value=18, max_value=70)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(trim_whitespace=False, max_length=128)

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if not v:
            raise serializers.ValidationError('Email and password are required')
        return v


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(trim_whitespace=False, max_length=128)
    newPassword = serializers.CharField(trim_whitespace=False, max_length=128)

    def validate_newPassword(self, v):
        return _check_password(v)


class AvailabilitySerializer(serializers.Serializer):
    isActive = StrictBooleanField()
