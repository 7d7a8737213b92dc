from django.conf import settings
from rest_framework import serializers

from directory.models import BLOOD_GROUPS
from directory.validation import FiniteFloatField


class SearchQuerySerializer(serializers.Serializer):
    """Query string of the listing endpoints.

    Booleans are read the query-string way (``true``/``1``); a missing
    boolean means "no filter", not ``False``.
    """
    latitude = FiniteFloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = FiniteFloatField(required=False, allow_null=True, min_value=-180, max_value=180)
    maxDistance = FiniteFloatField(required=False, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, max_length=128)
    postcode = serializers.CharField(required=False, allow_blank=True, max_length=32)
    street = serializers.CharField(required=False, allow_blank=True, max_length=255)
    bloodGroup = serializers.ChoiceField(choices=BLOOD_GROUPS, required=False, allow_blank=True)
    verified = serializers.BooleanField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False, allow_null=True)

    def validate_maxDistance(self, v):
        if v is not None and v <= 0:
            raise serializers.ValidationError('maxDistance must be greater than 0')
        return v

    def validate(self, attrs):
        lat, lng = attrs.get('latitude'), attrs.get('longitude')
        if (lat is None) != (lng is None):
            missing = 'latitude' if lat is None else 'longitude'
            raise serializers.ValidationError({missing: 'Latitude and longitude must be supplied together'})
        if attrs.get('maxDistance') is None:
            attrs['maxDistance'] = float(settings.DEFAULT_SEARCH_RADIUS_M)
        for key in ('city', 'postcode', 'street', 'bloodGroup'):
            attrs[key] = (attrs.get(key) or '').strip()
        return attrs
