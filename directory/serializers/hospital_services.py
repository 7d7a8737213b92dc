from rest_framework import serializers

from directory.models import BLOOD_GROUPS, MedicalService
from directory.validation import CleanCharField, FiniteFloatField


class DoctorSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    specialty = CleanCharField(max_length=255)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    email = CleanCharField(required=False, allow_blank=True, max_length=254)
    availability = CleanCharField(required=False, allow_blank=True, max_length=128)


class MedicalServiceSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    type = serializers.ChoiceField(choices=[c[0] for c in MedicalService.TYPE_CHOICES], required=False)
    description = CleanCharField(required=False, allow_blank=True)


class NotesSerializer(serializers.Serializer):
    notes = CleanCharField(allow_blank=True, trim_whitespace=True)


class BedEntrySerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name = CleanCharField(max_length=128)
    total = FiniteFloatField(required=False, min_value=0, default=0)
    available = FiniteFloatField(required=False, min_value=0, default=0)

    def validate(self, attrs):
        if attrs['available'] > attrs['total']:
            raise serializers.ValidationError(
                {'available': f"Available beds cannot exceed total beds for {attrs['name']}"}
            )
        return attrs


class BedsSerializer(serializers.Serializer):
    beds = BedEntrySerializer(many=True, allow_empty=True)

    def validate_beds(self, beds):
        seen = set()
        for bed in beds:
            key = bed['name'].lower()
            if key in seen:
                raise serializers.ValidationError(f"Duplicate bed category: {bed['name']}")
            seen.add(key)
        return beds


class BloodStockEntrySerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    bloodGroup = serializers.ChoiceField(
        choices=BLOOD_GROUPS, error_messages={'invalid_choice': 'Invalid blood group: {input}'}
    )
    units = FiniteFloatField(required=False, min_value=0, default=0)


class BloodBankSerializer(serializers.Serializer):
    bloodBank = BloodStockEntrySerializer(many=True, allow_empty=True)

    def validate_bloodBank(self, entries):
        seen = set()
        for entry in entries:
            if entry['bloodGroup'] in seen:
                raise serializers.ValidationError(f"Duplicate blood group: {entry['bloodGroup']}")
            seen.add(entry['bloodGroup'])
        return entries
