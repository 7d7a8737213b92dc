"""
Shared serializer fields and the single validation gate used by services.

Every service operation runs its input through exactly one request
serializer via :func:`gate`; the first failing field is reported in a
``ValidationError``.
"""
import math
import uuid

import bleach
from rest_framework import serializers

from .exceptions import InvalidId, ValidationError, first_error


def gate(serializer_class, data, *, partial=False):
    s = serializer_class(data=data, partial=partial)
    if not s.is_valid():
        field, message = first_error(s.errors)
        raise ValidationError(f'{field}: {message}' if field else message, field=field)
    return s.validated_data


def parse_uuid(value, label='id'):
    """Return ``value`` as a UUID or raise ``InvalidId``."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidId(f'Invalid {label}')


def parse_int_id(value, label='id'):
    """Return ``value`` as a positive integer id or raise ``InvalidId``."""
    if isinstance(value, bool):
        raise InvalidId(f'Invalid {label}')
    try:
        pk = int(str(value))
    except (TypeError, ValueError):
        raise InvalidId(f'Invalid {label}')
    if pk <= 0:
        raise InvalidId(f'Invalid {label}')
    return pk


class CleanCharField(serializers.CharField):
    """CharField with markup stripped by bleach."""

    def to_internal_value(self, data):
        value = bleach.clean(super().to_internal_value(data), tags=[], strip=True).strip()
        if not value and not self.allow_blank:
            self.fail('blank')
        return value


class FiniteFloatField(serializers.FloatField):
    default_error_messages = {
        'not_finite': 'A finite number is required.',
    }

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not math.isfinite(value):
            self.fail('not_finite')
        return value


class StrictBooleanField(serializers.BooleanField):
    """Only JSON ``true``/``false`` are accepted, no string or numeric coercion."""
    default_error_messages = {
        'strict': 'Must be a boolean value.',
    }

    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail('strict')
        return data


def body_field(request, name):
    """``request.data[name]`` for object bodies, None otherwise."""
    data = request.data
    return data.get(name) if isinstance(data, dict) else None
