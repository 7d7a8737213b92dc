"""
Registration, login, listing and profile views.

The same functions serve donors, hospitals and ambulance owners; the
router passes the registrant ``kind`` as an extra URL keyword.  Login
returns the public profile plus ``userType`` and issues no token or
session.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from directory.services import registry
from directory.services.search import format_result, search
from directory.throttling import LoginRateThrottle
from directory.validation import body_field

MESSAGES = {
    'donor': 'Donor registered successfully',
    'hospital': 'Hospital registered successfully. Verification pending.',
    'ambulance': 'Ambulance service registered successfully. Verification pending.',
}


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request, kind):
    obj = registry.register(kind, request.data)
    return Response(
        {'ok': True, 'message': MESSAGES[kind], 'data': registry.format_registrant(obj)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login(request, kind):
    obj = registry.login(kind, body_field(request, 'email'), body_field(request, 'password'))
    data = registry.format_registrant(obj)
    data['userType'] = kind
    return Response({'ok': True, 'message': 'Login successful', 'data': data})


@api_view(['GET'])
@permission_classes([AllowAny])
def listing(request, kind):
    """List or search registrants.

    Query params:
      - latitude, longitude, maxDistance: nearest first within the radius
      - city, postcode, street: substring filters (ignored with coordinates)
      - bloodGroup, isActive: donors only
      - verified: hospitals and ambulance owners
    """
    results = [format_result(obj) for obj in search(kind, request.query_params)]
    return Response({'ok': True, 'count': len(results), 'data': results})


@api_view(['GET', 'PATCH'])
@permission_classes([AllowAny])
def detail(request, kind, pk):
    if request.method == 'GET':
        obj = registry.get_by_id(kind, pk)
        return Response({'ok': True, 'data': registry.format_registrant(obj)})
    obj = registry.update_profile(kind, pk, request.data)
    return Response({'ok': True, 'message': 'Profile updated successfully', 'data': registry.format_registrant(obj)})


@api_view(['PATCH'])
@permission_classes([AllowAny])
def change_password(request, kind, pk):
    registry.change_password(
        kind, pk, body_field(request, 'currentPassword'), body_field(request, 'newPassword')
    )
    return Response({'ok': True, 'message': 'Password changed successfully'})


@api_view(['PATCH'])
@permission_classes([AllowAny])
def availability(request, pk):
    donor = registry.set_availability(pk, body_field(request, 'isActive'))
    state = 'available' if donor.is_active else 'unavailable'
    return Response({
        'ok': True,
        'message': f'Donor marked as {state}',
        'data': {'id': str(donor.pk), 'isActive': donor.is_active},
    })
