from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from directory.services import vehicles
from directory.services.vehicles import format_vehicle
from directory.validation import body_field


@api_view(['POST'])
@permission_classes([AllowAny])
def add_vehicle(request):
    vehicle = vehicles.add_vehicle(request.data)
    return Response(
        {'ok': True, 'message': 'Vehicle added successfully', 'data': format_vehicle(vehicle)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def owner_vehicles(request, owner_id):
    """Vehicles of one owner, newest first.  ``includeInactive=1`` also lists deleted ones."""
    include_inactive = (request.query_params.get('includeInactive') or '0') in ['1', 'true', 'True']
    rows = vehicles.list_by_owner(owner_id, active_only=not include_inactive)
    return Response({'ok': True, 'count': len(rows), 'data': [format_vehicle(v) for v in rows]})


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def vehicle_detail(request, pk):
    if request.method == 'GET':
        return Response({'ok': True, 'data': format_vehicle(vehicles.get_vehicle(pk))})
    if request.method == 'PATCH':
        vehicle = vehicles.update_vehicle(pk, request.data)
        return Response({'ok': True, 'message': 'Vehicle updated successfully', 'data': format_vehicle(vehicle)})
    vehicles.soft_delete(pk)
    return Response({'ok': True, 'message': 'Vehicle deleted successfully'})


@api_view(['PATCH'])
@permission_classes([AllowAny])
def vehicle_availability(request, pk):
    vehicle = vehicles.toggle_availability(pk, body_field(request, 'isAvailable'))
    state = 'available' if vehicle.is_available else 'unavailable'
    return Response({'ok': True, 'message': f'Vehicle marked as {state}', 'data': format_vehicle(vehicle)})
