"""
Hospital service profile views.

Every endpoint is keyed by the hospital id; the profile itself is
created on first access.  Beds and blood bank are replaced wholesale
with PUT, doctors and services are managed one record at a time.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from directory.services import hospital_services as svc
from directory.validation import body_field


def _profile_response(hospital_id, message=None, code=status.HTTP_200_OK):
    payload = {'ok': True, 'data': svc.format_profile(svc.ensure_profile(hospital_id))}
    if message:
        payload['message'] = message
    return Response(payload, status=code)


@api_view(['GET'])
@permission_classes([AllowAny])
def profile(request, hospital_id):
    return _profile_response(hospital_id)


@api_view(['PATCH'])
@permission_classes([AllowAny])
def notes(request, hospital_id):
    svc.update_notes(hospital_id, body_field(request, 'notes'))
    return _profile_response(hospital_id, 'Notes updated successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
def add_doctor(request, hospital_id):
    doctor = svc.add_doctor(hospital_id, request.data)
    return Response(
        {'ok': True, 'message': 'Doctor added successfully', 'data': svc.format_doctor(doctor)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['PATCH', 'DELETE'])
@permission_classes([AllowAny])
def doctor_detail(request, hospital_id, doctor_id):
    if request.method == 'DELETE':
        svc.delete_doctor(hospital_id, doctor_id)
        return Response({'ok': True, 'message': 'Doctor deleted successfully'})
    doctor = svc.update_doctor(hospital_id, doctor_id, request.data)
    return Response({'ok': True, 'message': 'Doctor updated successfully', 'data': svc.format_doctor(doctor)})


@api_view(['POST'])
@permission_classes([AllowAny])
def add_service(request, hospital_id):
    service = svc.add_service(hospital_id, request.data)
    return Response(
        {'ok': True, 'message': 'Service added successfully', 'data': svc.format_service(service)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['PATCH', 'DELETE'])
@permission_classes([AllowAny])
def service_detail(request, hospital_id, service_id):
    if request.method == 'DELETE':
        svc.delete_service(hospital_id, service_id)
        return Response({'ok': True, 'message': 'Service deleted successfully'})
    service = svc.update_service(hospital_id, service_id, request.data)
    return Response({'ok': True, 'message': 'Service updated successfully', 'data': svc.format_service(service)})


@api_view(['PUT'])
@permission_classes([AllowAny])
def beds(request, hospital_id):
    rows = svc.replace_beds(hospital_id, body_field(request, 'beds'))
    return Response({'ok': True, 'message': 'Beds updated successfully', 'data': [svc.format_bed(b) for b in rows]})


@api_view(['PUT'])
@permission_classes([AllowAny])
def blood_bank(request, hospital_id):
    rows = svc.replace_blood_bank(hospital_id, body_field(request, 'bloodBank'))
    return Response({
        'ok': True,
        'message': 'Blood bank updated successfully',
        'data': [svc.format_blood_stock(b) for b in rows],
    })
