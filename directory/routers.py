"""
URL mappings for the EmerCare API.

Donors, hospitals and ambulance owners share one set of view functions;
the registrant ``kind`` is passed as an extra keyword argument.  Trailing
slashes are deliberately omitted.
"""
from django.urls import include, path

from .views import health, hospital_services, registrants, vehicles


def registrant_routes(prefix, kind, name):
    kw = {'kind': kind}
    return [
        path(f'api/{prefix}/register', registrants.register, kw, name=f'{name}_register'),
        path(f'api/{prefix}/login', registrants.login, kw, name=f'{name}_login'),
        path(f'api/{prefix}', registrants.listing, kw, name=f'{name}_list'),
        path(f'api/{prefix}/<str:pk>', registrants.detail, kw, name=f'{name}_detail'),
        path(f'api/{prefix}/<str:pk>/password', registrants.change_password, kw, name=f'{name}_password'),
    ]


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    path('api', health.api_index, name='api_index'),

    *registrant_routes('donors', 'donor', 'donor'),
    path('api/donors/<str:pk>/availability', registrants.availability, name='donor_availability'),
    *registrant_routes('hospitals', 'hospital', 'hospital'),
    *registrant_routes('ambulances', 'ambulance', 'ambulance'),

    path('api/ambulance-vehicles', vehicles.add_vehicle, name='vehicle_add'),
    path('api/ambulance-vehicles/owner/<str:owner_id>', vehicles.owner_vehicles, name='vehicle_by_owner'),
    path('api/ambulance-vehicles/<str:pk>', vehicles.vehicle_detail, name='vehicle_detail'),
    path('api/ambulance-vehicles/<str:pk>/availability', vehicles.vehicle_availability, name='vehicle_availability'),

    path('api/hospital-services/<str:hospital_id>', hospital_services.profile, name='hospital_services'),
    path('api/hospital-services/<str:hospital_id>/notes', hospital_services.notes, name='hospital_services_notes'),
    path('api/hospital-services/<str:hospital_id>/doctors', hospital_services.add_doctor, name='hospital_doctors'),
    path('api/hospital-services/<str:hospital_id>/doctors/<str:doctor_id>', hospital_services.doctor_detail,
         name='hospital_doctor_detail'),
    path('api/hospital-services/<str:hospital_id>/services', hospital_services.add_service, name='hospital_services_add'),
    path('api/hospital-services/<str:hospital_id>/services/<str:service_id>', hospital_services.service_detail,
         name='hospital_service_detail'),
    path('api/hospital-services/<str:hospital_id>/beds', hospital_services.beds, name='hospital_beds'),
    path('api/hospital-services/<str:hospital_id>/blood-bank', hospital_services.blood_bank, name='hospital_blood_bank'),
]
