"""
Integration tests for the EmerCare HTTP API.

These tests drive the public endpoints end to end with DRF's APIClient:
registration and login for each registrant kind, listing and proximity
search, the vehicle sub-registry and hospital service profiles, plus
the shape of the error envelope.

To run the tests:

```
pytest -q directory/tests
```
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Hospital
from .factories import ambulance_payload, at, donor_payload, hospital_payload, vehicle_payload

MISSING = '00000000-0000-0000-0000-000000000000'


class RegistrantAPITests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def register(self, prefix, payload):
        return self.client.post(f'/api/{prefix}/register', payload, format='json')

    def test_register_and_login_donor(self):
        r = self.register('donors', donor_payload(email='Api@Donor.com', password='abc123'))
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data['ok'])
        self.assertNotIn('password', r.data['data'])
        self.assertEqual(r.data['data']['email'], 'api@donor.com')

        r = self.client.post(reverse('donor_login'), {'email': 'api@donor.com', 'password': 'abc123'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data']['userType'], 'donor')
        self.assertNotIn('password', r.data['data'])
        self.assertNotIn('token', r.data)

    def test_login_failure_is_401_with_uniform_message(self):
        self.register('hospitals', hospital_payload(email='h@x.com'))
        wrong = self.client.post('/api/hospitals/login', {'email': 'h@x.com', 'password': 'bad123'}, format='json')
        unknown = self.client.post('/api/hospitals/login', {'email': 'no@x.com', 'password': 'bad123'}, format='json')
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.data['error']['message'], unknown.data['error']['message'])
        self.assertEqual(wrong.data['error']['code'], 'invalid_credentials')

    def test_duplicate_email_is_conflict(self):
        self.register('ambulances', ambulance_payload(email='o@x.com'))
        r = self.register('ambulances', ambulance_payload(email='O@X.com'))
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.data['error']['code'], 'duplicate_email')

    def test_validation_error_envelope_names_field(self):
        r = self.register('donors', donor_payload(age=70))
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.data['ok'])
        self.assertEqual(r.data['error']['code'], 'validation_error')
        self.assertEqual(r.data['error']['field'], 'age')

    def test_upload_failure_is_bad_gateway(self):
        r = self.register('donors', donor_payload(picture='not base64!'))
        self.assertEqual(r.status_code, 502)
        self.assertEqual(r.data['error']['code'], 'upload_failed')

    def test_get_update_and_password(self):
        donor_id = self.register('donors', donor_payload(password='abc123')).data['data']['id']

        r = self.client.get(f'/api/donors/{donor_id}')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.client.get('/api/donors/not-a-uuid').status_code, 400)
        self.assertEqual(self.client.get(f'/api/donors/{MISSING}').status_code, 404)

        r = self.client.patch(f'/api/donors/{donor_id}', {'city': 'Khulna', 'age': 40}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual((r.data['data']['city'], r.data['data']['age']), ('Khulna', 40))

        r = self.client.patch(f'/api/donors/{donor_id}/password',
                              {'currentPassword': 'abc123', 'newPassword': 'new456'}, format='json')
        self.assertEqual(r.status_code, 200)
        r = self.client.patch(f'/api/donors/{donor_id}/password',
                              {'currentPassword': 'abc123', 'newPassword': 'new789'}, format='json')
        self.assertEqual(r.status_code, 401)

    def test_donor_availability(self):
        donor_id = self.register('donors', donor_payload()).data['data']['id']
        r = self.client.patch(f'/api/donors/{donor_id}/availability', {'isActive': False}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.data['data']['isActive'])
        r = self.client.patch(f'/api/donors/{donor_id}/availability', {'isActive': 'no'}, format='json')
        self.assertEqual(r.status_code, 400)

    def test_gps_registration_and_point_search(self):
        self.register('hospitals', hospital_payload(hospitalName='Near', **at(23.81, 90.40)))
        self.register('hospitals', hospital_payload(hospitalName='Far', **at(23.90, 90.40)))
        r = self.client.get('/api/hospitals', {'latitude': 23.80, 'longitude': 90.40, 'maxDistance': 50000})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['count'], 2)
        self.assertEqual([h['hospitalName'] for h in r.data['data']], ['Near', 'Far'])
        self.assertIn('distance', r.data['data'][0])
        self.assertEqual(r.data['data'][0]['location']['coordinates'], [90.40, 23.81])

    def test_listing_query_filters(self):
        self.register('donors', donor_payload(name='Ona', bloodGroup='O+', city='Sylhet'))
        self.register('donors', donor_payload(name='Abe', bloodGroup='A-', city='Sylhet'))
        r = self.client.get('/api/donors', {'city': 'sylhet', 'bloodGroup': 'O+'})
        self.assertEqual([d['name'] for d in r.data['data']], ['Ona'])
        r = self.client.get('/api/donors', {'latitude': 23.8})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['field'], 'longitude')

    def test_unverified_hospitals_filter(self):
        hid = self.register('hospitals', hospital_payload(hospitalName='Checked')).data['data']['id']
        self.register('hospitals', hospital_payload(hospitalName='Pending'))
        Hospital.objects.filter(pk=hid).update(is_verified=True)
        r = self.client.get('/api/hospitals', {'verified': 'true'})
        self.assertEqual([h['hospitalName'] for h in r.data['data']], ['Checked'])
        r = self.client.get('/api/hospitals')
        self.assertEqual(r.data['count'], 2)


class VehicleAPITests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        r = self.client.post('/api/ambulances/register', ambulance_payload(**at(23.8, 90.4)), format='json')
        self.owner_id = r.data['data']['id']

    def add(self, **overrides):
        return self.client.post('/api/ambulance-vehicles', vehicle_payload(self.owner_id, **overrides), format='json')

    def test_vehicle_lifecycle(self):
        r = self.add(vehicleNumber='DHA-77')
        self.assertEqual(r.status_code, 201)
        vid = r.data['data']['id']
        self.assertEqual(self.add(vehicleNumber='dha-77').status_code, 409)

        r = self.client.patch(f'/api/ambulance-vehicles/{vid}/availability', {'isAvailable': False}, format='json')
        self.assertFalse(r.data['data']['isAvailable'])
        r = self.client.patch(f'/api/ambulance-vehicles/{vid}', {'driverName': 'Selim'}, format='json')
        self.assertEqual(r.data['data']['driverName'], 'Selim')

        r = self.client.delete(f'/api/ambulance-vehicles/{vid}')
        self.assertEqual(r.status_code, 200)
        r = self.client.get(f'/api/ambulance-vehicles/owner/{self.owner_id}')
        self.assertEqual(r.data['count'], 0)
        r = self.client.get(f'/api/ambulance-vehicles/owner/{self.owner_id}', {'includeInactive': '1'})
        self.assertEqual(r.data['count'], 1)
        self.assertFalse(r.data['data'][0]['isActive'])

    def test_ambulance_search_includes_vehicle_counts(self):
        self.add()
        self.add()
        r = self.client.get('/api/ambulances', {'latitude': 23.8, 'longitude': 90.4})
        self.assertEqual(r.data['data'][0]['totalVehicles'], 2)
        self.assertEqual(r.data['data'][0]['availableVehicles'], 2)


class HospitalServicesAPITests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        r = self.client.post('/api/hospitals/register', hospital_payload(), format='json')
        self.base = f"/api/hospital-services/{r.data['data']['id']}"

    def test_profile_created_on_first_read(self):
        r = self.client.get(self.base)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(len(r.data['data']['beds']), 4)
        self.assertEqual(len(r.data['data']['bloodBank']), 8)
        self.assertEqual(self.client.get(f'/api/hospital-services/{MISSING}').status_code, 404)

    def test_doctors_and_services(self):
        r = self.client.post(f'{self.base}/doctors', {'name': 'Dr. Karim'}, format='json')
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['field'], 'specialty')

        r = self.client.post(f'{self.base}/doctors', {'name': 'Dr. Karim', 'specialty': 'Surgery'}, format='json')
        self.assertEqual(r.status_code, 201)
        doctor_id = r.data['data']['id']
        r = self.client.patch(f'{self.base}/doctors/{doctor_id}', {'phone': '0171'}, format='json')
        self.assertEqual(r.data['data']['phone'], '0171')
        self.assertEqual(self.client.delete(f'{self.base}/doctors/{doctor_id}').status_code, 200)
        self.assertEqual(self.client.delete(f'{self.base}/doctors/{doctor_id}').status_code, 404)

        r = self.client.post(f'{self.base}/services', {'name': 'CT Scan', 'type': 'Test'}, format='json')
        self.assertEqual(r.status_code, 201)
        service_id = r.data['data']['id']
        self.assertEqual(self.client.delete(f'{self.base}/services/{service_id}').status_code, 200)

    def test_beds_and_blood_bank(self):
        r = self.client.put(f'{self.base}/beds', {'beds': [{'name': 'ICU', 'total': 2, 'available': 3}]}, format='json')
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data['error']['field'], 'beds[0].available')

        r = self.client.put(f'{self.base}/beds', {'beds': [{'name': 'ICU', 'total': 4, 'available': 1}]}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['data'][0]['total'], 4)

        r = self.client.put(f'{self.base}/blood-bank', {'bloodBank': [{'bloodGroup': 'X+', 'units': 1}]}, format='json')
        self.assertEqual(r.status_code, 400)
        r = self.client.put(f'{self.base}/blood-bank', {'bloodBank': [{'bloodGroup': 'B-', 'units': 2.5}]}, format='json')
        self.assertEqual(r.data['data'], [{'id': r.data['data'][0]['id'], 'bloodGroup': 'B-', 'units': 2.5}])

        r = self.client.patch(f'{self.base}/notes', {'notes': 'Trauma center'}, format='json')
        self.assertEqual(r.data['data']['notes'], 'Trauma center')


class HealthTests(APITestCase):
    def test_healthz_and_index(self):
        r = self.client.get('/healthz')
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()['db'])
        r = self.client.get('/api')
        self.assertIn('donors', r.json()['endpoints'])
