import os

import pytest
from django.conf import settings

from directory.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidId,
    NotFound,
    UploadFailed,
    ValidationError,
)
from directory.models import Donor, Hospital
from directory.services import registry, uploads

from .factories import (
    ambulance_payload,
    at,
    donor_payload,
    hospital_payload,
    make_donor,
    make_hospital,
)

pytestmark = pytest.mark.django_db


def _stored_files():
    root = settings.MEDIA_ROOT
    return [os.path.join(d, f) for d, _, files in os.walk(root) for f in files]


def test_register_donor_hashes_password_and_uploads_picture():
    donor = make_donor(email='  Rahim@Example.COM ')
    assert donor.email == 'rahim@example.com'
    assert donor.password != 'abc123'
    assert donor.is_active is True
    assert donor.picture.startswith(settings.MEDIA_URL)
    assert len(_stored_files()) == 1
    assert 'password' not in registry.format_registrant(donor)


def test_register_hospital_starts_unverified():
    hospital = make_hospital()
    assert hospital.is_verified is False
    assert hospital.license.endswith('.pdf')


def test_duplicate_email_is_case_insensitive():
    make_donor(email='a@x.com')
    with pytest.raises(DuplicateEmail):
        registry.register('donor', donor_payload(email='A@X.com'))
    assert Donor.objects.count() == 1


def test_same_email_allowed_across_kinds():
    make_donor(email='shared@x.com')
    hospital = make_hospital(email='shared@x.com')
    assert hospital.pk


@pytest.mark.parametrize('age, ok', [(17, False), (18, True), (65, True), (66, False)])
def test_donor_age_range(age, ok):
    payload = donor_payload(age=age)
    if ok:
        assert registry.register('donor', payload).age == age
    else:
        with pytest.raises(ValidationError) as exc:
            registry.register('donor', payload)
        assert exc.value.field == 'age'


@pytest.mark.parametrize('age, ok', [(17, False), (18, True), (70, True), (71, False)])
def test_ambulance_owner_age_range(age, ok):
    payload = ambulance_payload(age=age)
    if ok:
        assert registry.register('ambulance', payload).age == age
    else:
        with pytest.raises(ValidationError) as exc:
            registry.register('ambulance', payload)
        assert exc.value.field == 'age'


@pytest.mark.parametrize('password, ok', [
    ('abc123', True),
    ('abcdef', False),
    ('123456', False),
    ('ab12', False),
    ('ab1', False),
])
def test_password_policy(password, ok):
    payload = donor_payload(password=password)
    if ok:
        registry.register('donor', payload)
    else:
        with pytest.raises(ValidationError) as exc:
            registry.register('donor', payload)
        assert exc.value.field == 'password'


def test_missing_required_field_is_named():
    payload = donor_payload()
    del payload['bloodGroup']
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', payload)
    assert exc.value.field == 'bloodGroup'


def test_invalid_blood_group_rejected():
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', donor_payload(bloodGroup='X+'))
    assert exc.value.field == 'bloodGroup'


def test_address_or_location_required():
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', donor_payload(street='', city='', postcode=''))
    assert exc.value.field == 'location'


def test_partial_text_address_rejected():
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', donor_payload(postcode=''))
    assert exc.value.field == 'postcode'


def test_gps_only_registration_stores_geojson():
    donor = registry.register('donor', donor_payload(**at(23.8, 90.4)))
    assert donor.location == {'type': 'Point', 'coordinates': [90.4, 23.8]}
    assert donor.city == ''


def test_single_coordinate_rejected():
    payload = donor_payload(latitude=23.8)
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', payload)
    assert exc.value.field == 'longitude'


def test_out_of_range_coordinate_rejected():
    with pytest.raises(ValidationError) as exc:
        registry.register('donor', donor_payload(**at(95, 90.4)))
    assert exc.value.field == 'latitude'


def test_markup_is_stripped_from_text_fields():
    donor = make_donor(name='<b>Rahim</b>')
    assert donor.name == 'Rahim'


def test_validation_runs_before_upload(monkeypatch):
    calls = []
    monkeypatch.setattr(uploads, 'upload', lambda *a, **k: calls.append(a))
    with pytest.raises(ValidationError):
        registry.register('donor', donor_payload(age=10))
    assert calls == []


def test_upload_failure_aborts_registration(monkeypatch):
    def boom(content, folder):
        raise UploadFailed('storage down')
    monkeypatch.setattr(uploads, 'upload', boom)
    with pytest.raises(UploadFailed):
        registry.register('hospital', hospital_payload())
    assert Hospital.objects.count() == 0


def test_invalid_base64_is_upload_failure():
    with pytest.raises(UploadFailed):
        registry.register('donor', donor_payload(picture='***not base64***'))
    assert Donor.objects.count() == 0


def test_failed_insert_removes_uploaded_file(monkeypatch):
    def explode(**kwargs):
        raise RuntimeError('db down')
    monkeypatch.setattr(Donor.objects, 'create', explode)
    with pytest.raises(RuntimeError):
        registry.register('donor', donor_payload())
    assert _stored_files() == []


def test_forward_geocoding_attaches_location(monkeypatch):
    from directory.services import geocoding
    monkeypatch.setattr(geocoding, 'forward', lambda street, city, postcode: (23.75, 90.39))
    donor = make_donor()
    assert donor.location == {'type': 'Point', 'coordinates': [90.39, 23.75]}


def test_reverse_geocoding_fills_blank_city(monkeypatch):
    from directory.services import geocoding
    monkeypatch.setattr(geocoding, 'reverse', lambda lat, lng: 'Dhaka')
    donor = registry.register('donor', donor_payload(**at(23.8, 90.4)))
    assert donor.city == 'Dhaka'


def test_login_success_and_uniform_failures():
    make_donor(email='login@x.com', password='abc123')
    donor = registry.login('donor', 'LOGIN@x.com ', 'abc123')
    assert donor.email == 'login@x.com'

    with pytest.raises(InvalidCredentials) as wrong:
        registry.login('donor', 'login@x.com', 'wrong1')
    with pytest.raises(InvalidCredentials) as unknown:
        registry.login('donor', 'nobody@x.com', 'abc123')
    assert str(wrong.value.detail) == str(unknown.value.detail)


def test_login_requires_both_fields():
    with pytest.raises(ValidationError):
        registry.login('donor', '', 'abc123')
    with pytest.raises(ValidationError):
        registry.login('donor', 'a@x.com', None)


def test_login_is_scoped_to_kind():
    make_hospital(email='h@x.com')
    with pytest.raises(InvalidCredentials):
        registry.login('donor', 'h@x.com', 'abc123')


def test_get_by_id():
    donor = make_donor()
    assert registry.get_by_id('donor', str(donor.pk)) == donor
    with pytest.raises(InvalidId):
        registry.get_by_id('donor', 'not-a-uuid')
    with pytest.raises(NotFound):
        registry.get_by_id('donor', '00000000-0000-0000-0000-000000000000')


def test_update_profile_touches_only_supplied_fields():
    donor = make_donor(name='Old', city='Dhaka')
    updated = registry.update_profile('donor', donor.pk, {'name': 'New', 'bloodGroup': 'O-', 'password': 'x'})
    donor.refresh_from_db()
    assert updated.name == donor.name == 'New'
    assert donor.city == 'Dhaka'
    assert donor.blood_group == 'A+'


def test_update_profile_validates_touched_fields():
    donor = make_donor()
    with pytest.raises(ValidationError) as exc:
        registry.update_profile('donor', donor.pk, {'age': 70})
    assert exc.value.field == 'age'
    with pytest.raises(ValidationError):
        registry.update_profile('donor', donor.pk, {'name': ''})


def test_update_profile_sets_location():
    hospital = make_hospital()
    registry.update_profile('hospital', hospital.pk, {'latitude': 23.7, 'longitude': 90.3})
    hospital.refresh_from_db()
    assert hospital.point == (23.7, 90.3)


def test_update_profile_email_conflict():
    make_hospital(email='taken@x.com')
    other = make_hospital()
    with pytest.raises(DuplicateEmail):
        registry.update_profile('hospital', other.pk, {'email': 'TAKEN@x.com'})
    registry.update_profile('hospital', other.pk, {'email': other.email})


def test_change_password():
    donor = make_donor(password='abc123')
    with pytest.raises(InvalidCredentials):
        registry.change_password('donor', donor.pk, 'wrong1', 'xyz789')
    with pytest.raises(ValidationError) as exc:
        registry.change_password('donor', donor.pk, 'abc123', 'short')
    assert exc.value.field == 'newPassword'
    with pytest.raises(ValidationError):
        registry.change_password('donor', donor.pk, None, 'xyz789')
    with pytest.raises(NotFound):
        registry.change_password('donor', '00000000-0000-0000-0000-000000000000', 'abc123', 'xyz789')

    registry.change_password('donor', donor.pk, 'abc123', 'xyz789')
    assert registry.login('donor', donor.email, 'xyz789').pk == donor.pk
    with pytest.raises(InvalidCredentials):
        registry.login('donor', donor.email, 'abc123')


@pytest.mark.parametrize('value', ['true', 1, None, 'yes'])
def test_set_availability_requires_boolean(value):
    donor = make_donor()
    with pytest.raises(ValidationError):
        registry.set_availability(donor.pk, value)


def test_set_availability():
    donor = make_donor()
    assert registry.set_availability(donor.pk, False).is_active is False
    donor.refresh_from_db()
    assert donor.is_active is False
    assert registry.set_availability(str(donor.pk), True).is_active is True


def test_unknown_kind():
    with pytest.raises(ValidationError):
        registry.register('nurse', {})
