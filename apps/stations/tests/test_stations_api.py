"""
Tests for station administration.
"""

import pytest

from apps.accounts.models import User
from apps.core.choices import UserType
from apps.core.models import AuditLog
from apps.stations.models import Station


def station_payload(**overrides):
    data = {
        'name': 'Radio Khwezi',
        'province': 'KWAZULU_NATAL',
        'contact_email': 'studio@khwezi.test',
        'primary_contact': {
            'first_name': 'Sipho',
            'last_name': 'Dlamini',
            'email': 'sipho@khwezi.test',
            'password': 'station-pass-1',
        },
        'additional_users': [
            {'first_name': 'Lerato', 'last_name': 'Mokoena', 'email': 'lerato@khwezi.test', 'password': 'station-pass-2'},
        ],
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestStationCreate:
    url = '/api/stations/'

    def test_creates_station_and_users(self, client_for, admin_user):
        response = client_for(admin_user).post(self.url, station_payload(), format='json')

        assert response.status_code == 201
        station = Station.objects.get(name='Radio Khwezi')
        assert station.allowed_languages == ['English', 'Afrikaans', 'Xhosa']
        users = station.users.order_by('email')
        assert [u.email for u in users] == ['lerato@khwezi.test', 'sipho@khwezi.test']
        assert all(u.user_type == UserType.RADIO for u in users)
        assert station.primary_contacts().get().email == 'sipho@khwezi.test'
        assert AuditLog.objects.filter(action='station.create').exists()

    def test_duplicate_user_email_creates_nothing(self, client_for, admin_user, journalist):
        payload = station_payload()
        payload['additional_users'][0]['email'] = journalist.email

        response = client_for(admin_user).post(self.url, payload, format='json')

        assert response.status_code == 400
        assert not Station.objects.filter(name='Radio Khwezi').exists()

    def test_duplicate_station_name(self, client_for, admin_user, make_station):
        make_station(name='Radio Khwezi')
        response = client_for(admin_user).post(self.url, station_payload(), format='json')
        assert response.status_code == 400

    def test_editor_forbidden(self, client_for, editor):
        assert client_for(editor).post(self.url, station_payload(), format='json').status_code == 403


@pytest.mark.django_db
class TestStationManagement:

    def test_list_includes_counts_and_contacts(self, client_for, admin_user, make_radio_user, make_station):
        station = make_station(name='Alpha FM')
        make_radio_user(station=station, is_primary_contact=True)
        make_radio_user(station=station)

        body = client_for(admin_user).get('/api/stations/', {'query': 'alpha'}).json()

        assert body['pagination']['total'] == 1
        assert body['stations'][0]['user_count'] == 2
        assert len(body['stations'][0]['primary_contacts']) == 1

    def test_delete_removes_users(self, client_for, admin_user, make_radio_user, make_station):
        station = make_station()
        user = make_radio_user(station=station)

        response = client_for(admin_user).delete(f'/api/stations/{station.id}/')

        assert response.status_code == 204
        assert not User.objects.filter(pk=user.pk).exists()

    def test_primary_contact_is_exclusive(self, client_for, admin_user, make_radio_user, make_station):
        station = make_station()
        old = make_radio_user(station=station, is_primary_contact=True)
        new = make_radio_user(station=station)

        response = client_for(admin_user).post(
            f'/api/stations/{station.id}/primary-contact/', {'user_id': str(new.id)}, format='json',
        )

        assert response.status_code == 200
        old.refresh_from_db()
        new.refresh_from_db()
        assert (old.is_primary_contact, new.is_primary_contact) == (False, True)

    def test_primary_contact_from_other_station_rejected(self, client_for, admin_user, make_radio_user, make_station):
        station = make_station()
        outsider = make_radio_user()

        response = client_for(admin_user).post(
            f'/api/stations/{station.id}/primary-contact/', {'user_id': str(outsider.id)}, format='json',
        )

        assert response.status_code == 400

    def test_add_station_user(self, client_for, admin_user, make_station):
        station = make_station()
        response = client_for(admin_user).post(
            f'/api/stations/{station.id}/users/',
            {'first_name': 'Ann', 'last_name': 'Le Roux', 'email': 'ann@station.test', 'password': 'pass-word-9'},
            format='json',
        )
        assert response.status_code == 201
        assert station.users.filter(email='ann@station.test').exists()
