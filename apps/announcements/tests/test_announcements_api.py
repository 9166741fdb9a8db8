"""
Tests for announcement management and audience feeds.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.announcements.models import Announcement, AnnouncementDismissal
from apps.core.models import AuditLog

ADMIN_URL = '/api/admin/announcements/'
NEWSROOM_URL = '/api/newsroom/announcements/'
RADIO_URL = '/api/radio/announcements/'


@pytest.fixture
def announce(admin_user):
    def _make(title, **fields):
        return Announcement.objects.create(title=title, message='Details inside', author=admin_user, **fields)
    return _make


@pytest.mark.django_db
class TestAdmin:

    def test_admin_creates(self, client_for, admin_user):
        response = client_for(admin_user).post(
            ADMIN_URL, {'title': 'Maintenance', 'message': 'Down at 22:00', 'priority': 'HIGH'}, format='json',
        )

        assert response.status_code == 201
        body = response.json()['announcement']
        assert body['target_audience'] == 'ALL'
        assert body['author']['id'] == str(admin_user.id)
        assert AuditLog.objects.filter(action='announcement.create').exists()

    def test_editor_forbidden(self, client_for, editor):
        assert client_for(editor).get(ADMIN_URL).status_code == 403

    def test_invalid_priority(self, client_for, admin_user):
        response = client_for(admin_user).post(
            ADMIN_URL, {'title': 'x', 'message': 'y', 'priority': 'CRITICAL'}, format='json',
        )
        assert response.status_code == 400

    def test_list_includes_dismissal_counts(self, client_for, admin_user, journalist, announce):
        item = announce('Welcome')
        AnnouncementDismissal.objects.create(announcement=item, user=journalist)

        body = client_for(admin_user).get(ADMIN_URL).json()

        assert body['announcements'][0]['dismissal_count'] == 1

    def test_update_and_delete(self, client_for, admin_user, announce):
        item = announce('Welcome')
        client = client_for(admin_user)

        patched = client.patch(f'{ADMIN_URL}{item.id}/', {'is_active': False}, format='json')
        deleted = client.delete(f'{ADMIN_URL}{item.id}/')

        assert patched.json()['announcement']['is_active'] is False
        assert deleted.status_code == 204
        assert AuditLog.objects.filter(action='announcement.delete').exists()


@pytest.mark.django_db
class TestFeeds:

    def test_newsroom_sees_current_staff_announcements(self, client_for, journalist, announce):
        announce('Everyone', priority='LOW')
        announce('Staff', target_audience='NEWSROOM', priority='HIGH')
        announce('Stations', target_audience='RADIO')
        announce('Old', expires_at=timezone.now() - timedelta(days=1))
        announce('Off', is_active=False)

        body = client_for(journalist).get(NEWSROOM_URL).json()

        assert [a['title'] for a in body['announcements']] == ['Staff', 'Everyone']

    def test_radio_feed(self, client_for, make_radio_user, announce):
        announce('Everyone')
        announce('Staff', target_audience='NEWSROOM')
        announce('Stations', target_audience='RADIO')

        body = client_for(make_radio_user()).get(RADIO_URL).json()

        assert sorted(a['title'] for a in body['announcements']) == ['Everyone', 'Stations']

    def test_dismiss_is_idempotent_and_hides(self, client_for, journalist, announce):
        item = announce('Everyone')
        client = client_for(journalist)

        first = client.post(f'{NEWSROOM_URL}{item.id}/dismiss/')
        second = client.post(f'{NEWSROOM_URL}{item.id}/dismiss/')

        assert first.status_code == second.status_code == 200
        assert AnnouncementDismissal.objects.filter(user=journalist).count() == 1
        assert client.get(NEWSROOM_URL).json()['announcements'] == []

    def test_radio_user_cannot_read_newsroom_feed(self, client_for, make_radio_user):
        assert client_for(make_radio_user()).get(NEWSROOM_URL).status_code == 403
