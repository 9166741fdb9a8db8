"""
Tests for login, logout, password reset and set-password.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core import mail
from django.utils import timezone

from apps.accounts.models import User
from apps.core.models import AuditLog, EmailLog


@pytest.mark.django_db
class TestLogin:
    url = '/api/auth/login/'

    def test_login_returns_user_and_stamps_last_login(self, api_client, journalist):
        response = api_client.post(self.url, {'email': journalist.email, 'password': 'password123'}, format='json')

        assert response.status_code == 200
        assert response.json()['user']['email'] == journalist.email
        journalist.refresh_from_db()
        assert journalist.last_login_at is not None
        assert AuditLog.objects.filter(action='auth.login', user=journalist).exists()

    def test_email_is_case_insensitive(self, api_client, journalist):
        response = api_client.post(
            self.url, {'email': journalist.email.upper(), 'password': 'password123'}, format='json',
        )
        assert response.status_code == 200

    def test_bad_password_is_401_and_audited(self, api_client, journalist):
        response = api_client.post(self.url, {'email': journalist.email, 'password': 'wrong'}, format='json')

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'INVALID_CREDENTIALS'
        assert AuditLog.objects.filter(action='auth.login_failed', user=journalist).exists()

    def test_inactive_user_cannot_log_in(self, api_client, make_staff):
        user = make_staff(is_active=False)
        response = api_client.post(self.url, {'email': user.email, 'password': 'password123'}, format='json')
        assert response.status_code == 401

    def test_me_requires_authentication(self, api_client):
        assert api_client.get('/api/auth/me/').status_code in (401, 403)

    def test_me_patch_updates_profile_fields_only(self, client_for, journalist):
        response = client_for(journalist).patch(
            '/api/auth/me/', {'first_name': 'Thandi', 'staff_role': 'SUPERADMIN'}, format='json',
        )

        assert response.status_code == 200
        journalist.refresh_from_db()
        assert journalist.first_name == 'Thandi'
        assert journalist.staff_role == 'JOURNALIST'


@pytest.mark.django_db
class TestPasswordReset:
    url = '/api/auth/reset-password/'

    def test_unknown_email_gets_same_message(self, api_client, journalist):
        known = api_client.post(self.url, {'email': journalist.email}, format='json')
        unknown = api_client.post(self.url, {'email': 'nobody@newskoop.test'}, format='json')

        assert known.status_code == unknown.status_code == 200
        assert known.json()['message'] == unknown.json()['message']
        assert len(mail.outbox) == 1

    def test_request_stores_token_and_logs_email(self, api_client, journalist):
        api_client.post(self.url, {'email': journalist.email}, format='json')

        journalist.refresh_from_db()
        assert journalist.reset_token
        assert journalist.reset_token in mail.outbox[0].body
        log = EmailLog.objects.get(user=journalist)
        assert log.type == EmailLog.Type.PASSWORD_RESET
        assert log.status == EmailLog.Status.SENT

    def test_email_failure_is_500(self, api_client, journalist):
        with patch('django.core.mail.EmailMultiAlternatives.send', side_effect=OSError('smtp down')):
            response = api_client.post(self.url, {'email': journalist.email}, format='json')

        assert response.status_code == 500
        assert response.json()['error']['code'] == 'EMAIL_DELIVERY_FAILED'

    def test_confirm_sets_password_and_clears_token(self, api_client, journalist):
        token = journalist.issue_reset_token()

        response = api_client.patch(self.url, {'token': token, 'new_password': 'Fresh-Pass-2024'}, format='json')

        assert response.status_code == 200
        journalist.refresh_from_db()
        assert journalist.check_password('Fresh-Pass-2024')
        assert journalist.reset_token is None

    def test_expired_token_rejected(self, api_client, journalist):
        token = journalist.issue_reset_token()
        User.objects.filter(pk=journalist.pk).update(reset_token_expires_at=timezone.now() - timedelta(minutes=1))

        response = api_client.patch(self.url, {'token': token, 'new_password': 'Fresh-Pass-2024'}, format='json')

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_TOKEN'

    def test_short_password_rejected(self, api_client, journalist):
        token = journalist.issue_reset_token()
        response = api_client.patch(self.url, {'token': token, 'new_password': 'short'}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestSetPassword:
    url = '/api/auth/set-password/'

    def test_current_password_required(self, client_for, journalist):
        response = client_for(journalist).post(self.url, {'new_password': 'Another-Pass-77'}, format='json')
        assert response.status_code == 400

    def test_first_login_skips_current_password(self, client_for, make_staff):
        user = make_staff(must_change_password=True)

        response = client_for(user).post(self.url, {'new_password': 'Another-Pass-77'}, format='json')

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.must_change_password is False
        assert user.check_password('Another-Pass-77')


@pytest.mark.django_db
def test_purge_expired_reset_tokens(journalist, editor):
    from apps.accounts.tasks import purge_expired_reset_tokens

    journalist.issue_reset_token()
    editor.issue_reset_token()
    User.objects.filter(pk=journalist.pk).update(reset_token_expires_at=timezone.now() - timedelta(hours=2))

    result = purge_expired_reset_tokens()

    assert result == {'cleared': 1}
    journalist.refresh_from_db()
    editor.refresh_from_db()
    assert journalist.reset_token is None
    assert editor.reset_token is not None
