"""
Tests for the audit trail and best-effort real-time publishing.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
from django.test import RequestFactory

from apps.core.audit import REDACTED, get_client_ip, log_audit, sanitize_metadata
from apps.core.models import AuditLog
from apps.core.realtime import Channels, EventType, create_event, publish_event, publish_on_commit


# ============================================================================
# Audit
# ============================================================================

class TestSanitizeMetadata:

    def test_redacts_sensitive_keys(self):
        cleaned = sanitize_metadata({
            'email': 'a@b.test',
            'password': 'hunter2',
            'resetToken': 'abc',
            'nested': {'api_key': 'k', 'title': 'ok'},
            'items': [{'client_secret': 's'}],
        })

        assert cleaned == {
            'email': 'a@b.test',
            'password': REDACTED,
            'resetToken': REDACTED,
            'nested': {'api_key': REDACTED, 'title': 'ok'},
            'items': [{'client_secret': REDACTED}],
        }

    def test_scalars_pass_through(self):
        assert sanitize_metadata('plain') == 'plain'


class TestClientIp:

    def test_forwarded_for_first_hop(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        assert get_client_ip(request) == '10.0.0.1'

    def test_remote_addr(self):
        assert get_client_ip(RequestFactory().get('/')) == '127.0.0.1'

    def test_no_request(self):
        assert get_client_ip(None) == ''


@pytest.mark.django_db
class TestLogAudit:

    def test_records_entry(self, make_staff):
        user = make_staff()
        request = RequestFactory().get('/', HTTP_USER_AGENT='pytest')

        entry = log_audit(user, 'story.create', 'Story', 'abc', metadata={'token': 't'}, request=request)

        assert entry.user == user
        assert entry.metadata == {'token': REDACTED}
        assert entry.user_agent == 'pytest'

    def test_anonymous_user_is_stored_as_system(self):
        from django.contrib.auth.models import AnonymousUser

        entry = log_audit(AnonymousUser(), 'auth.login_failed', metadata={'email': 'x@y.test'})

        assert entry.user is None

    def test_admin_lists_logs(self, client_for, admin_user, journalist):
        log_audit(journalist, 'story.create', 'Story', '1')
        log_audit(journalist, 'auth.login', 'User', str(journalist.id))

        body = client_for(admin_user).get('/api/admin/audit-logs/', {'action': 'story.'}).json()

        assert [log['action'] for log in body['logs']] == ['story.create']
        assert AuditLog.objects.count() == 2

    def test_audit_logs_admin_only(self, client_for, editor):
        assert client_for(editor).get('/api/admin/audit-logs/').status_code == 403


# ============================================================================
# Real-time
# ============================================================================

@pytest.fixture
def ably(settings):
    settings.ABLY_ENABLED = True
    settings.ABLY_API_KEY = 'app.key:secret'
    settings.ABLY_REST_URL = 'https://rest.example.test'
    return settings


class TestCreateEvent:

    def test_shape(self):
        event = create_event(EventType.STORY_CREATED, 'story', 42, user_id=7, data={'title': 'x'})

        assert event['type'] == 'story:created'
        assert event['entityId'] == '42'
        assert event['userId'] == '7'
        assert event['data'] == {'title': 'x'}
        assert 'metadata' not in event


class TestPublishEvent:

    def test_disabled_is_a_no_op(self, settings):
        settings.ABLY_ENABLED = False

        with patch('apps.core.realtime.requests.post') as post:
            assert publish_event(Channels.STORIES, {'type': 'story:created'}) is False
        post.assert_not_called()

    def test_posts_to_channel(self, ably):
        with patch('apps.core.realtime.requests.post') as post:
            post.return_value = MagicMock(status_code=201)
            assert publish_event(Channels.STORIES, {'type': 'story:created'}) is True

        url = post.call_args.args[0]
        assert url == 'https://rest.example.test/channels/newsroom%3Astories/messages'
        assert post.call_args.kwargs['auth'] == ('app.key', 'secret')
        assert post.call_args.kwargs['json']['name'] == 'story:created'

    def test_transport_error_swallowed(self, ably):
        with patch('apps.core.realtime.requests.post', side_effect=requests.ConnectionError('down')):
            assert publish_event(Channels.STORIES, {'type': 'story:created'}) is False

    def test_http_error_swallowed(self, ably):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError('500')
        with patch('apps.core.realtime.requests.post', return_value=response):
            assert publish_event(Channels.BULLETINS, {'type': 'bulletin:published'}) is False

    @pytest.mark.django_db(transaction=True)
    def test_on_commit_defers(self, ably):
        from django.db import transaction

        with patch('apps.core.realtime.publish_event') as publish:
            with transaction.atomic():
                publish_on_commit(Channels.SHOWS, {'type': 'show:created'})
                publish.assert_not_called()
            publish.assert_called_once_with(Channels.SHOWS, {'type': 'show:created'})


@pytest.mark.django_db
class TestRealtimeToken:

    def test_disabled_is_503(self, client_for, journalist):
        response = client_for(journalist).post('/api/realtime/token/')

        assert response.status_code == 503
        assert response.json()['error']['code'] == 'SERVICE_UNAVAILABLE'

    def test_returns_token(self, ably, client_for, journalist):
        token = {'token': 'abc', 'expires': 1}
        with patch('apps.core.views.request_token', return_value=token) as request_token:
            response = client_for(journalist).post('/api/realtime/token/')

        assert response.status_code == 200
        assert response.json() == token
        request_token.assert_called_once_with(client_id=str(journalist.id))
