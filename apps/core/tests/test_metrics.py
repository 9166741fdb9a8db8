"""
Tests for Prometheus Metrics - Smoke Tests.

Tests cover:
- Metric registration
- Label cardinality limits
- Counter increments
- Histogram observations
- The /metrics/ endpoint
"""

import pytest
from prometheus_client import REGISTRY


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


# ============================================================================
# Metric Registration Tests
# ============================================================================

class TestMetricRegistration:
    """All Newskoop metrics are registered with the default registry."""

    @pytest.mark.parametrize('name', [
        'http_requests_total',
        'http_request_duration_seconds',
        'workflow_transitions_total',
        'content_published_total',
        'emails_total',
        'uploads_total',
        'realtime_publish_total',
    ])
    def test_metric_exists(self, name):
        from apps.core import metrics

        assert getattr(metrics, name) is not None

    def test_names_are_prefixed(self):
        from apps.core.metrics import content_published_total

        assert content_published_total._name == 'newskoop_content_published'


# ============================================================================
# Label Cardinality Tests
# ============================================================================

class TestLabelCardinality:
    """Labels stay low-cardinality: no ids, slugs or emails."""

    def test_http_requests_uses_status_class(self):
        from apps.core.metrics import http_requests_total

        assert http_requests_total._labelnames == ('status_class',)

    def test_content_published_labels(self):
        from apps.core.metrics import content_published_total

        assert content_published_total._labelnames == ('kind', 'trigger')

    def test_no_identifier_labels(self):
        from apps.core import metrics

        forbidden = {'id', 'story_id', 'user_id', 'email', 'slug', 'path'}
        for counter in (
            metrics.workflow_transitions_total,
            metrics.emails_total,
            metrics.uploads_total,
            metrics.realtime_publish_total,
        ):
            assert not forbidden & set(counter._labelnames)


# ============================================================================
# Counter Increment Tests
# ============================================================================

class TestCounterIncrements:

    def test_increment_http_request(self):
        from apps.core.metrics import increment_http_request

        before = sample('newskoop_http_requests_total', status_class='2xx')
        increment_http_request(201)
        assert sample('newskoop_http_requests_total', status_class='2xx') == before + 1

    def test_increment_http_request_error(self):
        from apps.core.metrics import increment_http_request

        before = sample('newskoop_http_requests_total', status_class='5xx')
        increment_http_request(503)
        assert sample('newskoop_http_requests_total', status_class='5xx') == before + 1

    def test_increment_content_published_by_count(self):
        """Cascading publishes add every story at once."""
        from apps.core.metrics import increment_content_published

        before = sample('newskoop_content_published_total', kind='story', trigger='cascade')
        increment_content_published('story', trigger='cascade', count=3)
        assert sample('newskoop_content_published_total', kind='story', trigger='cascade') == before + 3

    def test_increment_workflow_transition(self):
        from apps.core.metrics import increment_workflow_transition

        before = sample('newskoop_workflow_transitions_total', action='approve_story')
        increment_workflow_transition('approve_story')
        assert sample('newskoop_workflow_transitions_total', action='approve_story') == before + 1

    def test_increment_email_and_upload(self):
        from apps.core.metrics import increment_email, increment_upload

        email_before = sample('newskoop_emails_total', type='welcome', status='failed')
        upload_before = sample('newskoop_uploads_total', kind='audio', status='rejected')

        increment_email('welcome', 'failed')
        increment_upload('audio', 'rejected')

        assert sample('newskoop_emails_total', type='welcome', status='failed') == email_before + 1
        assert sample('newskoop_uploads_total', kind='audio', status='rejected') == upload_before + 1


# ============================================================================
# Histogram Tests
# ============================================================================

class TestHistograms:

    def test_observe_http_duration(self):
        from apps.core.metrics import observe_http_duration

        before = sample('newskoop_http_request_duration_seconds_count')
        observe_http_duration(0.2)
        assert sample('newskoop_http_request_duration_seconds_count') == before + 1

    def test_observe_zero_duration(self):
        from apps.core.metrics import observe_http_duration

        observe_http_duration(0)


# ============================================================================
# Status Code Helper Tests
# ============================================================================

class TestStatusCodeToClass:

    @pytest.mark.parametrize('code,expected', [
        (200, '2xx'),
        (204, '2xx'),
        (302, '3xx'),
        (404, '4xx'),
        (500, '5xx'),
        ('200', '2xx'),
        (100, 'other'),
        (None, 'other'),
        ('abc', 'other'),
    ])
    def test_mapping(self, code, expected):
        from apps.core.metrics import _status_code_to_class

        assert _status_code_to_class(code) == expected


# ============================================================================
# Endpoint Tests
# ============================================================================

@pytest.mark.django_db
class TestMetricsEndpoint:

    def test_metrics_text_format(self, client):
        response = client.get('/metrics/')

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/plain')
        assert b'newskoop_http_requests_total' in response.content
