"""
Prometheus Metrics for Newskoop.

Metrics included:
- http_requests_total: Counter for served HTTP requests by status class
- http_request_duration_seconds: Histogram for request latency
- workflow_transitions_total: Counter for story stage/status changes
- content_published_total: Counter for published stories/episodes/bulletins
- emails_total: Counter for outbound email by type and outcome
- uploads_total: Counter for object-storage uploads by kind and outcome
- realtime_publish_total: Counter for real-time publishes by outcome

Cardinality Guidelines:
- All labels MUST be low-cardinality (small, bounded set of values)
- ALLOWED label values: status enums, action names, content kinds
- FORBIDDEN label values: IDs, slugs, emails, user-generated strings
"""

import logging

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

http_requests_total = Counter(
    'newskoop_http_requests_total',
    'Total HTTP requests served',
    ['status_class']  # 2xx, 3xx, 4xx, 5xx, other
)

http_request_duration_seconds = Histogram(
    'newskoop_http_request_duration_seconds',
    'HTTP request duration',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

workflow_transitions_total = Counter(
    'newskoop_workflow_transitions_total',
    'Story workflow transitions',
    ['action']  # submit_for_review, approve_story, status_change ...
)

content_published_total = Counter(
    'newskoop_content_published_total',
    'Content items published',
    ['kind', 'trigger']  # kind: story/episode/bulletin, trigger: manual/scheduled/cascade
)

emails_total = Counter(
    'newskoop_emails_total',
    'Outbound emails',
    ['type', 'status']  # status: sent/failed
)

uploads_total = Counter(
    'newskoop_uploads_total',
    'Object storage uploads',
    ['kind', 'status']  # kind: audio/image, status: success/rejected/error
)

realtime_publish_total = Counter(
    'newskoop_realtime_publish_total',
    'Real-time event publishes',
    ['status']  # sent/skipped/error
)


# ============================================================================
# Helper Functions
# ============================================================================

def _status_code_to_class(status_code) -> str:
    """Convert status code to class label (2xx, 3xx, etc.)."""
    try:
        code = int(status_code)
    except (ValueError, TypeError):
        return 'other'
    if 200 <= code < 300:
        return '2xx'
    if 300 <= code < 400:
        return '3xx'
    if 400 <= code < 500:
        return '4xx'
    if 500 <= code < 600:
        return '5xx'
    return 'other'


def increment_http_request(status_code):
    http_requests_total.labels(status_class=_status_code_to_class(status_code)).inc()


def observe_http_duration(duration_seconds):
    http_request_duration_seconds.observe(duration_seconds)


def increment_workflow_transition(action):
    workflow_transitions_total.labels(action=action).inc()


def increment_content_published(kind, trigger='manual', count=1):
    content_published_total.labels(kind=kind, trigger=trigger).inc(count)


def increment_email(email_type, status):
    emails_total.labels(type=email_type, status=status).inc()


def increment_upload(kind, status):
    uploads_total.labels(kind=kind, status=status).inc()


def increment_realtime_publish(status):
    realtime_publish_total.labels(status=status).inc()


# ============================================================================
# Metrics View
# ============================================================================

def metrics_view(request):
    """Expose metrics in Prometheus text format."""
    from django.http import HttpResponse

    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
