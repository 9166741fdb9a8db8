"""
URL patterns for core observability, admin trails and real-time endpoints.
"""

from django.urls import path
from .views import (
    AuditLogListView,
    EmailLogListView,
    HealthCheckView,
    LivenessView,
    MetricsView,
    ReadinessView,
    RealtimeTokenView,
)

app_name = 'core'

urlpatterns = [
    # Health checks
    path('health/', HealthCheckView.as_view(), name='health'),
    path('health/<str:check_name>/', HealthCheckView.as_view(), name='health-check'),

    # Kubernetes probes
    path('livez/', LivenessView.as_view(), name='liveness'),
    path('readyz/', ReadinessView.as_view(), name='readiness'),

    # Metrics
    path('metrics/', MetricsView.as_view(), name='metrics'),
]

# Mounted at /api/admin/ in main urls.py
admin_urlpatterns = [
    path('audit-logs/', AuditLogListView.as_view(), name='audit-log-list'),
    path('emails/', EmailLogListView.as_view(), name='email-log-list'),
]

# Mounted at /api/realtime/ in main urls.py
realtime_urlpatterns = [
    path('token/', RealtimeTokenView.as_view(), name='realtime-token'),
]
