"""
Health checks, metrics, admin trails and real-time token views.
"""

import logging

import requests
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import ServiceUnavailableError
from apps.core.filters import AuditLogFilter, EmailLogFilter
from apps.core.metrics import metrics_view
from apps.core.models import AuditLog, EmailLog
from apps.core.observability import HealthStatus, health_checker
from apps.core.pagination import AuditPagination, StandardPagination
from apps.core.params import filter_datetime_range
from apps.core.permissions import IsActiveUser, IsAdminOrAbove
from apps.core.realtime import is_realtime_enabled, request_token
from apps.core.serializers import AuditLogSerializer, EmailLogSerializer

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """
    Health check endpoint.

    GET /health/ - Run all health checks
    GET /health/<check_name>/ - Run specific health check
    """

    def get(self, request, check_name=None):
        if check_name:
            if check_name not in health_checker.list_checks():
                return JsonResponse({"status": "unknown", "message": f"No check named {check_name}"}, status=404)
            result = health_checker.check(check_name)
            status_code = 200 if result.status == HealthStatus.HEALTHY else 503
            return JsonResponse({
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }, status=status_code)

        results = health_checker.check_all()
        status_code = 200 if results["status"] == "healthy" else 503
        return JsonResponse(results, status=status_code)


@method_decorator(csrf_exempt, name='dispatch')
class LivenessView(View):
    """Returns 200 while the process is up."""

    def get(self, request):
        return JsonResponse({"status": "alive"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessView(View):
    """
    Returns 200 once the database and cache answer.
    """

    def get(self, request):
        for name in ("database", "cache"):
            result = health_checker.check(name)
            if result.status == HealthStatus.UNHEALTHY:
                return JsonResponse({
                    "status": "not_ready",
                    "check": name,
                    "reason": result.message,
                }, status=503)
        return JsonResponse({"status": "ready"})


@method_decorator(csrf_exempt, name='dispatch')
class MetricsView(View):
    """Prometheus exposition format."""

    def get(self, request):
        return metrics_view(request)


class AuditLogListView(generics.ListAPIView):
    """
    GET /api/admin/audit-logs/

    Query params: user, action (prefix match), entity_type, entity_id, from, to
    """
    permission_classes = [IsAdminOrAbove]
    serializer_class = AuditLogSerializer
    pagination_class = AuditPagination
    results_key = 'logs'
    filterset_class = AuditLogFilter

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('user')
        queryset = filter_datetime_range(queryset, 'created_at', self.request.query_params)
        return queryset.order_by('-created_at')


class EmailLogListView(generics.ListAPIView):
    """
    GET /api/admin/emails/

    Query params: type, status, to
    """
    permission_classes = [IsAdminOrAbove]
    serializer_class = EmailLogSerializer
    pagination_class = StandardPagination
    results_key = 'emails'
    filterset_class = EmailLogFilter
    queryset = EmailLog.objects.order_by('-created_at')


class RealtimeTokenView(APIView):
    """
    POST /api/realtime/token/

    Issues a subscribe-only token for the browser client.
    """
    permission_classes = [IsAuthenticated, IsActiveUser]

    def post(self, request):
        if not is_realtime_enabled():
            raise ServiceUnavailableError("Real-time updates are not enabled")
        try:
            token = request_token(client_id=str(request.user.id))
        except requests.RequestException as e:
            logger.error("Real-time token request failed: %s", e)
            raise ServiceUnavailableError("Real-time service unavailable")
        return Response(token)
