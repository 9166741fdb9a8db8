"""
Bulletin API (SUB_EDITOR+).

GET    /api/newsroom/bulletins/                     - List bulletins (status, language filters)
POST   /api/newsroom/bulletins/                     - Create bulletin
GET    /api/newsroom/bulletins/{id}/                - Bulletin with ordered stories
PATCH  /api/newsroom/bulletins/{id}/                - Edit fields or move status
DELETE /api/newsroom/bulletins/{id}/                - Delete (EDITOR+)
GET    /api/newsroom/bulletins/{id}/stories/        - Ordered stories
PUT    /api/newsroom/bulletins/{id}/stories/        - Replace ordered stories
GET    /api/newsroom/bulletins/schedules/           - List schedules
POST   /api/newsroom/bulletins/schedules/           - Create schedule
PATCH  /api/newsroom/bulletins/schedules/{id}/      - Update schedule
DELETE /api/newsroom/bulletins/schedules/{id}/      - Delete unused schedule
"""

import logging

from django.db.models import Count
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import MethodNotAllowed
from rest_framework.response import Response

from apps.core.audit import AuditAction, log_audit
from apps.core.choices import StaffRole
from apps.core.exceptions import ErrorCode, PermissionDeniedError, ValidationError
from apps.core.params import parse_bool
from apps.core.permissions import IsSubEditorOrAbove, has_role
from apps.core.throttling import DestructiveActionThrottle

from . import services
from .models import Bulletin, BulletinSchedule, BulletinStatus
from .serializers import (
    BulletinDetailSerializer,
    BulletinScheduleSerializer,
    BulletinSerializer,
    BulletinStoryEntrySerializer,
    BulletinStoryItemSerializer,
    BulletinWriteSerializer,
)

logger = logging.getLogger(__name__)


class BulletinViewSet(viewsets.ModelViewSet):
    permission_classes = [IsSubEditorOrAbove]
    serializer_class = BulletinSerializer
    results_key = 'bulletins'
    lookup_value_regex = '[0-9a-f-]+'
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_throttles(self):
        if self.action == 'destroy':
            return [DestructiveActionThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        queryset = Bulletin.objects.select_related(
            'author', 'reviewer', 'published_by', 'category', 'schedule',
        ).annotate(num_stories=Count('story_links'))
        params = self.request.query_params
        for param in ('status', 'language'):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})
        schedule_id = params.get('schedule_id')
        if schedule_id:
            queryset = queryset.filter(schedule_id=schedule_id)
        return queryset.order_by('-created_at')

    def _detail(self, bulletin, status_code=status.HTTP_200_OK):
        return Response({'bulletin': BulletinDetailSerializer(bulletin).data}, status=status_code)

    def retrieve(self, request, *args, **kwargs):
        return self._detail(self.get_object())

    def create(self, request, *args, **kwargs):
        serializer = BulletinWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bulletin = services.create_bulletin(request.user, dict(serializer.validated_data), request=request)
        return self._detail(bulletin, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        if request.method == 'PUT':
            raise MethodNotAllowed(request.method)
        bulletin = self.get_object()
        serializer = BulletinWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_bulletin(bulletin, request.user, dict(serializer.validated_data), request=request)
        return self._detail(self.get_object())

    def destroy(self, request, *args, **kwargs):
        if not has_role(request.user, StaffRole.EDITOR):
            raise PermissionDeniedError("Only editors can delete bulletins")
        bulletin = self.get_object()
        title = bulletin.title
        bulletin.delete()
        log_audit(
            request.user,
            AuditAction.BULLETIN_DELETE,
            'Bulletin',
            kwargs.get('pk'),
            metadata={'title': title},
            request=request,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get', 'put'])
    def stories(self, request, pk=None):
        bulletin = self.get_object()
        if request.method == 'PUT':
            if bulletin.status == BulletinStatus.PUBLISHED and not has_role(request.user, StaffRole.EDITOR):
                raise PermissionDeniedError("Only editors can change a published bulletin")
            serializer = BulletinStoryItemSerializer(data=request.data.get('stories', []), many=True)
            serializer.is_valid(raise_exception=True)
            services.set_bulletin_stories(bulletin, serializer.validated_data)
        links = bulletin.ordered_story_links()
        return Response({'stories': BulletinStoryEntrySerializer(links, many=True).data})


class BulletinScheduleViewSet(viewsets.ModelViewSet):
    permission_classes = [IsSubEditorOrAbove]
    serializer_class = BulletinScheduleSerializer
    results_key = 'schedules'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = BulletinSchedule.objects.select_related('created_by').annotate(
            bulletin_count=Count('bulletins'),
        )
        params = self.request.query_params
        for param in ('language', 'schedule_type'):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})
        is_active = parse_bool(params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        schedule = serializer.save(created_by=request.user)
        return Response({'schedule': BulletinScheduleSerializer(schedule).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        schedule = self.get_object()
        serializer = self.get_serializer(schedule, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'schedule': self.get_serializer(self.get_object()).data})

    def destroy(self, request, *args, **kwargs):
        schedule = self.get_object()
        if schedule.bulletins.exists():
            raise ValidationError(
                "Schedule has bulletins. Deactivate it instead.",
                code=ErrorCode.CONFLICT,
                details={'bulletins': schedule.bulletins.count()},
            )
        schedule.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
