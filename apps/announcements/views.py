"""
Announcements.

GET    /api/admin/announcements/                  - All announcements (ADMIN+)
POST   /api/admin/announcements/                  - Create
PATCH  /api/admin/announcements/{id}/             - Update
DELETE /api/admin/announcements/{id}/             - Delete
GET    /api/newsroom/announcements/               - Current, undismissed, for staff
POST   /api/newsroom/announcements/{id}/dismiss/  - Dismiss (idempotent)
GET    /api/radio/announcements/                  - Current, undismissed, for radio users
POST   /api/radio/announcements/{id}/dismiss/     - Dismiss (idempotent)
"""

from django.db.models import Case, Count, IntegerField, Value, When
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.audit import AuditAction, log_audit
from apps.core.pagination import LargePagination
from apps.core.permissions import IsAdminOrAbove, IsRadioUser, IsStaff

from .models import Announcement, AnnouncementDismissal, AnnouncementPriority, AnnouncementTargetAudience
from .serializers import AdminAnnouncementSerializer, AnnouncementSerializer

PRIORITY_ORDER = Case(
    When(priority=AnnouncementPriority.HIGH, then=Value(0)),
    When(priority=AnnouncementPriority.MEDIUM, then=Value(1)),
    default=Value(2),
    output_field=IntegerField(),
)


class AdminAnnouncementViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdminOrAbove]
    serializer_class = AdminAnnouncementSerializer
    pagination_class = LargePagination
    results_key = 'announcements'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return Announcement.objects.select_related('author').annotate(
            dismissal_count=Count('dismissals'),
        ).order_by('-created_at')

    def retrieve(self, request, *args, **kwargs):
        return Response({'announcement': self.get_serializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = serializer.save(author=request.user)
        log_audit(
            request.user,
            AuditAction.ANNOUNCEMENT_CREATE,
            'Announcement',
            announcement.id,
            metadata={'title': announcement.title, 'target_audience': announcement.target_audience},
            request=request,
        )
        return Response({'announcement': self.get_serializer(announcement).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        announcement = serializer.save()
        log_audit(
            request.user,
            AuditAction.ANNOUNCEMENT_UPDATE,
            'Announcement',
            announcement.id,
            metadata={'fields': sorted(serializer.validated_data)},
            request=request,
        )
        return Response({'announcement': self.get_serializer(announcement).data})

    def perform_destroy(self, instance):
        log_audit(
            self.request.user,
            AuditAction.ANNOUNCEMENT_DELETE,
            'Announcement',
            instance.id,
            metadata={'title': instance.title},
            request=self.request,
        )
        instance.delete()


class AudienceAnnouncementViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Announcements a signed-in user has not dismissed yet."""

    serializer_class = AnnouncementSerializer
    pagination_class = LargePagination
    results_key = 'announcements'
    audience = None

    def get_queryset(self):
        queryset = Announcement.objects.select_related('author').current().for_audience(self.audience)
        if self.action == 'list':
            queryset = queryset.undismissed_by(self.request.user)
        return queryset.order_by(PRIORITY_ORDER, '-created_at')

    @action(detail=True, methods=['post'])
    def dismiss(self, request, pk=None):
        announcement = self.get_object()
        AnnouncementDismissal.objects.get_or_create(announcement=announcement, user=request.user)
        return Response({'success': True, 'message': 'Announcement dismissed'})


class NewsroomAnnouncementViewSet(AudienceAnnouncementViewSet):
    permission_classes = [IsStaff]
    audience = AnnouncementTargetAudience.NEWSROOM


class RadioAnnouncementViewSet(AudienceAnnouncementViewSet):
    permission_classes = [IsRadioUser]
    audience = AnnouncementTargetAudience.RADIO
