"""
Shows and episodes.

GET    /api/newsroom/shows/                                   - List shows
POST   /api/newsroom/shows/                                   - Create show
GET    /api/newsroom/shows/{id}/                              - Show detail
PATCH  /api/newsroom/shows/{id}/                              - Update show (creator SUB_EDITOR or EDITOR+)
DELETE /api/newsroom/shows/{id}/                              - Delete show (EDITOR+)
POST   /api/newsroom/shows/{id}/cover/                        - Upload cover image
GET    /api/newsroom/shows/{id}/episodes/                     - List episodes
POST   /api/newsroom/shows/{id}/episodes/                     - Create episode
GET    /api/newsroom/shows/{id}/episodes/{eid}/               - Episode detail
PATCH  /api/newsroom/shows/{id}/episodes/{eid}/               - Update episode
DELETE /api/newsroom/shows/{id}/episodes/{eid}/               - Delete episode
POST   /api/newsroom/shows/{id}/episodes/{eid}/audio/         - Upload and link audio
POST   /api/newsroom/shows/{id}/episodes/{eid}/publish/       - Publish now or schedule
DELETE /api/newsroom/shows/{id}/episodes/{eid}/publish/       - Unpublish
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from apps.core import storage
from apps.core.audit import AuditAction, log_audit
from apps.core.exceptions import ErrorCode, NotFoundError, PermissionDeniedError, ValidationError
from apps.core.params import parse_bool, parse_datetime_param
from apps.core.permissions import (
    IsStaff,
    can_delete_show,
    can_edit_show,
    can_publish_episode,
    get_user_role,
    has_show_permission,
)
from apps.core.realtime import Channels, EventType, create_event, publish_on_commit
from apps.core.throttling import DestructiveActionThrottle, UploadThrottle
from apps.media.models import AudioClip

from .models import Episode, EpisodeStatus, Show
from .serializers import EpisodeSerializer, EpisodeWriteSerializer, ShowSerializer, ShowWriteSerializer
from .services import publish_episode

logger = logging.getLogger(__name__)

EPISODE_PATH = r'episodes/(?P<episode_id>[0-9a-f-]+)'


class ShowViewSet(viewsets.ModelViewSet):
    permission_classes = [IsStaff]
    serializer_class = ShowSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = 'shows'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_throttles(self):
        if self.action == 'destroy':
            return [DestructiveActionThrottle()]
        if self.action in ('cover', 'episode_audio'):
            return [UploadThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        queryset = Show.objects.select_related('created_by', 'category').prefetch_related(
            'tags', 'classifications',
        ).annotate(episode_count=Count('episodes'))
        params = self.request.query_params
        query = params.get('query')
        if query:
            queryset = queryset.filter(Q(title__icontains=query) | Q(description__icontains=query))
        category = params.get('category') or params.get('category_id')
        if category:
            queryset = queryset.filter(category_id=category)
        is_active = parse_bool(params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset.order_by('title')

    def _role(self):
        return get_user_role(self.request.user)

    def _show_response(self, show, status_code=status.HTTP_200_OK):
        return Response({'show': ShowSerializer(self.get_queryset().get(pk=show.pk)).data}, status=status_code)

    def _save_show(self, show, data):
        tags = data.pop('tags', None)
        classifications = data.pop('classifications', None)
        if 'title' in data and data['title'] != show.title:
            show.slug = ''
        for field, value in data.items():
            setattr(show, field, value)
        show.save()
        if tags is not None:
            show.tags.set(tags)
        if classifications is not None:
            show.classifications.set(classifications)
        return show

    def retrieve(self, request, *args, **kwargs):
        return Response({'show': ShowSerializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        if not has_show_permission(self._role(), 'create'):
            raise PermissionDeniedError("Insufficient permissions to create shows")
        serializer = ShowWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            show = self._save_show(Show(created_by=request.user), dict(serializer.validated_data))
            log_audit(request.user, AuditAction.SHOW_CREATE, 'Show', show.id, metadata={'title': show.title}, request=request)
            publish_on_commit(
                Channels.SHOWS,
                create_event(EventType.SHOW_CREATED, 'show', show.id, request.user.id, data={'title': show.title}),
            )
        return self._show_response(show, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        show = self.get_object()
        if not can_edit_show(self._role(), show.created_by_id, request.user.id):
            raise PermissionDeniedError("You cannot edit this show")
        serializer = ShowWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            data = dict(serializer.validated_data)
            fields = sorted(data)
            self._save_show(show, data)
            log_audit(request.user, AuditAction.SHOW_UPDATE, 'Show', show.id, metadata={'fields': fields}, request=request)
            publish_on_commit(
                Channels.SHOWS,
                create_event(EventType.SHOW_UPDATED, 'show', show.id, request.user.id, data={'fields': fields}),
            )
        return self._show_response(show)

    def destroy(self, request, *args, **kwargs):
        if not can_delete_show(self._role()):
            raise PermissionDeniedError("Only editors can delete shows")
        show = self.get_object()
        title, cover = show.title, show.cover_image
        show.delete()
        if cover:
            storage.discard(cover)
        log_audit(request.user, AuditAction.SHOW_DELETE, 'Show', kwargs.get('pk'), metadata={'title': title}, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def cover(self, request, pk=None):
        show = self.get_object()
        if not can_edit_show(self._role(), show.created_by_id, request.user.id):
            raise PermissionDeniedError("You cannot edit this show")
        uploaded_file = request.FILES.get('file')
        storage.validate_image_file(uploaded_file)

        previous = show.cover_image
        result = storage.upload(uploaded_file, folder='show-covers', kind='image')
        show.cover_image = result.url
        show.save(update_fields=['cover_image', 'updated_at'])
        if previous:
            storage.discard(previous)
        return self._show_response(show)

    # Episodes --------------------------------------------------------------

    def _episode(self, show, episode_id):
        episode = Episode.objects.filter(pk=episode_id).first()
        if episode is None or episode.show_id != show.id:
            raise NotFoundError("Episode not found")
        return episode

    @action(detail=True, methods=['get', 'post'])
    def episodes(self, request, pk=None):
        show = self.get_object()
        if request.method == 'GET':
            episodes = show.episodes.select_related('created_by', 'published_by').prefetch_related('audio_clips')
            episode_status = request.query_params.get('status')
            if episode_status:
                episodes = episodes.filter(status=episode_status)
            page = self.paginate_queryset(episodes.order_by('-episode_number'))
            self.paginator.results_key = 'episodes'
            return self.get_paginated_response(EpisodeSerializer(page, many=True).data)

        if not has_show_permission(self._role(), 'create'):
            raise PermissionDeniedError("Insufficient permissions to create episodes")
        serializer = EpisodeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        episode = serializer.save(show=show, created_by=request.user)
        return Response({'episode': EpisodeSerializer(episode).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get', 'patch', 'delete'], url_path=EPISODE_PATH)
    def episode_detail(self, request, pk=None, episode_id=None):
        show = self.get_object()
        episode = self._episode(show, episode_id)

        if request.method == 'GET':
            return Response({'episode': EpisodeSerializer(episode).data})

        if request.method == 'DELETE':
            if not has_show_permission(self._role(), 'delete'):
                raise PermissionDeniedError("Only editors can delete episodes")
            episode.delete()
            return Response(status=status.HTTP_204_NO_CONTENT)

        if not has_show_permission(self._role(), 'update'):
            raise PermissionDeniedError("Insufficient permissions to edit episodes")
        serializer = EpisodeWriteSerializer(episode, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if 'title' in serializer.validated_data and serializer.validated_data['title'] != episode.title:
            episode.slug = ''
        episode = serializer.save()
        return Response({'episode': EpisodeSerializer(episode).data})

    @action(detail=True, methods=['post'], url_path=EPISODE_PATH + '/audio')
    def episode_audio(self, request, pk=None, episode_id=None):
        show = self.get_object()
        episode = self._episode(show, episode_id)
        if not has_show_permission(self._role(), 'update'):
            raise PermissionDeniedError("Insufficient permissions to edit episodes")

        uploaded_file = request.FILES.get('file')
        storage.validate_audio_file(uploaded_file)
        with storage.discard_on_error() as uploaded, transaction.atomic():
            result = storage.upload(uploaded_file, folder='audio', kind='audio')
            uploaded.append(result.url)
            clip = AudioClip.from_upload(result, uploaded_file, request.user, title=request.data.get('title', ''))
            episode.audio_clips.add(clip)
        return Response({'episode': EpisodeSerializer(episode).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post', 'delete'], url_path=EPISODE_PATH + '/publish')
    def episode_publish(self, request, pk=None, episode_id=None):
        show = self.get_object()
        if not can_publish_episode(self._role()):
            raise PermissionDeniedError("Insufficient permissions to publish episodes")
        episode = Episode.objects.filter(pk=episode_id).first()
        if episode is None:
            raise NotFoundError("Episode not found")
        if episode.show_id != show.id:
            raise ValidationError("Episode does not belong to this show", code=ErrorCode.INVALID_VALUE)

        if request.method == 'DELETE':
            episode.status = EpisodeStatus.DRAFT
            episode.published_at = None
            episode.published_by = None
            episode.scheduled_publish_at = None
            episode.save()
            log_audit(request.user, AuditAction.EPISODE_UNPUBLISH, 'Episode', episode.id, request=request)
            return Response({'episode': EpisodeSerializer(episode).data})

        if not episode.audio_clips.exists():
            raise ValidationError("Episode needs at least one audio clip before publishing", code=ErrorCode.MISSING_FIELD)

        scheduled_for = parse_datetime_param(request.data.get('scheduled_publish_at'), name='scheduled_publish_at')
        now = timezone.now()
        with transaction.atomic():
            if scheduled_for and scheduled_for > now:
                episode.status = EpisodeStatus.DRAFT
                episode.scheduled_publish_at = scheduled_for
                episode.published_by = request.user
            else:
                publish_episode(episode, request.user, now)
            episode.save()
            log_audit(
                request.user,
                AuditAction.EPISODE_PUBLISH,
                'Episode',
                episode.id,
                metadata={'show': show.title, 'scheduled_for': scheduled_for.isoformat() if scheduled_for else None},
                request=request,
            )
        return Response({'episode': EpisodeSerializer(episode).data})

