"""
Audio library API.

GET    /api/newsroom/audio-library/        - List clips (query, mime_type filters)
POST   /api/newsroom/audio-library/        - Upload a clip (multipart)
GET    /api/newsroom/audio-library/{id}/   - Clip detail
PATCH  /api/newsroom/audio-library/{id}/   - Update title, description, tags
DELETE /api/newsroom/audio-library/{id}/   - Delete clip (?force=true while in use, EDITOR+)
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from apps.core import storage
from apps.core.choices import StaffRole
from apps.core.exceptions import ErrorCode, PermissionDeniedError, ValidationError
from apps.core.params import parse_bool
from apps.core.permissions import IsStaff, has_role
from apps.core.throttling import UploadThrottle

from .models import AudioClip
from .serializers import AudioClipSerializer, AudioClipUploadSerializer

logger = logging.getLogger(__name__)


class AudioClipViewSet(viewsets.ModelViewSet):
    permission_classes = [IsStaff]
    serializer_class = AudioClipSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = 'clips'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_throttles(self):
        if self.action == 'create':
            return [UploadThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        queryset = AudioClip.objects.select_related('uploaded_by').annotate(
            link_count=Count('story_links', distinct=True) + Count('episodes', distinct=True),
        )
        params = self.request.query_params
        query = params.get('query')
        if query:
            queryset = queryset.filter(
                Q(title__icontains=query)
                | Q(original_name__icontains=query)
                | Q(description__icontains=query)
            )
        mime_type = params.get('mime_type') or params.get('mimeType')
        if mime_type:
            queryset = queryset.filter(mime_type__istartswith=mime_type)
        return queryset.order_by('-created_at')

    def retrieve(self, request, *args, **kwargs):
        return Response({'clip': self.get_serializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = AudioClipUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        uploaded_file = data.pop('file')

        storage.validate_audio_file(uploaded_file)
        with storage.discard_on_error() as uploaded:
            result = storage.upload(uploaded_file, folder='audio', kind='audio')
            uploaded.append(result.url)
            clip = AudioClip.from_upload(result, uploaded_file, request.user, **data)
        logger.info("Audio clip %s uploaded by %s", clip.id, request.user.email)
        return Response({'clip': AudioClipSerializer(clip).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        clip = self.get_object()
        serializer = self.get_serializer(clip, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'clip': self.get_serializer(self.get_object()).data})

    def destroy(self, request, *args, **kwargs):
        clip = self.get_object()
        force = parse_bool(request.query_params.get('force'), default=False)

        if clip.usage_count:
            if not force:
                raise ValidationError(
                    "Audio clip is in use by stories or episodes",
                    code=ErrorCode.CONFLICT,
                    details={'usage_count': clip.usage_count},
                )
            if not has_role(request.user, StaffRole.EDITOR):
                raise PermissionDeniedError("Only editors can delete audio that is in use")

        url = clip.url
        with transaction.atomic():
            clip.delete()
        storage.discard(url)
        logger.info("Audio clip %s deleted by %s (force=%s)", kwargs.get('pk'), request.user.email, force)
        return Response(status=status.HTTP_204_NO_CONTENT)
