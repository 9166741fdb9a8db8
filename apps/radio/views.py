"""
Radio station API.

GET    /api/radio/stories/                    - Stories visible to the station
GET    /api/radio/stories/{id}/               - Story with audio and visible translations
GET    /api/radio/recent-stories/             - Newest visible stories
GET    /api/radio/categories/                 - Category tree with story counts
GET    /api/radio/locality-tags/              - Active locality classifications
GET    /api/radio/bulletins/                  - Published bulletins in allowed languages
GET    /api/radio/bulletins/{id}/             - Bulletin with ordered stories
GET    /api/radio/bulletin-schedules/         - Active schedules in allowed languages
GET    /api/radio/shows/                      - Published shows
GET    /api/radio/shows/{id}/                 - Show with published episodes
GET    /api/radio/shows/{id}/episodes/        - Published episodes (paginated)
GET    /api/radio/station/                    - Station profile
PATCH  /api/radio/station/                    - Update contact details (primary contact)
POST   /api/radio/station/logo/               - Upload logo (primary contact)
GET    /api/radio/profile/                    - Own profile
PATCH  /api/radio/profile/                    - Update own profile
POST   /api/radio/profile/picture/            - Upload profile picture
"""

import logging
from collections import defaultdict

from django.db.models import Count, Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.services import replace_profile_picture
from apps.bulletins.models import Bulletin, BulletinSchedule, BulletinStatus
from apps.bulletins.serializers import BulletinDetailSerializer, BulletinScheduleSummarySerializer, BulletinSerializer
from apps.core import storage
from apps.core.audit import AuditAction, log_audit
from apps.core.choices import ClassificationType
from apps.core.exceptions import PermissionDeniedError
from apps.core.pagination import LargePagination
from apps.core.params import parse_int
from apps.core.throttling import UploadThrottle
from apps.shows.models import EpisodeStatus, Show
from apps.shows.serializers import EpisodeSerializer, ShowSerializer
from apps.taxonomy.models import Category, Classification
from apps.taxonomy.serializers import ClassificationSummarySerializer

from .permissions import HasStationAccess
from .serializers import (
    RadioCategorySerializer,
    RadioProfileSerializer,
    RadioStationSerializer,
    RadioStorySerializer,
    RadioTranslationSerializer,
    StationContactSerializer,
    StationSummarySerializer,
)
from .services import allowed_language_codes, filter_by_category, normalize_language, visible_stories

logger = logging.getLogger(__name__)

MAX_RECENT = 50


class StationMixin:
    permission_classes = [HasStationAccess]

    @property
    def station(self):
        return self.request.user.radio_station

    def station_stories(self):
        queryset = visible_stories(self.station).select_related('author', 'category').prefetch_related(
            'tags', 'classifications', 'audio_clips',
        )
        return queryset.order_by('-published_at')


class RadioStoryViewSet(StationMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = RadioStorySerializer
    pagination_class = LargePagination
    results_key = 'stories'

    def get_queryset(self):
        queryset = self.station_stories()
        if self.action != 'list':
            return queryset
        params = self.request.query_params
        category = params.get('category')
        if category:
            queryset = filter_by_category(queryset, category)
        locality = params.get('locality')
        if locality:
            queryset = queryset.filter(
                classifications__id=locality,
                classifications__type=ClassificationType.LOCALITY,
            )
        language = normalize_language(params.get('language'))
        if language:
            queryset = queryset.filter(language=language)
        query = params.get('query')
        if query:
            queryset = queryset.filter(Q(title__icontains=query) | Q(content__icontains=query))
        return queryset

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        return self.paginator.get_paginated_response(
            self.get_serializer(page, many=True).data,
            station=StationSummarySerializer(self.station).data,
        )

    def retrieve(self, request, *args, **kwargs):
        story = self.get_object()

        root_id = story.original_story_id if story.is_translation else story.id
        siblings = visible_stories(self.station).filter(
            Q(pk=root_id) | Q(original_story_id=root_id),
        ).exclude(pk=story.pk).order_by('language')

        return Response({
            'story': self.get_serializer(story).data,
            'translations': RadioTranslationSerializer(siblings, many=True).data,
            'station': StationSummarySerializer(self.station).data,
        })


class RecentStoriesView(StationMixin, APIView):

    def get(self, request):
        limit = parse_int(request.query_params.get('limit'), 10, minimum=1, maximum=MAX_RECENT, name='limit')
        stories = self.station_stories()[:limit]
        return Response({'stories': RadioStorySerializer(stories, many=True).data})


class CategoriesView(StationMixin, APIView):

    def get(self, request):
        blocked = set(self.station.blocked_category_ids)
        categories = [c for c in Category.objects.order_by('name') if str(c.id) not in blocked]

        counts = {
            row['category_id']: row['total']
            for row in visible_stories(self.station)
            .filter(category__isnull=False)
            .order_by()
            .values('category_id')
            .annotate(total=Count('id'))
        }
        by_parent = defaultdict(list)
        for category in categories:
            by_parent[category.parent_id].append(category)

        context = {'counts': counts, 'by_parent': by_parent}
        roots = by_parent.get(None, [])
        return Response({'categories': RadioCategorySerializer(roots, many=True, context=context).data})


class LocalityTagsView(StationMixin, APIView):

    def get(self, request):
        localities = Classification.objects.filter(
            type=ClassificationType.LOCALITY,
            is_active=True,
        ).order_by('sort_order', 'name')
        return Response({'locality_tags': ClassificationSummarySerializer(localities, many=True).data})


class RadioBulletinViewSet(StationMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = BulletinSerializer
    pagination_class = LargePagination
    results_key = 'bulletins'

    def get_queryset(self):
        queryset = Bulletin.objects.select_related(
            'author', 'reviewer', 'published_by', 'category', 'schedule',
        ).annotate(num_stories=Count('story_links')).filter(
            status=BulletinStatus.PUBLISHED,
            language__in=allowed_language_codes(self.station),
        )
        params = self.request.query_params
        language = normalize_language(params.get('language'))
        if language:
            queryset = queryset.filter(language=language)
        schedule = params.get('schedule')
        if schedule:
            queryset = queryset.filter(schedule_id=schedule)
        return queryset.order_by('-published_at')

    def retrieve(self, request, *args, **kwargs):
        return Response({'bulletin': BulletinDetailSerializer(self.get_object()).data})


class BulletinSchedulesView(StationMixin, APIView):

    def get(self, request):
        schedules = BulletinSchedule.objects.filter(
            is_active=True,
            language__in=allowed_language_codes(self.station),
        ).order_by('time', 'language')
        return Response({'schedules': BulletinScheduleSummarySerializer(schedules, many=True).data})


class RadioShowViewSet(StationMixin, viewsets.ReadOnlyModelViewSet):
    serializer_class = ShowSerializer
    pagination_class = LargePagination
    results_key = 'shows'

    def get_queryset(self):
        return Show.objects.filter(is_published=True, is_active=True).select_related(
            'created_by', 'category',
        ).prefetch_related('tags', 'classifications').annotate(
            episode_count=Count('episodes', filter=Q(episodes__status=EpisodeStatus.PUBLISHED)),
        ).order_by('title')

    def _published_episodes(self, show):
        return show.episodes.filter(status=EpisodeStatus.PUBLISHED).select_related(
            'created_by', 'published_by',
        ).prefetch_related('audio_clips').order_by('-episode_number')

    def retrieve(self, request, *args, **kwargs):
        show = self.get_object()
        return Response({
            'show': self.get_serializer(show).data,
            'episodes': EpisodeSerializer(self._published_episodes(show), many=True).data,
        })

    @action(detail=True, methods=['get'])
    def episodes(self, request, pk=None):
        show = self.get_object()
        page = self.paginate_queryset(self._published_episodes(show))
        self.paginator.results_key = 'episodes'
        return self.get_paginated_response(EpisodeSerializer(page, many=True).data)


class StationView(StationMixin, APIView):

    def get(self, request):
        return Response({'station': RadioStationSerializer(self.station).data})

    def patch(self, request):
        if not request.user.is_primary_contact:
            raise PermissionDeniedError("Only the primary contact can update station information")
        station = self.station
        serializer = StationContactSerializer(station, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        log_audit(
            request.user,
            AuditAction.STATION_UPDATE,
            'Station',
            station.id,
            metadata={'fields': sorted(serializer.validated_data)},
            request=request,
        )
        return Response({
            'message': 'Station information updated successfully',
            'station': RadioStationSerializer(station).data,
        })


class StationLogoView(StationMixin, APIView):
    parser_classes = [MultiPartParser, FormParser]
    throttle_classes = [UploadThrottle]

    def post(self, request):
        if not request.user.is_primary_contact:
            raise PermissionDeniedError("Only the primary contact can update the station logo")
        uploaded_file = request.FILES.get('file')
        storage.validate_image_file(uploaded_file)

        station = self.station
        previous = station.logo_url
        result = storage.upload(uploaded_file, folder='station-logos', kind='image')
        station.logo_url = result.url
        station.save(update_fields=['logo_url', 'updated_at'])
        if previous:
            storage.discard(previous)
        return Response({'station': RadioStationSerializer(station).data, 'url': station.logo_url})


class RadioProfileView(StationMixin, APIView):

    def get(self, request):
        return Response({'user': RadioProfileSerializer(request.user).data})

    def patch(self, request):
        serializer = RadioProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'user': serializer.data})


class RadioProfilePictureView(StationMixin, APIView):
    parser_classes = [MultiPartParser, FormParser]
    throttle_classes = [UploadThrottle]

    def post(self, request):
        user = replace_profile_picture(request.user, request.FILES.get('file'))
        return Response({'user': RadioProfileSerializer(user).data, 'url': user.profile_picture_url})
