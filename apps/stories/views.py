"""
Newsroom story API.

GET    /api/newsroom/stories/                              - List stories visible to the user
POST   /api/newsroom/stories/                              - Create story (JSON or multipart with audio_files)
GET    /api/newsroom/stories/{id}/                         - Story detail
PATCH  /api/newsroom/stories/{id}/                         - Edit story
DELETE /api/newsroom/stories/{id}/                         - Delete story and its translations (EDITOR+)
PATCH  /api/newsroom/stories/{id}/status/                  - Direct status change
POST   /api/newsroom/stories/{id}/stage/                   - Stage workflow action
GET    /api/newsroom/stories/{id}/revisions/               - Revision requests
POST   /api/newsroom/stories/{id}/revisions/               - Request a revision
PATCH  /api/newsroom/stories/{id}/revisions/{rid}/         - Resolve a revision request
POST   /api/newsroom/stories/{id}/reassign/                - Reassign reviewer or approver
POST   /api/newsroom/stories/{id}/flag/                    - Flag for bulletin
PATCH  /api/newsroom/stories/{id}/follow-up/               - Set follow-up
GET    /api/newsroom/stories/follow-ups/                   - Follow-up planner (SUB_EDITOR+)
POST   /api/newsroom/stories/{id}/audio/                   - Upload or link audio
DELETE /api/newsroom/stories/{id}/audio/{clip_id}/         - Unlink audio
POST   /api/newsroom/stories/{id}/create-translations/     - Create translations
GET    /api/newsroom/stories/{id}/comments/                - Threaded comments
POST   /api/newsroom/stories/{id}/comments/                - Add comment
PATCH  /api/newsroom/stories/{id}/comments/{cid}/          - Edit or resolve comment
DELETE /api/newsroom/stories/{id}/comments/{cid}/          - Delete comment

GET    /api/newsroom/translations/                         - Translation stories
GET    /api/newsroom/dashboard/my-stories/                 - Personal work queue
GET    /api/newsroom/dashboard/editorial-metrics/          - Newsroom counters (SUB_EDITOR+)
"""

import logging
from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.choices import StaffRole, StoryStage, StoryStatus
from apps.core.exceptions import ErrorCode, NotFoundError, PermissionDeniedError, ValidationError
from apps.core.params import filter_datetime_range, parse_bool, parse_datetime_param, parse_id_list
from apps.core.permissions import (
    IsStaff,
    IsSubEditorOrAbove,
    TablePermission,
    get_user_role,
    has_comment_permission,
    has_story_permission,
    has_translation_permission,
    role_at_least,
)
from apps.core.schedule import due_info, group_by_due
from apps.core.throttling import DestructiveActionThrottle, UploadThrottle
from apps.media.serializers import AudioClipSerializer

from . import services
from .models import Comment, CommentType, RevisionRequest, Story
from .serializers import (
    CommentSerializer,
    FollowUpSerializer,
    RevisionRequestSerializer,
    StoryDetailSerializer,
    StoryListSerializer,
    StoryWriteSerializer,
)
from .translations import create_translations as create_story_translations
from .workflow import perform_stage_action

logger = logging.getLogger(__name__)

CRUD_ACTIONS = {'list', 'retrieve', 'create', 'update', 'partial_update', 'destroy'}

STORY_RELATIONS = (
    'author',
    'assigned_to',
    'reviewer',
    'assigned_reviewer',
    'assigned_approver',
    'category',
    'published_by',
    'follow_up_completed_by',
    'flagged_for_bulletin_by',
)


def filter_stories(queryset, params):
    query = params.get('query') or params.get('search')
    if query:
        queryset = queryset.filter(
            Q(title__icontains=query)
            | Q(content__icontains=query)
            | Q(author__first_name__icontains=query)
            | Q(author__last_name__icontains=query)
            | Q(author__email__icontains=query)
            | Q(category__name__icontains=query)
            | Q(tags__name__icontains=query)
        ).distinct()

    for param, field in (
        ('status', 'status'),
        ('stage', 'stage'),
        ('language', 'language'),
        ('category', 'category_id'),
        ('category_id', 'category_id'),
        ('author', 'author_id'),
        ('author_id', 'author_id'),
        ('assigned_to', 'assigned_to_id'),
        ('reviewer', 'reviewer_id'),
    ):
        value = params.get(param)
        if value:
            queryset = queryset.filter(**{field: value})

    tag_ids = parse_id_list(params.get('tag_ids'))
    if tag_ids:
        queryset = queryset.filter(tags__id__in=tag_ids).distinct()

    for flag in ('is_translation', 'flagged_for_bulletin'):
        value = parse_bool(params.get(flag))
        if value is not None:
            queryset = queryset.filter(**{flag: value})
    return queryset


class StoryViewSet(viewsets.ModelViewSet):
    permission_table = staticmethod(has_story_permission)
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = 'stories'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in CRUD_ACTIONS:
            return [TablePermission()]
        if self.action == 'follow_ups':
            return [IsSubEditorOrAbove()]
        return [IsStaff()]

    def get_throttles(self):
        if self.action == 'destroy':
            return [DestructiveActionThrottle()]
        if self.action in ('create', 'audio'):
            return [UploadThrottle()]
        return super().get_throttles()

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return StoryDetailSerializer
        return StoryListSerializer

    def get_queryset(self):
        return Story.objects.select_related(*STORY_RELATIONS).prefetch_related('tags', 'classifications')

    def get_object(self):
        story = super().get_object()
        if not Story.objects.visible_to(self.request.user).filter(pk=story.pk).exists():
            raise PermissionDeniedError("You do not have access to this story")
        return story

    def _detail(self, story, status_code=status.HTTP_200_OK):
        story = self.get_queryset().get(pk=story.pk)
        data = StoryDetailSerializer(story, context=self.get_serializer_context()).data
        return Response({'story': data}, status=status_code)

    def list(self, request, *args, **kwargs):
        queryset = filter_stories(self.get_queryset().visible_to(request.user), request.query_params)
        page = self.paginate_queryset(queryset.order_by('-updated_at'))
        return self.get_paginated_response(StoryListSerializer(page, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return self._detail(self.get_object())

    def create(self, request, *args, **kwargs):
        serializer = StoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        story = services.create_story(
            request.user,
            dict(serializer.validated_data),
            audio_files=request.FILES.getlist('audio_files'),
            request=request,
        )
        return self._detail(story, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        story = self.get_object()
        serializer = StoryWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_story(story, request.user, dict(serializer.validated_data), request=request)
        return self._detail(story)

    def destroy(self, request, *args, **kwargs):
        services.delete_story(self.get_object(), request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # Workflow --------------------------------------------------------------

    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        new_status = request.data.get('status')
        if not new_status:
            raise ValidationError("status is required", code=ErrorCode.MISSING_FIELD, field='status')
        story = services.change_status(
            self.get_object(),
            request.user,
            new_status,
            assigned_to_id=request.data.get('assigned_to_id'),
            reviewer_id=request.data.get('reviewer_id'),
            request=request,
        )
        return self._detail(story)

    @action(detail=True, methods=['post'])
    def stage(self, request, pk=None):
        stage_action = request.data.get('action')
        if not stage_action:
            raise ValidationError("action is required", code=ErrorCode.MISSING_FIELD, field='action')
        story = perform_stage_action(self.get_object(), request.user, stage_action, request.data, request=request)
        return self._detail(story)

    @action(detail=True, methods=['get', 'post'])
    def revisions(self, request, pk=None):
        story = self.get_object()
        if request.method == 'GET':
            revisions = story.revision_requests.select_related('requested_by', 'assigned_to')
            return Response({'revisions': RevisionRequestSerializer(revisions, many=True).data})

        revision = services.request_revision(
            story,
            request.user,
            request.data.get('assigned_to_id'),
            request.data.get('reason'),
            request=request,
        )
        return Response(
            {'revision': RevisionRequestSerializer(revision).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['patch'], url_path=r'revisions/(?P<revision_id>[0-9a-f-]+)')
    def revision_detail(self, request, pk=None, revision_id=None):
        story = self.get_object()
        revision = RevisionRequest.objects.filter(story=story, pk=revision_id).first()
        if revision is None:
            raise NotFoundError("Revision request not found")
        if request.user.id != revision.assigned_to_id and not role_at_least(get_user_role(request.user), StaffRole.SUB_EDITOR):
            raise PermissionDeniedError("Only the assignee can resolve this revision request")

        resolved = parse_bool(request.data.get('resolved'), default=True)
        revision.resolved_at = timezone.now() if resolved else None
        revision.save(update_fields=['resolved_at', 'updated_at'])
        return Response({'revision': RevisionRequestSerializer(revision).data})

    @action(detail=True, methods=['post'])
    def reassign(self, request, pk=None):
        story = services.reassign(
            self.get_object(),
            request.user,
            request.data.get('type'),
            request.data.get('assigned_to_id'),
            note=request.data.get('note') or '',
            request=request,
        )
        return self._detail(story)

    @action(detail=True, methods=['post'])
    def flag(self, request, pk=None):
        story = services.set_bulletin_flag(self.get_object(), request.user, request.data.get('flagged'), request=request)
        return self._detail(story)

    @action(detail=True, methods=['patch'], url_path='follow-up')
    def follow_up(self, request, pk=None):
        story = self.get_object()
        data = {}
        if 'follow_up_date' in request.data:
            data['follow_up_date'] = parse_datetime_param(request.data.get('follow_up_date'), name='follow_up_date')
        if 'follow_up_note' in request.data:
            data['follow_up_note'] = request.data.get('follow_up_note')
        if 'completed' in request.data:
            completed = request.data.get('completed')
            if not isinstance(completed, bool):
                completed = parse_bool(completed, default=False)
            data['completed'] = completed
        services.update_follow_up(story, request.user, data)
        return self._detail(story)

    @action(detail=False, methods=['get'], url_path='follow-ups')
    def follow_ups(self, request):
        params = request.query_params
        queryset = Story.objects.filter(follow_up_date__isnull=False).select_related('author')
        if not parse_bool(params.get('include_completed'), default=False):
            queryset = queryset.filter(follow_up_completed=False)
        queryset = filter_datetime_range(queryset, 'follow_up_date', params)

        entries = FollowUpSerializer(queryset.order_by('follow_up_date'), many=True).data
        grouped, counts = group_by_due(entries, info_key=None)
        return Response({'follow_ups': entries, 'grouped': grouped, 'counts': counts})

    # Audio -----------------------------------------------------------------

    @action(detail=True, methods=['post'])
    def audio(self, request, pk=None):
        clip = services.attach_audio(
            self.get_object(),
            request.user,
            uploaded_file=request.FILES.get('file'),
            audio_clip_id=request.data.get('audio_clip_id'),
        )
        return Response({'clip': AudioClipSerializer(clip).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=r'audio/(?P<clip_id>[0-9a-f-]+)')
    def audio_detail(self, request, pk=None, clip_id=None):
        services.detach_audio(self.get_object(), request.user, clip_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # Translations ----------------------------------------------------------

    @action(detail=True, methods=['post'], url_path='create-translations')
    def create_translations(self, request, pk=None):
        if not has_translation_permission(get_user_role(request.user), 'create'):
            raise PermissionDeniedError("Insufficient permissions to create translations")
        story = self.get_object()
        items = request.data.get('translations')
        if not isinstance(items, list):
            raise ValidationError("translations must be a list", code=ErrorCode.INVALID_VALUE, field='translations')

        translations = create_story_translations(story, request.user, items, request=request)
        return Response(
            {
                'message': f"Created {len(translations)} translation(s)",
                'translations': StoryListSerializer(translations, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # Comments --------------------------------------------------------------

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        story = self.get_object()
        role = get_user_role(request.user)

        if request.method == 'GET':
            comments = story.comments.filter(parent__isnull=True).select_related('author', 'resolved_by')
            comment_type = request.query_params.get('type')
            if comment_type:
                comments = comments.filter(type=comment_type)
            return Response({'comments': CommentSerializer(comments, many=True).data})

        if not has_comment_permission(role, 'create'):
            raise PermissionDeniedError("You cannot comment on stories")
        content = (request.data.get('content') or '').strip()
        if not content:
            raise ValidationError("content is required", code=ErrorCode.MISSING_FIELD, field='content')
        comment_type = request.data.get('type') or CommentType.GENERAL
        if comment_type not in CommentType.values:
            raise ValidationError(f"Invalid comment type: {comment_type}", code=ErrorCode.INVALID_VALUE, field='type')

        parent = None
        parent_id = request.data.get('parent_id')
        if parent_id:
            parent = story.comments.filter(pk=parent_id).first()
            if parent is None:
                raise ValidationError(
                    "Parent comment does not belong to this story",
                    code=ErrorCode.INVALID_VALUE,
                    field='parent_id',
                )

        comment = Comment.objects.create(
            story=story,
            author=request.user,
            content=content,
            type=comment_type,
            category=request.data.get('category') or '',
            parent=parent,
        )
        return Response({'comment': CommentSerializer(comment).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch', 'delete'], url_path=r'comments/(?P<comment_id>[0-9a-f-]+)')
    def comment_detail(self, request, pk=None, comment_id=None):
        story = self.get_object()
        comment = story.comments.filter(pk=comment_id).first()
        if comment is None:
            raise NotFoundError("Comment not found")
        is_author = comment.author_id == request.user.id

        if request.method == 'DELETE':
            if not is_author and not has_comment_permission(get_user_role(request.user), 'delete'):
                raise PermissionDeniedError("You cannot delete this comment")
            comment.delete()
            return Response(status=status.HTTP_204_NO_CONTENT)

        if 'content' in request.data:
            if not is_author:
                raise PermissionDeniedError("Only the author can edit a comment")
            content = (request.data.get('content') or '').strip()
            if not content:
                raise ValidationError("content cannot be empty", code=ErrorCode.INVALID_VALUE, field='content')
            comment.content = content
        if 'is_resolved' in request.data:
            resolved = parse_bool(request.data.get('is_resolved'), default=False)
            comment.is_resolved = resolved
            comment.resolved_by = request.user if resolved else None
            comment.resolved_at = timezone.now() if resolved else None
        comment.save()
        return Response({'comment': CommentSerializer(comment).data})


class TranslationViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsStaff]
    serializer_class = StoryListSerializer
    results_key = 'translations'

    def get_queryset(self):
        user = self.request.user
        queryset = Story.objects.translations().select_related(*STORY_RELATIONS).prefetch_related(
            'tags', 'classifications'
        )
        if get_user_role(user) in (StaffRole.INTERN, StaffRole.JOURNALIST):
            queryset = queryset.filter(author=user)

        params = self.request.query_params
        for param, field in (('language', 'language'), ('stage', 'stage'), ('original_story', 'original_story_id')):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        if parse_bool(params.get('mine'), default=False):
            queryset = queryset.filter(author=user)
        return queryset.order_by('-updated_at')

    def retrieve(self, request, *args, **kwargs):
        translation = self.get_object()
        data = StoryDetailSerializer(translation, context=self.get_serializer_context()).data
        return Response({'translation': data})


class MyStoriesView(APIView):
    """The requester's own stories by stage plus everything waiting on them."""

    permission_classes = [IsStaff]

    def get(self, request):
        user = request.user
        base = Story.objects.select_related(*STORY_RELATIONS).prefetch_related('tags', 'classifications')

        own = base.filter(author=user, is_translation=False).order_by('-updated_at')
        by_stage = {stage: [] for stage in StoryStage.values}
        for story in own:
            by_stage[story.stage].append(story)

        awaiting_review = base.filter(assigned_reviewer=user, stage=StoryStage.NEEDS_JOURNALIST_REVIEW)
        awaiting_approval = base.filter(assigned_approver=user, stage=StoryStage.NEEDS_SUB_EDITOR_APPROVAL)
        translations = base.filter(is_translation=True, author=user).exclude(stage=StoryStage.PUBLISHED)

        return Response({
            'by_stage': {
                stage: StoryListSerializer(stories, many=True).data
                for stage, stories in by_stage.items()
            },
            'counts': {stage: len(stories) for stage, stories in by_stage.items()},
            'awaiting_review': StoryListSerializer(awaiting_review, many=True).data,
            'awaiting_approval': StoryListSerializer(awaiting_approval, many=True).data,
            'translations': StoryListSerializer(translations, many=True).data,
        })


class EditorialMetricsView(APIView):
    permission_classes = [IsSubEditorOrAbove]

    def get(self, request):
        now = timezone.now()
        today = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=today.weekday())

        stories = Story.objects.all()
        by_stage = dict(stories.order_by().values_list('stage').annotate(n=Count('id')))
        by_status = dict(stories.order_by().values_list('status').annotate(n=Count('id')))

        overdue = stories.filter(follow_up_completed=False, follow_up_date__isnull=False)
        overdue_count = sum(
            1 for when in overdue.values_list('follow_up_date', flat=True)
            if due_info(when, now=now)['is_overdue']
        )

        return Response({
            'by_stage': {stage: by_stage.get(stage, 0) for stage in StoryStage.values},
            'by_status': {value: by_status.get(value, 0) for value in StoryStatus.values},
            'published_today': stories.filter(published_at__gte=today).count(),
            'published_this_week': stories.filter(published_at__gte=week_start).count(),
            'pending_revisions': RevisionRequest.objects.filter(resolved_at__isnull=True).count(),
            'flagged_for_bulletin': stories.filter(flagged_for_bulletin=True).count(),
            'overdue_follow_ups': overdue_count,
        })
