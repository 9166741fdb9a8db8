"""
Tasks and the newsroom diary.

GET    /api/tasks/                          - List visible tasks
POST   /api/tasks/                          - Create task
GET    /api/tasks/{id}/                     - Task detail
PATCH  /api/tasks/{id}/                     - Update task (assignee, creator or SUB_EDITOR+)
DELETE /api/tasks/{id}/                     - Delete task
POST   /api/tasks/{id}/assign/              - Assign (SUB_EDITOR+)
POST   /api/tasks/{id}/complete/            - Complete (assignee or SUB_EDITOR+)
GET    /api/tasks/{id}/comments/            - List comments
POST   /api/tasks/{id}/comments/            - Add comment

GET    /api/newsroom/diary/                 - Diary entries grouped by due date
POST   /api/newsroom/diary/                 - Create entry
GET    /api/newsroom/diary/upcoming/        - My incomplete entries due soon
GET    /api/newsroom/diary/{id}/            - Entry detail
PUT    /api/newsroom/diary/{id}/            - Edit (creator, assignee or SUB_EDITOR+)
PATCH  /api/newsroom/diary/{id}/            - Toggle completion
DELETE /api/newsroom/diary/{id}/            - Delete (creator or SUB_EDITOR+)
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Case, IntegerField, Q, Value, When
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.models import User
from apps.core.audit import AuditAction, log_audit
from apps.core.choices import StaffRole, UserType
from apps.core.exceptions import ErrorCode, NotFoundError, PermissionDeniedError, ValidationError, WorkflowError
from apps.core.pagination import LargePagination
from apps.core.params import filter_datetime_range, parse_bool, parse_int
from apps.core.permissions import IsStaff, TablePermission, get_user_role, has_task_permission, role_at_least
from apps.core.schedule import group_by_due
from apps.stories.models import Story

from .filters import TaskFilter
from .models import PRIORITY_RANK, DiaryEntry, Task, TaskComment, TaskStatus, TaskType
from .serializers import (
    DiaryEntrySerializer,
    DiaryEntryWriteSerializer,
    TaskCommentSerializer,
    TaskSerializer,
    TaskWriteSerializer,
)

logger = logging.getLogger(__name__)

# Review hand-offs any journalist may pick up
JOURNALIST_POOL_TYPES = [TaskType.STORY_REVIEW, TaskType.STORY_REVISION_TO_JOURNALIST]


def _active_staff(user_id):
    return User.objects.filter(pk=user_id, is_active=True, user_type=UserType.STAFF).first()


def _story_or_404(story_id):
    story = Story.objects.filter(pk=story_id).first()
    if story is None:
        raise NotFoundError("Story not found")
    return story


def visible_tasks(queryset, user):
    role = get_user_role(user)
    if role_at_least(role, StaffRole.SUB_EDITOR):
        return queryset
    own = Q(assigned_to=user) | Q(created_by=user)
    if role == StaffRole.JOURNALIST:
        pool = Q(type__in=JOURNALIST_POOL_TYPES) & ~Q(status=TaskStatus.COMPLETED)
        return queryset.filter(own | pool)
    return queryset.filter(own)


class TaskViewSet(viewsets.ModelViewSet):
    permission_classes = [TablePermission]
    permission_table = staticmethod(has_task_permission)
    serializer_class = TaskSerializer
    results_key = 'tasks'
    filterset_class = TaskFilter
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        # Actions run their own checks; comments are open to anyone who can see the task
        if self.action in ('assign', 'complete', 'comments'):
            return [IsStaff()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = visible_tasks(
            Task.objects.select_related('assigned_to', 'created_by', 'story', 'blocked_by'),
            self.request.user,
        )
        if self.action != 'list':
            return queryset

        rank = Case(
            *[When(priority=priority, then=Value(value)) for priority, value in PRIORITY_RANK.items()],
            output_field=IntegerField(),
        )
        return queryset.annotate(priority_rank=rank).order_by('priority_rank', 'due_date', '-created_at')

    def _is_sub_editor(self):
        return role_at_least(get_user_role(self.request.user), StaffRole.SUB_EDITOR)

    def _resolve_relations(self, data):
        """Swap the ``*_id`` fields for model instances."""
        if 'assigned_to_id' in data:
            assignee_id = data.pop('assigned_to_id')
            if assignee_id:
                assignee = _active_staff(assignee_id)
                if assignee is None:
                    raise NotFoundError("Assigned user not found or inactive")
                data['assigned_to'] = assignee
            else:
                data['assigned_to'] = None
        if 'story_id' in data:
            story_id = data.pop('story_id')
            data['story'] = _story_or_404(story_id) if story_id else None
        if 'blocked_by_id' in data:
            blocked_by_id = data.pop('blocked_by_id')
            blocker = None
            if blocked_by_id:
                blocker = Task.objects.filter(pk=blocked_by_id).first()
                if blocker is None:
                    raise NotFoundError("Blocking task not found")
            data['blocked_by'] = blocker
        return data

    def _task_response(self, task, status_code=status.HTTP_200_OK):
        return Response({'task': TaskSerializer(task).data}, status=status_code)

    def retrieve(self, request, *args, **kwargs):
        return self._task_response(self.get_object())

    def create(self, request, *args, **kwargs):
        serializer = TaskWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = self._resolve_relations(dict(serializer.validated_data))
        if data.get('assigned_to') is None:
            data['status'] = TaskStatus.PENDING_ASSIGNMENT
        else:
            data.setdefault('status', TaskStatus.PENDING)

        with transaction.atomic():
            task = Task.objects.create(created_by=request.user, **data)
            log_audit(
                request.user,
                AuditAction.TASK_CREATE,
                'Task',
                task.id,
                metadata={'type': task.type, 'assigned_to': str(task.assigned_to_id or '')},
                request=request,
            )
        return self._task_response(task, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        task = self.get_object()
        user_id = request.user.id
        if not self._is_sub_editor() and user_id not in (task.assigned_to_id, task.created_by_id):
            raise PermissionDeniedError("You can only update tasks assigned to or created by you")

        serializer = TaskWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = self._resolve_relations(dict(serializer.validated_data))

        new_status = data.get('status')
        if data.get('assigned_to') and not new_status and task.status == TaskStatus.PENDING_ASSIGNMENT:
            data['status'] = TaskStatus.PENDING
        if new_status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
            data['completed_at'] = timezone.now()
        elif new_status and new_status != TaskStatus.COMPLETED:
            data['completed_at'] = None

        for field, value in data.items():
            setattr(task, field, value)
        task.save()
        return self._task_response(task)

    def destroy(self, request, *args, **kwargs):
        task = self.get_object()
        task_id, title = task.id, task.title
        task.delete()
        log_audit(request.user, AuditAction.TASK_DELETE, 'Task', task_id, metadata={'title': title}, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        if not self._is_sub_editor():
            raise PermissionDeniedError("Only sub-editors and above can assign tasks")
        task = self.get_object()
        assignee_id = request.data.get('assigned_to_id')
        if not assignee_id:
            raise ValidationError("assigned_to_id is required", code=ErrorCode.MISSING_FIELD, field='assigned_to_id')
        assignee = _active_staff(assignee_id)
        if assignee is None:
            raise NotFoundError("Assigned user not found or inactive")

        task.assigned_to = assignee
        if task.status == TaskStatus.PENDING_ASSIGNMENT:
            task.status = TaskStatus.PENDING
        task.save(update_fields=['assigned_to', 'status', 'updated_at'])
        log_audit(
            request.user, AuditAction.TASK_ASSIGN, 'Task', task.id,
            metadata={'assigned_to': str(assignee.id)}, request=request,
        )
        return self._task_response(task)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        task = self.get_object()
        if not self._is_sub_editor() and task.assigned_to_id != request.user.id:
            raise PermissionDeniedError("Only the assignee can complete this task")
        if task.is_blocked:
            raise WorkflowError(
                "Task is blocked by an incomplete task",
                details={'blocked_by': str(task.blocked_by_id)},
            )

        task.status = TaskStatus.COMPLETED
        task.completed_at = timezone.now()
        task.save(update_fields=['status', 'completed_at', 'updated_at'])
        log_audit(request.user, AuditAction.TASK_COMPLETE, 'Task', task.id, request=request)
        return self._task_response(task)

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        task = self.get_object()
        if request.method == 'GET':
            comments = task.comments.select_related('author')
            return Response({'comments': TaskCommentSerializer(comments, many=True).data})

        serializer = TaskCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = TaskComment.objects.create(task=task, author=request.user, **serializer.validated_data)
        return Response({'comment': TaskCommentSerializer(comment).data}, status=status.HTTP_201_CREATED)


class DiaryViewSet(viewsets.ModelViewSet):
    permission_classes = [IsStaff]
    serializer_class = DiaryEntrySerializer
    pagination_class = LargePagination
    results_key = 'entries'

    def get_queryset(self):
        queryset = DiaryEntry.objects.select_related('created_by', 'assigned_to', 'completed_by', 'story')
        if self.action != 'list':
            return queryset
        params = self.request.query_params
        if not parse_bool(params.get('include_completed'), default=False):
            queryset = queryset.filter(is_completed=False)
        assignee_id = params.get('assignee_id')
        if assignee_id:
            queryset = queryset.filter(assigned_to_id=assignee_id)
        return filter_datetime_range(queryset, 'date_time', params).order_by('date_time')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['now'] = timezone.now()
        return context

    def _is_sub_editor(self):
        return role_at_least(get_user_role(self.request.user), StaffRole.SUB_EDITOR)

    def _entry_response(self, entry, status_code=status.HTTP_200_OK, **extra):
        payload = {'entry': self.get_serializer(entry).data}
        payload.update(extra)
        return Response(payload, status=status_code)

    def _apply(self, entry, data):
        if 'story_id' in data:
            story_id = data.pop('story_id')
            entry.story = _story_or_404(story_id) if story_id else None
        if 'assigned_to_id' in data:
            assignee_id = data.pop('assigned_to_id')
            assignee = None
            if assignee_id:
                assignee = _active_staff(assignee_id)
                if assignee is None:
                    raise ValidationError(
                        "Assignee must be an active staff member",
                        code=ErrorCode.INVALID_VALUE,
                        field='assigned_to_id',
                    )
            entry.assigned_to = assignee
        for field, value in data.items():
            setattr(entry, field, value)
        entry.save()
        return entry

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        entries = self.get_serializer(page, many=True).data
        grouped, counts = group_by_due(entries, info_key=None)
        return self.paginator.get_paginated_response(entries, grouped=grouped, counts=counts)

    def retrieve(self, request, *args, **kwargs):
        return self._entry_response(self.get_object())

    def create(self, request, *args, **kwargs):
        serializer = DiaryEntryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = self._apply(DiaryEntry(created_by=request.user), dict(serializer.validated_data))
        return self._entry_response(entry, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        entry = self.get_object()
        if request.method == 'PATCH':
            return self._toggle(entry)

        user_id = request.user.id
        if not self._is_sub_editor() and user_id not in (entry.created_by_id, entry.assigned_to_id):
            raise PermissionDeniedError("Insufficient permissions")
        serializer = DiaryEntryWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return self._entry_response(self._apply(entry, dict(serializer.validated_data)))

    def _toggle(self, entry):
        completed = not entry.is_completed
        entry.is_completed = completed
        entry.completed_at = timezone.now() if completed else None
        entry.completed_by = self.request.user if completed else None
        entry.save(update_fields=['is_completed', 'completed_at', 'completed_by', 'updated_at'])
        message = "Diary entry marked as completed" if completed else "Diary entry marked as incomplete"
        return self._entry_response(entry, message=message)

    def destroy(self, request, *args, **kwargs):
        entry = self.get_object()
        if not self._is_sub_editor() and entry.created_by_id != request.user.id:
            raise PermissionDeniedError("Insufficient permissions")
        entry.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        days = parse_int(request.query_params.get('days'), 7, minimum=1, maximum=90, name='days')
        horizon = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=days + 1)
        entries = self.get_queryset().filter(
            Q(created_by=request.user) | Q(assigned_to=request.user),
            is_completed=False,
            date_time__lt=horizon,
        ).order_by('date_time')[:20]
        data = self.get_serializer(entries, many=True).data
        grouped, counts = group_by_due(data, info_key=None)
        return Response({'entries': data, 'grouped': grouped, 'counts': counts})
