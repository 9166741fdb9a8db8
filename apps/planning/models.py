"""
Task and diary models.
"""

from django.conf import settings
from django.db import models

from apps.core.choices import Language
from apps.core.models import BaseModel


class TaskType(models.TextChoices):
    STORY_CREATE = 'STORY_CREATE', 'Create Story'
    STORY_REVIEW = 'STORY_REVIEW', 'Review Story'
    STORY_REVISION_TO_AUTHOR = 'STORY_REVISION_TO_AUTHOR', 'Revision to Author'
    STORY_APPROVAL = 'STORY_APPROVAL', 'Approve Story'
    STORY_REVISION_TO_JOURNALIST = 'STORY_REVISION_TO_JOURNALIST', 'Revision to Journalist'
    STORY_TRANSLATE = 'STORY_TRANSLATE', 'Translate Story'
    STORY_TRANSLATION_REVIEW = 'STORY_TRANSLATION_REVIEW', 'Review Translation'
    STORY_PUBLISH = 'STORY_PUBLISH', 'Publish Story'
    STORY_FOLLOW_UP = 'STORY_FOLLOW_UP', 'Story Follow-up'
    BULLETIN_CREATE = 'BULLETIN_CREATE', 'Create Bulletin'
    BULLETIN_REVIEW = 'BULLETIN_REVIEW', 'Review Bulletin'
    BULLETIN_PUBLISH = 'BULLETIN_PUBLISH', 'Publish Bulletin'
    SHOW_CREATE = 'SHOW_CREATE', 'Create Show'
    SHOW_REVIEW = 'SHOW_REVIEW', 'Review Show'
    SHOW_PUBLISH = 'SHOW_PUBLISH', 'Publish Show'


class TaskStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'
    BLOCKED = 'BLOCKED', 'Blocked'
    PENDING_ASSIGNMENT = 'PENDING_ASSIGNMENT', 'Pending Assignment'


class TaskPriority(models.TextChoices):
    LOW = 'LOW', 'Low'
    MEDIUM = 'MEDIUM', 'Medium'
    HIGH = 'HIGH', 'High'
    URGENT = 'URGENT', 'Urgent'


# Sort key: URGENT first
PRIORITY_RANK = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


class Task(BaseModel):
    type = models.CharField(max_length=40, choices=TaskType.choices, db_index=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=30, choices=TaskStatus.choices, default=TaskStatus.PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=TaskPriority.choices, default=TaskPriority.MEDIUM)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_tasks',
    )
    story = models.ForeignKey(
        'stories.Story',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='tasks',
    )
    source_language = models.CharField(max_length=20, choices=Language.choices, null=True, blank=True)
    target_language = models.CharField(max_length=20, choices=Language.choices, null=True, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    scheduled_for = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    blocked_by = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='blocking',
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_blocked(self):
        return self.blocked_by_id is not None and self.blocked_by.status != TaskStatus.COMPLETED


class TaskComment(BaseModel):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='comments')
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='task_comments')
    content = models.TextField()

    class Meta:
        db_table = 'task_comments'
        ordering = ['created_at']


class DiaryEntry(BaseModel):
    title = models.CharField(max_length=255)
    date_time = models.DateTimeField(db_index=True)
    notes = models.TextField(blank=True)
    story = models.ForeignKey(
        'stories.Story',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='diary_entries',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='diary_entries',
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_diary_entries',
    )
    is_completed = models.BooleanField(default=False, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        db_table = 'diary_entries'
        ordering = ['date_time']
        verbose_name_plural = 'Diary entries'

    def __str__(self):
        return f"{self.title} @ {self.date_time:%Y-%m-%d %H:%M}"
