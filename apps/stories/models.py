"""
Story models.

A story moves through two parallel labels:

- ``stage`` drives the editorial pipeline
  (DRAFT -> NEEDS_JOURNALIST_REVIEW -> NEEDS_SUB_EDITOR_APPROVAL -> APPROVED
  -> TRANSLATED -> PUBLISHED), see ``apps.stories.workflow``.
- ``status`` is the coarser label shown in lists and moved directly by the
  per-role transition table in ``apps.core.permissions``.

Translations are Story rows with ``is_translation=True`` pointing at their
original through ``original_story``.
"""

from django.conf import settings
from django.db import models

from apps.core.choices import Language, StaffRole, StoryStage, StoryStatus
from apps.core.models import BaseModel
from apps.core.slugs import slug_for


class CommentType(models.TextChoices):
    GENERAL = 'GENERAL', 'General'
    REVISION_REQUEST = 'REVISION_REQUEST', 'Revision Request'
    APPROVAL = 'APPROVAL', 'Approval'
    REJECTION = 'REJECTION', 'Rejection'
    EDITORIAL_NOTE = 'EDITORIAL_NOTE', 'Editorial Note'


class StoryQuerySet(models.QuerySet):

    def originals(self):
        return self.filter(is_translation=False)

    def translations(self):
        return self.filter(is_translation=True)

    def published(self):
        return self.filter(stage=StoryStage.PUBLISHED)

    def visible_to(self, user):
        """Role-based visibility for newsroom listings."""
        role = getattr(user, 'staff_role', None)
        if role == StaffRole.INTERN:
            return self.filter(author=user)
        if role == StaffRole.JOURNALIST:
            return self.filter(
                models.Q(author=user)
                | models.Q(assigned_to=user)
                | models.Q(reviewer=user)
                | models.Q(assigned_reviewer=user)
            )
        return self


class Story(BaseModel):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=300, unique=True)
    content = models.TextField(blank=True)
    status = models.CharField(
        max_length=30,
        choices=StoryStatus.choices,
        default=StoryStatus.DRAFT,
        db_index=True,
    )
    stage = models.CharField(
        max_length=30,
        choices=StoryStage.choices,
        default=StoryStage.DRAFT,
        db_index=True,
    )
    author_role = models.CharField(max_length=20, choices=StaffRole.choices, null=True, blank=True)
    language = models.CharField(max_length=20, choices=Language.choices, default=Language.ENGLISH, db_index=True)

    is_translation = models.BooleanField(default=False, db_index=True)
    original_story = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='translations',
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='authored_stories',
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_stories',
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_stories',
    )
    assigned_reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stories_to_review',
    )
    assigned_approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stories_to_approve',
    )

    published_at = models.DateTimeField(null=True, blank=True, db_index=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='published_stories',
    )
    scheduled_publish_at = models.DateTimeField(null=True, blank=True, db_index=True)

    category = models.ForeignKey(
        'taxonomy.Category',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='stories',
    )
    tags = models.ManyToManyField('taxonomy.Tag', blank=True, related_name='stories')
    classifications = models.ManyToManyField('taxonomy.Classification', blank=True, related_name='stories')
    audio_clips = models.ManyToManyField(
        'media.AudioClip',
        through='StoryAudioClip',
        blank=True,
        related_name='stories',
    )

    follow_up_date = models.DateTimeField(null=True, blank=True, db_index=True)
    follow_up_note = models.TextField(blank=True)
    follow_up_completed = models.BooleanField(default=False)
    follow_up_completed_at = models.DateTimeField(null=True, blank=True)
    follow_up_completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='completed_follow_ups',
    )

    author_checklist = models.JSONField(null=True, blank=True)
    reviewer_checklist = models.JSONField(null=True, blank=True)
    approver_checklist = models.JSONField(null=True, blank=True)
    translation_checklist = models.JSONField(null=True, blank=True)

    flagged_for_bulletin = models.BooleanField(default=False, db_index=True)
    flagged_for_bulletin_at = models.DateTimeField(null=True, blank=True)
    flagged_for_bulletin_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='flagged_stories',
    )

    objects = StoryQuerySet.as_manager()

    class Meta:
        db_table = 'stories'
        ordering = ['-updated_at']
        verbose_name_plural = 'Stories'
        indexes = [
            models.Index(fields=['stage', '-published_at'], name='story_stage_published_idx'),
            models.Index(fields=['author', 'stage'], name='story_author_stage_idx'),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slug_for(Story, self.title, exclude_id=self.pk)
        super().save(*args, **kwargs)

    @property
    def root_story(self):
        return self.original_story if self.is_translation and self.original_story_id else self


class StoryAudioClip(BaseModel):
    story = models.ForeignKey(Story, on_delete=models.CASCADE, related_name='audio_links')
    audio_clip = models.ForeignKey('media.AudioClip', on_delete=models.CASCADE, related_name='story_links')
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        db_table = 'story_audio_clips'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['story', 'audio_clip'], name='unique_story_audio_clip'),
        ]


class Comment(BaseModel):
    content = models.TextField()
    type = models.CharField(max_length=30, choices=CommentType.choices, default=CommentType.GENERAL)
    category = models.CharField(max_length=50, blank=True)
    story = models.ForeignKey(Story, on_delete=models.CASCADE, related_name='comments')
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='story_comments')
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='replies',
    )
    is_resolved = models.BooleanField(default=False)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'comments'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.get_type_display()} on {self.story_id}"


class RevisionRequest(BaseModel):
    story = models.ForeignKey(Story, on_delete=models.CASCADE, related_name='revision_requests')
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='revision_requests_made',
    )
    requested_by_role = models.CharField(max_length=20, choices=StaffRole.choices)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='revision_requests_received',
    )
    reason = models.TextField()
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'revision_requests'
        ordering = ['-created_at']

    @property
    def is_resolved(self):
        return self.resolved_at is not None
