"""
Bulletin models.
"""

from django.conf import settings
from django.db import models

from apps.core.choices import Language
from apps.core.models import BaseModel


class BulletinScheduleType(models.TextChoices):
    WEEKDAY = 'WEEKDAY', 'Weekday'
    WEEKEND = 'WEEKEND', 'Weekend'
    PUBLIC_HOLIDAY = 'PUBLIC_HOLIDAY', 'Public Holiday'


class BulletinStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    IN_REVIEW = 'IN_REVIEW', 'In Review'
    NEEDS_REVISION = 'NEEDS_REVISION', 'Needs Revision'
    APPROVED = 'APPROVED', 'Approved'
    PUBLISHED = 'PUBLISHED', 'Published'
    ARCHIVED = 'ARCHIVED', 'Archived'


BULLETIN_TRANSITIONS = {
    BulletinStatus.DRAFT: {BulletinStatus.IN_REVIEW},
    BulletinStatus.IN_REVIEW: {BulletinStatus.APPROVED, BulletinStatus.NEEDS_REVISION},
    BulletinStatus.NEEDS_REVISION: {BulletinStatus.IN_REVIEW},
    BulletinStatus.APPROVED: {BulletinStatus.PUBLISHED, BulletinStatus.NEEDS_REVISION},
    BulletinStatus.PUBLISHED: {BulletinStatus.ARCHIVED},
}

BULLETIN_CATEGORY_NAME = 'News Bulletins'


class BulletinSchedule(BaseModel):
    title = models.CharField(max_length=200)
    time = models.CharField(max_length=5, help_text='HH:MM, 24-hour')
    language = models.CharField(max_length=20, choices=Language.choices)
    schedule_type = models.CharField(max_length=20, choices=BulletinScheduleType.choices)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='+',
    )

    class Meta:
        db_table = 'bulletin_schedules'
        ordering = ['schedule_type', 'time', 'language']
        constraints = [
            models.UniqueConstraint(
                fields=['time', 'language', 'schedule_type'],
                name='unique_bulletin_slot',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.time} {self.get_language_display()})"


class Bulletin(BaseModel):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=300, unique=True)
    intro = models.TextField()
    outro = models.TextField()
    language = models.CharField(max_length=20, choices=Language.choices, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=BulletinStatus.choices,
        default=BulletinStatus.DRAFT,
        db_index=True,
    )
    schedule = models.ForeignKey(
        BulletinSchedule,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bulletins',
    )
    scheduled_for = models.DateTimeField(null=True, blank=True)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='authored_bulletins',
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_bulletins',
    )
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='published_bulletins',
    )
    published_at = models.DateTimeField(null=True, blank=True)
    review_checklist = models.JSONField(null=True, blank=True)
    category = models.ForeignKey(
        'taxonomy.Category',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bulletins',
    )
    stories = models.ManyToManyField(
        'stories.Story',
        through='BulletinStory',
        blank=True,
        related_name='bulletins',
    )

    class Meta:
        db_table = 'bulletins'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def ordered_story_links(self):
        return self.story_links.select_related('story').order_by('order')


class BulletinStory(BaseModel):
    bulletin = models.ForeignKey(Bulletin, on_delete=models.CASCADE, related_name='story_links')
    story = models.ForeignKey('stories.Story', on_delete=models.CASCADE, related_name='bulletin_links')
    order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'bulletin_stories'
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['bulletin', 'story'], name='unique_bulletin_story'),
        ]
