"""
Announcement models.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.models import BaseModel


class AnnouncementPriority(models.TextChoices):
    LOW = 'LOW', 'Low'
    MEDIUM = 'MEDIUM', 'Medium'
    HIGH = 'HIGH', 'High'


class AnnouncementTargetAudience(models.TextChoices):
    ALL = 'ALL', 'All'
    NEWSROOM = 'NEWSROOM', 'Newsroom'
    RADIO = 'RADIO', 'Radio'


class AnnouncementQuerySet(models.QuerySet):

    def current(self):
        now = timezone.now()
        return self.filter(is_active=True).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))

    def for_audience(self, audience):
        return self.filter(target_audience__in=[AnnouncementTargetAudience.ALL, audience])

    def undismissed_by(self, user):
        return self.exclude(dismissals__user=user)


class Announcement(BaseModel):
    title = models.CharField(max_length=255)
    message = models.TextField()
    priority = models.CharField(
        max_length=10,
        choices=AnnouncementPriority.choices,
        default=AnnouncementPriority.MEDIUM,
    )
    target_audience = models.CharField(
        max_length=10,
        choices=AnnouncementTargetAudience.choices,
        default=AnnouncementTargetAudience.ALL,
    )
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='announcements',
    )

    objects = AnnouncementQuerySet.as_manager()

    class Meta:
        db_table = 'announcements'
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class AnnouncementDismissal(BaseModel):
    announcement = models.ForeignKey(Announcement, on_delete=models.CASCADE, related_name='dismissals')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='announcement_dismissals')

    class Meta:
        db_table = 'announcement_dismissals'
        constraints = [
            models.UniqueConstraint(fields=['announcement', 'user'], name='unique_announcement_dismissal'),
        ]
