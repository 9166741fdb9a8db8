"""
Audio clips live once in object storage and can be linked to any number
of stories and episodes.
"""

from django.conf import settings
from django.db import models

from apps.core.models import BaseModel


class AudioClip(BaseModel):
    filename = models.CharField(max_length=500, help_text='Storage path of the object')
    original_name = models.CharField(max_length=255)
    url = models.URLField(max_length=1000)
    duration = models.PositiveIntegerField(null=True, blank=True, help_text='Seconds')
    file_size = models.PositiveBigIntegerField(default=0)
    mime_type = models.CharField(max_length=100)
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='uploaded_audio_clips',
    )

    class Meta:
        db_table = 'audio_clips'
        ordering = ['-created_at']

    def __str__(self):
        return self.title or self.original_name

    @property
    def usage_count(self):
        return self.story_links.count() + self.episodes.count()

    @classmethod
    def from_upload(cls, result, uploaded_file, user, **fields):
        """Build a clip from an ``apps.core.storage.upload`` result."""
        title = fields.pop('title', '') or getattr(uploaded_file, 'name', '')
        return cls.objects.create(
            filename=result.pathname,
            original_name=getattr(uploaded_file, 'name', '') or result.pathname,
            url=result.url,
            file_size=result.size,
            mime_type=getattr(uploaded_file, 'content_type', '') or '',
            uploaded_by=user,
            title=title,
            **fields,
        )
