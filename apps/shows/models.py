"""
Show and episode models.
"""

from django.conf import settings
from django.db import models
from django.db.models import Max

from apps.core.models import BaseModel
from apps.core.slugs import slug_for


class EpisodeStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    PUBLISHED = 'PUBLISHED', 'Published'
    ARCHIVED = 'ARCHIVED', 'Archived'


class Show(BaseModel):
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=300, unique=True)
    description = models.TextField(blank=True)
    cover_image = models.URLField(max_length=1000, blank=True)
    category = models.ForeignKey(
        'taxonomy.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shows',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_shows',
    )
    is_active = models.BooleanField(default=True)
    is_published = models.BooleanField(default=False)
    tags = models.ManyToManyField('taxonomy.Tag', blank=True, related_name='shows')
    classifications = models.ManyToManyField('taxonomy.Classification', blank=True, related_name='shows')

    class Meta:
        db_table = 'shows'
        ordering = ['title']

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slug_for(Show, self.title, exclude_id=self.pk)
        super().save(*args, **kwargs)


class Episode(BaseModel):
    show = models.ForeignKey(Show, on_delete=models.CASCADE, related_name='episodes')
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=300)
    description = models.TextField(blank=True)
    episode_number = models.PositiveIntegerField()
    content = models.TextField(blank=True)
    cover_image = models.URLField(max_length=1000, blank=True)
    status = models.CharField(
        max_length=20,
        choices=EpisodeStatus.choices,
        default=EpisodeStatus.DRAFT,
        db_index=True,
    )
    duration = models.PositiveIntegerField(null=True, blank=True, help_text='Seconds')
    scheduled_publish_at = models.DateTimeField(null=True, blank=True, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='published_episodes',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_episodes',
    )
    audio_clips = models.ManyToManyField('media.AudioClip', blank=True, related_name='episodes')

    class Meta:
        db_table = 'episodes'
        ordering = ['-episode_number']
        constraints = [
            models.UniqueConstraint(fields=['show', 'slug'], name='unique_episode_slug_per_show'),
            models.UniqueConstraint(fields=['show', 'episode_number'], name='unique_episode_number_per_show'),
        ]

    def __str__(self):
        return f"{self.show.title} #{self.episode_number}: {self.title}"

    def save(self, *args, **kwargs):
        if not self.episode_number:
            highest = Episode.objects.filter(show_id=self.show_id).aggregate(n=Max('episode_number'))['n']
            self.episode_number = (highest or 0) + 1
        if not self.slug:
            self.slug = slug_for(
                Episode,
                self.title,
                exclude_id=self.pk,
                queryset=Episode.objects.filter(show_id=self.show_id),
            )
        super().save(*args, **kwargs)
