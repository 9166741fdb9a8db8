"""
Celery tasks for shows.
"""

import logging

from celery import shared_task
from django.db import transaction
from django.utils import timezone

from .models import Episode, EpisodeStatus
from .services import publish_episode

logger = logging.getLogger(__name__)


@shared_task
def publish_scheduled_episodes():
    """Publish DRAFT episodes whose scheduled time has passed."""
    now = timezone.now()
    due = Episode.objects.filter(
        status=EpisodeStatus.DRAFT,
        scheduled_publish_at__isnull=False,
        scheduled_publish_at__lte=now,
    ).select_related('published_by')

    published = 0
    with transaction.atomic():
        for episode in due.select_for_update(of=('self',)):
            publish_episode(episode, episode.published_by, when=now, trigger='scheduled')
            episode.save()
            published += 1

    if published:
        logger.info("Published %d scheduled episodes", published)
    return {"published": published}
