"""
Episode publishing shared by the API and the scheduler.
"""

import logging

from django.utils import timezone

from apps.core.metrics import increment_content_published
from apps.core.realtime import Channels, EventType, create_event, publish_on_commit

from .models import EpisodeStatus

logger = logging.getLogger(__name__)


def publish_episode(episode, user, when=None, trigger='manual'):
    """Stamp an episode as published and announce it once committed. The caller saves."""
    episode.status = EpisodeStatus.PUBLISHED
    episode.published_at = when or timezone.now()
    episode.published_by = user
    episode.scheduled_publish_at = None
    publish_on_commit(
        Channels.EPISODES,
        create_event(
            EventType.EPISODE_PUBLISHED,
            'episode',
            episode.id,
            user.id if user else None,
            data={'show_id': str(episode.show_id), 'title': episode.title},
        ),
    )
    increment_content_published('episode', trigger=trigger)
    logger.info("Episode %s published (%s)", episode.id, trigger)
