"""
Celery tasks for stories.
"""

import logging

from celery import shared_task
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.choices import StoryStage, StoryStatus

from .models import Story
from .workflow import publish

logger = logging.getLogger(__name__)


def due_for_publishing(now=None):
    """
    Stories whose scheduled time has passed and that are ready to go out:
    TRANSLATED, or APPROVED originals that were never sent for translation.
    """
    now = now or timezone.now()
    ready = Q(stage=StoryStage.TRANSLATED) | (
        Q(stage=StoryStage.APPROVED, is_translation=False, translations__isnull=True)
        & ~Q(status=StoryStatus.PENDING_TRANSLATION)
    )
    return Story.objects.filter(scheduled_publish_at__lte=now).filter(ready).distinct().order_by('scheduled_publish_at')


@shared_task
def publish_scheduled_stories():
    published = 0
    failed = []
    for story_id in list(due_for_publishing().values_list('id', flat=True)):
        try:
            with transaction.atomic():
                story = Story.objects.select_for_update().get(pk=story_id)
                published += publish(story, user=None, trigger='scheduled')
        except Story.DoesNotExist:
            logger.warning("Scheduled story %s vanished before publishing", story_id)
        except Exception:
            logger.exception("Scheduled publishing failed for story %s", story_id)
            failed.append(str(story_id))

    if published or failed:
        logger.info("Scheduled publishing: %d published, %d failed", published, len(failed))
    return {"published": published, "failed": failed}
