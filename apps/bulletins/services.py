"""
Bulletin assembly and status changes.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.core.audit import AuditAction, log_audit
from apps.core.choices import StaffRole
from apps.core.exceptions import ErrorCode, PermissionDeniedError, ValidationError, WorkflowError
from apps.core.metrics import increment_content_published
from apps.core.permissions import get_user_role, role_at_least
from apps.core.realtime import Channels, EventType, create_event, publish_on_commit
from apps.core.slugs import slug_for
from apps.stories.models import Story
from apps.taxonomy.models import Category

from .models import BULLETIN_CATEGORY_NAME, BULLETIN_TRANSITIONS, Bulletin, BulletinStatus, BulletinStory

logger = logging.getLogger(__name__)


def get_bulletin_category():
    """The system category every bulletin is filed under, created on first use."""
    category = Category.objects.filter(name=BULLETIN_CATEGORY_NAME, parent__isnull=True).first()
    if category is None:
        category = Category.objects.create(name=BULLETIN_CATEGORY_NAME, is_editable=False)
        logger.info("Created system category %s", BULLETIN_CATEGORY_NAME)
    return category


def can_transition(role, current, new):
    if current == new:
        return True
    if role_at_least(role, StaffRole.ADMIN):
        return True
    return new in BULLETIN_TRANSITIONS.get(current, set())


def set_bulletin_stories(bulletin, items):
    """
    Replace the ordered story list. Items are ``{story_id, order?}``; a
    missing order falls back to the item's position.
    """
    story_ids = [item['story_id'] for item in items]
    if len(set(story_ids)) != len(story_ids):
        raise ValidationError("A story can only appear once in a bulletin", code=ErrorCode.DUPLICATE, field='stories')

    published = set(Story.objects.published().filter(id__in=story_ids).values_list('id', flat=True))
    unpublished = [str(story_id) for story_id in story_ids if story_id not in published]
    if unpublished:
        raise ValidationError(
            "Only published stories can be added to a bulletin",
            code=ErrorCode.INVALID_VALUE,
            field='stories',
            details={'story_ids': unpublished},
        )

    with transaction.atomic():
        bulletin.story_links.all().delete()
        BulletinStory.objects.bulk_create([
            BulletinStory(bulletin=bulletin, story_id=item['story_id'], order=item.get('order', position))
            for position, item in enumerate(items)
        ])


def _announce(event_type, bulletin, user, **data):
    publish_on_commit(
        Channels.BULLETINS,
        create_event(event_type, 'bulletin', bulletin.id, user.id if user else None, data=data or None),
    )


def create_bulletin(user, data, request=None):
    stories = data.pop('stories', None)
    data.pop('status', None)

    with transaction.atomic():
        bulletin = Bulletin(author=user, category=get_bulletin_category(), **data)
        bulletin.slug = slug_for(Bulletin, bulletin.title)
        bulletin.save()
        if stories:
            set_bulletin_stories(bulletin, stories)
        log_audit(
            user,
            AuditAction.BULLETIN_CREATE,
            'Bulletin',
            bulletin.id,
            metadata={'title': bulletin.title, 'stories': len(stories or [])},
            request=request,
        )
        _announce(EventType.BULLETIN_CREATED, bulletin, user, title=bulletin.title)
    return bulletin


def update_bulletin(bulletin, user, data, request=None):
    role = get_user_role(user)
    if bulletin.status == BulletinStatus.PUBLISHED and not role_at_least(role, StaffRole.EDITOR):
        raise PermissionDeniedError("Only editors can change a published bulletin")

    stories = data.pop('stories', None)
    new_status = data.pop('status', None)
    previous_status = bulletin.status
    if new_status and not can_transition(role, previous_status, new_status):
        raise WorkflowError(f"Cannot move bulletin from {previous_status} to {new_status}")

    with transaction.atomic():
        if 'title' in data and data['title'] != bulletin.title:
            bulletin.slug = slug_for(Bulletin, data['title'], exclude_id=bulletin.pk)
        for field, value in data.items():
            setattr(bulletin, field, value)

        if new_status and new_status != previous_status:
            bulletin.status = new_status
            if new_status == BulletinStatus.IN_REVIEW:
                bulletin.reviewer = None
            elif new_status in (BulletinStatus.APPROVED, BulletinStatus.NEEDS_REVISION):
                bulletin.reviewer = user
            if new_status == BulletinStatus.PUBLISHED:
                bulletin.published_at = timezone.now()
                bulletin.published_by = user
        bulletin.save()
        if stories is not None:
            set_bulletin_stories(bulletin, stories)

        metadata = {'fields': sorted(data)}
        if new_status and new_status != previous_status:
            metadata.update({'from_status': previous_status, 'to_status': new_status})
        log_audit(user, AuditAction.BULLETIN_UPDATE, 'Bulletin', bulletin.id, metadata=metadata, request=request)

        published_now = new_status == BulletinStatus.PUBLISHED and previous_status != BulletinStatus.PUBLISHED
        _announce(
            EventType.BULLETIN_PUBLISHED if published_now else EventType.BULLETIN_UPDATED,
            bulletin,
            user,
            status=bulletin.status,
        )

    if published_now:
        increment_content_published('bulletin')
    return bulletin
