"""
Audit trail helpers.

    log_audit(request.user, 'story.create', 'Story', story.id,
              metadata={'title': story.title}, request=request)

Sensitive metadata keys are redacted before they are stored. Audit writes
are never allowed to fail the request that triggered them.
"""

import logging
from typing import Any, Optional

from django.db import DatabaseError, transaction

logger = logging.getLogger(__name__)

SENSITIVE_KEY_PARTS = ('password', 'token', 'secret', 'key', 'authorization')
REDACTED = '[REDACTED]'


class AuditAction:
    """Action names used across the codebase."""
    LOGIN = 'auth.login'
    LOGIN_FAILED = 'auth.login_failed'
    LOGOUT = 'auth.logout'
    PASSWORD_RESET_REQUESTED = 'auth.password_reset_requested'
    PASSWORD_RESET = 'auth.password_reset'
    PASSWORD_CHANGED = 'auth.password_changed'

    USER_CREATE = 'user.create'
    USER_UPDATE = 'user.update'
    USER_DELETE = 'user.delete'

    STATION_CREATE = 'station.create'
    STATION_UPDATE = 'station.update'
    STATION_DELETE = 'station.delete'
    STATION_PRIMARY_CONTACT = 'station.primary_contact_changed'

    STORY_CREATE = 'story.create'
    STORY_UPDATE = 'story.update'
    STORY_DELETE = 'story.delete'
    STORY_STATUS_CHANGE = 'story.status_change'
    STORY_REVISION_REQUESTED = 'story.revision_requested'
    STORY_REASSIGNED = 'story.reassigned'
    STORY_FLAGGED = 'story.flagged_for_bulletin'
    STORY_UNFLAGGED = 'story.unflagged_for_bulletin'
    STORY_CREATE_TRANSLATIONS = 'story.create_translations'
    STORY_AUTO_PUBLISH_TRANSLATION = 'story.auto_publish_translation'
    STORY_AUTO_MARK_TRANSLATED = 'story.auto_mark_as_translated'

    BULLETIN_CREATE = 'bulletin.create'
    BULLETIN_UPDATE = 'bulletin.update'
    BULLETIN_DELETE = 'bulletin.delete'

    SHOW_CREATE = 'show.create'
    SHOW_UPDATE = 'show.update'
    SHOW_DELETE = 'show.delete'
    EPISODE_PUBLISH = 'episode.publish'
    EPISODE_UNPUBLISH = 'episode.unpublish'

    TASK_CREATE = 'task.create'
    TASK_ASSIGN = 'task.assign'
    TASK_COMPLETE = 'task.complete'
    TASK_DELETE = 'task.delete'

    ANNOUNCEMENT_CREATE = 'announcement.create'
    ANNOUNCEMENT_UPDATE = 'announcement.update'
    ANNOUNCEMENT_DELETE = 'announcement.delete'

    @staticmethod
    def stage(action: str) -> str:
        return f'story.stage.{action}'


def sanitize_metadata(value: Any) -> Any:
    """Recursively replace values whose key looks like a secret."""
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            if any(part in str(key).lower() for part in SENSITIVE_KEY_PARTS):
                cleaned[key] = REDACTED
            else:
                cleaned[key] = sanitize_metadata(item)
        return cleaned
    if isinstance(value, (list, tuple)):
        return [sanitize_metadata(item) for item in value]
    return value


def get_client_ip(request) -> str:
    if request is None:
        return ''
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR', '') or ''


def log_audit(
    user,
    action: str,
    entity_type: str = '',
    entity_id: Any = '',
    metadata: Optional[dict] = None,
    request=None,
):
    """Record an audit entry. Returns the AuditLog or None on failure."""
    from apps.core.models import AuditLog

    if user is not None and not getattr(user, 'is_authenticated', False):
        user = None

    try:
        # Savepoint so a failed insert does not poison an outer transaction
        with transaction.atomic():
            return AuditLog.objects.create(
                user=user,
                action=action,
                entity_type=entity_type or '',
                entity_id=str(entity_id) if entity_id else '',
                metadata=sanitize_metadata(metadata or {}),
                ip_address=get_client_ip(request),
                user_agent=(request.META.get('HTTP_USER_AGENT', '') if request is not None else '')[:500],
            )
    except DatabaseError:
        logger.exception("Failed to write audit log for %s", action)
        return None
