"""
Best-effort real-time notifications over the Ably REST API.

Publishing never raises: a newsroom save must not fail because the
notification service is down. Callers inside a transaction should use
``publish_on_commit`` so clients only hear about committed changes.
"""

import logging
import time
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

import requests
from django.conf import settings
from django.db import transaction

from apps.core.metrics import increment_realtime_publish

logger = logging.getLogger(__name__)


class Channels:
    STORIES = 'newsroom:stories'
    BULLETINS = 'newsroom:bulletins'
    SHOWS = 'newsroom:shows'
    EPISODES = 'newsroom:episodes'
    DASHBOARD = 'newsroom:dashboard'


class EventType:
    STORY_CREATED = 'story:created'
    STORY_UPDATED = 'story:updated'
    STORY_DELETED = 'story:deleted'
    STORY_STAGE_CHANGED = 'story:stage_changed'
    STORY_STATUS_CHANGED = 'story:status_changed'
    STORY_PUBLISHED = 'story:published'
    BULLETIN_CREATED = 'bulletin:created'
    BULLETIN_UPDATED = 'bulletin:updated'
    BULLETIN_PUBLISHED = 'bulletin:published'
    SHOW_CREATED = 'show:created'
    SHOW_UPDATED = 'show:updated'
    EPISODE_PUBLISHED = 'episode:published'


def is_realtime_enabled() -> bool:
    return bool(getattr(settings, 'ABLY_ENABLED', False) and getattr(settings, 'ABLY_API_KEY', ''))


def create_event(
    event_type: str,
    entity_type: str,
    entity_id: Any,
    user_id: Any = None,
    data: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    event = {
        'type': event_type,
        'entityType': entity_type,
        'entityId': str(entity_id),
        'userId': str(user_id) if user_id else None,
        'timestamp': datetime.now(dt_timezone.utc).isoformat(),
    }
    if data:
        event['data'] = data
    if metadata:
        event['metadata'] = metadata
    return event


def _api_key_parts():
    key_name, _, key_secret = settings.ABLY_API_KEY.partition(':')
    return key_name, key_secret


def publish_event(channel: str, event: Dict[str, Any]) -> bool:
    """
    Publish one message. Returns True when the service accepted it.

    Transport and HTTP errors are logged and swallowed.
    """
    if not is_realtime_enabled():
        increment_realtime_publish('skipped')
        return False

    url = f"{settings.ABLY_REST_URL.rstrip('/')}/channels/{requests.utils.quote(channel, safe='')}/messages"
    try:
        response = requests.post(
            url,
            json={'name': event.get('type', 'message'), 'data': event},
            auth=_api_key_parts(),
            timeout=getattr(settings, 'ABLY_TIMEOUT', 5),
        )
        response.raise_for_status()
    except requests.RequestException as e:
        increment_realtime_publish('error')
        logger.warning("Real-time publish to %s failed: %s", channel, e)
        return False

    increment_realtime_publish('sent')
    logger.debug("Published %s to %s", event.get('type'), channel)
    return True


def publish_on_commit(channel: str, event: Dict[str, Any]) -> None:
    """Defer ``publish_event`` until the surrounding transaction commits."""
    transaction.on_commit(lambda: publish_event(channel, event))


def request_token(client_id: str) -> Dict[str, Any]:
    """
    Ask Ably for a short-lived token for a browser client.

    Unlike publishing, token failures propagate; the caller maps them to 503.
    """
    key_name, _ = _api_key_parts()
    url = f"{settings.ABLY_REST_URL.rstrip('/')}/keys/{key_name}/requestToken"
    response = requests.post(
        url,
        json={
            'keyName': key_name,
            'clientId': client_id,
            'timestamp': int(time.time() * 1000),
            'capability': '{"newsroom:*":["subscribe"]}',
        },
        auth=_api_key_parts(),
        timeout=getattr(settings, 'ABLY_TIMEOUT', 5),
    )
    response.raise_for_status()
    return response.json()
