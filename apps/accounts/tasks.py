"""
Celery tasks for accounts.
"""

import logging

from celery import shared_task
from django.utils import timezone

from .emails import EmailDeliveryError, send_password_reset_email
from .models import User

logger = logging.getLogger(__name__)


@shared_task
def purge_expired_reset_tokens():
    """Clear reset tokens whose expiry has passed."""
    cleared = User.objects.filter(
        reset_token__isnull=False,
        reset_token_expires_at__lt=timezone.now(),
    ).update(reset_token=None, reset_token_expires_at=None)
    if cleared:
        logger.info("Cleared %d expired password reset tokens", cleared)
    return {"cleared": cleared}


@shared_task(bind=True, max_retries=3)
def send_password_reset_email_task(self, user_id: str, token: str):
    try:
        user = User.objects.get(id=user_id)
        send_password_reset_email(user, token)
        return {"user_id": user_id, "status": "sent"}
    except User.DoesNotExist:
        logger.error("User %s not found for password reset email", user_id)
        return {"error": "not_found", "user_id": user_id}
    except EmailDeliveryError as exc:
        logger.error("Password reset email failed for %s: %s", user_id, exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
