"""
Outbound account email.

Every message gets an EmailLog row that moves PENDING -> SENT or FAILED.
Delivery failures are re-raised as EmailDeliveryError so callers can
decide whether the surrounding operation should fail.
"""

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from apps.core.metrics import increment_email
from apps.core.models import EmailLog

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the mail backend refuses or fails to deliver a message."""

    def __init__(self, message, email_log=None):
        super().__init__(message)
        self.email_log = email_log


def _send(user, email_type, subject, template, context, metadata=None):
    email_log = EmailLog.objects.create(
        to=user.email,
        from_email=settings.DEFAULT_FROM_EMAIL,
        subject=subject,
        type=email_type,
        user=user,
        metadata=metadata or {},
        environment=settings.ENVIRONMENT,
    )

    context = {'user': user, **context}
    message = EmailMultiAlternatives(
        subject=subject,
        body=render_to_string(f'emails/{template}.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[user.email],
    )
    message.attach_alternative(render_to_string(f'emails/{template}.html', context), 'text/html')

    try:
        message.send(fail_silently=False)
    except OSError as e:
        email_log.mark_failed(str(e))
        increment_email(email_type, 'failed')
        logger.error("Failed to send %s email to %s: %s", email_type, user.email, e)
        raise EmailDeliveryError(f"Could not send email to {user.email}", email_log=email_log) from e

    email_log.mark_sent()
    increment_email(email_type, 'sent')
    logger.info("Sent %s email to %s", email_type, user.email)
    return email_log


def send_welcome_email(user, temporary_password):
    return _send(
        user,
        EmailLog.Type.WELCOME,
        'Welcome to Newskoop',
        'welcome',
        {
            'temporary_password': temporary_password,
            'login_url': f"{settings.FRONTEND_URL.rstrip('/')}/login",
        },
        metadata={'user_type': user.user_type},
    )


def send_password_reset_email(user, token):
    query = urlencode({'token': token})
    return _send(
        user,
        EmailLog.Type.PASSWORD_RESET,
        'Reset your Newskoop password',
        'password_reset',
        {
            'reset_url': f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?{query}",
            'expires_minutes': settings.PASSWORD_RESET_TOKEN_TTL // 60,
        },
    )
