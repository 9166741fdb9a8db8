"""
Rate Limiting / Throttling for Newskoop.

Custom DRF throttle classes for the endpoints that are worth protecting.

Usage in views:
    from apps.core.throttling import LoginThrottle

    class LoginView(APIView):
        throttle_classes = [LoginThrottle]

Rates come from REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']; each class
falls back to its own default when the scope is not configured.
"""

from rest_framework.throttling import UserRateThrottle, AnonRateThrottle
import logging

logger = logging.getLogger(__name__)


class LoginThrottle(AnonRateThrottle):
    """
    Throttle for credential checks.

    Applies to:
    - POST /api/auth/login/
    - POST /api/auth/token/

    Default: 10 requests/minute per IP
    """
    scope = 'login'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '10/minute'


class PasswordResetThrottle(AnonRateThrottle):
    """
    Throttle for password reset requests, which send email.

    Default: 5 requests/hour per IP
    """
    scope = 'password_reset'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '5/hour'


class UploadThrottle(UserRateThrottle):
    """
    Throttle for endpoints that push files to object storage.

    Applies to audio library uploads, story/episode audio, covers,
    logos and profile pictures.

    Default: 30 requests/hour
    """
    scope = 'upload'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '30/hour'


class DestructiveActionThrottle(UserRateThrottle):
    """
    Throttle for destructive actions (DELETE on stories, users, stations).

    Default: 30 requests/hour
    """
    scope = 'destructive'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '30/hour'


DEFAULT_THROTTLE_RATES = {
    'login': '10/minute',
    'password_reset': '5/hour',
    'upload': '30/hour',
    'destructive': '30/hour',
}
