"""
Account operations shared by the user, station and radio views.
"""

import logging

from django.db import transaction
from django.utils.crypto import get_random_string

from apps.core import storage
from apps.core.exceptions import ErrorCode, ServiceUnavailableError

from .emails import EmailDeliveryError, send_welcome_email
from .models import User

logger = logging.getLogger(__name__)

TEMP_PASSWORD_LENGTH = 12


def generate_temporary_password():
    return get_random_string(TEMP_PASSWORD_LENGTH)


def create_user_with_welcome_email(**fields):
    """
    Create a user with a temporary password and send the welcome email.

    Both happen in one transaction: if the email cannot be delivered the
    user row is rolled back and ServiceUnavailableError is raised.
    """
    temporary_password = generate_temporary_password()
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                password=temporary_password,
                must_change_password=True,
                **fields,
            )
            send_welcome_email(user, temporary_password)
    except EmailDeliveryError as e:
        logger.error("User %s not created, welcome email failed: %s", fields.get('email'), e)
        raise ServiceUnavailableError(
            "Could not send the welcome email. The user was not created.",
            code=ErrorCode.EMAIL_DELIVERY_FAILED,
        ) from e
    return user


def replace_profile_picture(user, uploaded_file):
    """Upload a new profile picture and delete the old one."""
    storage.validate_image_file(uploaded_file)
    result = storage.upload(uploaded_file, folder='profile-pictures', kind='image')
    previous = user.profile_picture_url
    user.profile_picture_url = result.url
    user.save(update_fields=['profile_picture_url', 'updated_at'])
    if previous:
        storage.discard(previous)
    return user
