"""
Custom user model.

One table holds both newsroom staff (``user_type=STAFF`` with a
``staff_role``) and radio-station accounts (``user_type=RADIO`` with a
``radio_station``). Users log in with their email address.
"""

import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.core.choices import Language, StaffRole, TranslationLanguage, UserType
from apps.core.models import BaseModel
from apps.core.permissions import role_at_least


class UserManager(BaseUserManager):

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Users must have an email address')
        email = self.normalize_email(email).lower()
        extra_fields.setdefault('user_type', UserType.STAFF)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('user_type', UserType.STAFF)
        extra_fields.setdefault('staff_role', StaffRole.SUPERADMIN)
        extra_fields.setdefault('first_name', 'Super')
        extra_fields.setdefault('last_name', 'Admin')
        return self.create_user(email, password, **extra_fields)

    def staff(self):
        return self.filter(user_type=UserType.STAFF, is_active=True)


class User(BaseModel, AbstractBaseUser, PermissionsMixin):
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    mobile_number = models.CharField(max_length=30, blank=True)

    user_type = models.CharField(max_length=10, choices=UserType.choices, db_index=True)
    staff_role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        null=True,
        blank=True,
        db_index=True,
    )
    radio_station = models.ForeignKey(
        'stations.Station',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='users',
    )

    is_active = models.BooleanField(default=True)
    is_primary_contact = models.BooleanField(default=False)
    must_change_password = models.BooleanField(default=False)

    translation_language = models.CharField(
        max_length=20,
        choices=TranslationLanguage.choices,
        null=True,
        blank=True,
    )
    default_language_preference = models.CharField(
        max_length=20,
        choices=Language.choices,
        default=Language.ENGLISH,
    )

    last_login_at = models.DateTimeField(null=True, blank=True)
    reset_token = models.CharField(max_length=128, null=True, blank=True, unique=True)
    reset_token_expires_at = models.DateTimeField(null=True, blank=True)
    profile_picture_url = models.URLField(max_length=1000, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        db_table = 'users'
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return f"{self.get_full_name()} <{self.email}>"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self):
        return self.first_name

    @property
    def is_staff(self):
        """Django admin access: ADMIN and SUPERADMIN staff only."""
        return self.is_staff_user and role_at_least(self.staff_role, StaffRole.ADMIN)

    @property
    def is_staff_user(self):
        return self.user_type == UserType.STAFF

    @property
    def is_radio_user(self):
        return self.user_type == UserType.RADIO

    def clean(self):
        super().clean()
        if self.user_type == UserType.STAFF and not self.staff_role:
            raise ValidationError({'staff_role': 'Staff users must have a staff role.'})
        if self.user_type == UserType.RADIO and not self.radio_station_id:
            raise ValidationError({'radio_station': 'Radio users must belong to a station.'})

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        if self.user_type == UserType.RADIO:
            self.staff_role = None
            self.translation_language = None
        else:
            self.radio_station = None
            self.is_primary_contact = False
        self.is_superuser = self.staff_role == StaffRole.SUPERADMIN
        super().save(*args, **kwargs)

    def issue_reset_token(self):
        """Store a fresh single-use reset token and return it."""
        self.reset_token = secrets.token_urlsafe(32)
        self.reset_token_expires_at = timezone.now() + timedelta(seconds=settings.PASSWORD_RESET_TOKEN_TTL)
        self.save(update_fields=['reset_token', 'reset_token_expires_at', 'updated_at'])
        return self.reset_token

    def clear_reset_token(self):
        self.reset_token = None
        self.reset_token_expires_at = None

    @property
    def reset_token_valid(self):
        return bool(
            self.reset_token
            and self.reset_token_expires_at
            and self.reset_token_expires_at > timezone.now()
        )
