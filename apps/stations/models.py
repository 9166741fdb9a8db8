"""
Station model.

A station's content filters are stored by display name, e.g.
``allowed_languages=["English", "Xhosa"]``, and matched against the names
of LANGUAGE and RELIGION classifications on stories.
"""

from django.db import models

from apps.core.choices import Province
from apps.core.models import BaseModel


def default_allowed_languages():
    return ['English', 'Afrikaans', 'Xhosa']


def default_allowed_religions():
    return ['Christian', 'Muslim', 'Neutral']


class Station(BaseModel):
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    logo_url = models.URLField(max_length=1000, blank=True)
    province = models.CharField(max_length=20, choices=Province.choices, default=Province.GAUTENG)
    contact_number = models.CharField(max_length=30, blank=True)
    contact_email = models.EmailField(blank=True)
    website = models.URLField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    has_content_access = models.BooleanField(default=True)
    allowed_languages = models.JSONField(default=default_allowed_languages, blank=True)
    allowed_religions = models.JSONField(default=default_allowed_religions, blank=True)
    blocked_categories = models.JSONField(
        default=list,
        blank=True,
        help_text='Category ids hidden from this station',
    )
    classifications = models.ManyToManyField(
        'taxonomy.Classification',
        blank=True,
        related_name='stations',
    )

    class Meta:
        db_table = 'stations'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def can_access_content(self):
        return self.is_active and self.has_content_access

    @property
    def blocked_category_ids(self):
        return [str(cid) for cid in (self.blocked_categories or [])]

    def primary_contacts(self):
        return self.users.filter(is_primary_contact=True)
