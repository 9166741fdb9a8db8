"""
Station content filtering.

A story reaches a station when it is published, sits outside the
station's blocked categories and carries at least one allowed LANGUAGE
classification and one allowed RELIGION classification (matched by name).
"""

import uuid

from django.db.models import Exists, OuterRef

from apps.core.choices import ClassificationType, StoryStage
from apps.core.languages import classification_name_to_language
from apps.stories.models import Story
from apps.taxonomy.models import Category, Classification


def visible_stories(station, queryset=None):
    queryset = Story.objects.all() if queryset is None else queryset
    language_match = Classification.objects.filter(
        stories=OuterRef('pk'),
        type=ClassificationType.LANGUAGE,
        is_active=True,
        name__in=station.allowed_languages or [],
    )
    religion_match = Classification.objects.filter(
        stories=OuterRef('pk'),
        type=ClassificationType.RELIGION,
        name__in=station.allowed_religions or [],
    )
    queryset = queryset.filter(stage=StoryStage.PUBLISHED).filter(Exists(language_match), Exists(religion_match))
    blocked = station.blocked_category_ids
    if blocked:
        queryset = queryset.exclude(category_id__in=blocked)
    return queryset


def allowed_language_codes(station):
    """Story/bulletin language codes for the station's allowed display names."""
    codes = (classification_name_to_language(name) for name in station.allowed_languages or [])
    return [code for code in codes if code]


def normalize_language(value):
    """Accept either a code (``XHOSA``) or a display name (``Xhosa``)."""
    if not value:
        return None
    return classification_name_to_language(value) or value.upper()


def find_category(value):
    """Look a category up by id or slug."""
    try:
        return Category.objects.filter(pk=uuid.UUID(str(value))).first()
    except ValueError:
        return Category.objects.filter(slug=value).first()


def filter_by_category(queryset, value):
    category = find_category(value)
    if category is None:
        return queryset.none()
    return queryset.filter(category_id__in=category.descendant_ids())
