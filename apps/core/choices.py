"""
Shared enumerations for Newskoop.

Values are stored verbatim in the database and exchanged over the API,
so they stay upper-case.
"""

from django.db import models


class UserType(models.TextChoices):
    STAFF = 'STAFF', 'Staff'
    RADIO = 'RADIO', 'Radio'


class StaffRole(models.TextChoices):
    SUPERADMIN = 'SUPERADMIN', 'Super Admin'
    ADMIN = 'ADMIN', 'Admin'
    EDITOR = 'EDITOR', 'Editor'
    SUB_EDITOR = 'SUB_EDITOR', 'Sub-Editor'
    JOURNALIST = 'JOURNALIST', 'Journalist'
    INTERN = 'INTERN', 'Intern'


class Language(models.TextChoices):
    ENGLISH = 'ENGLISH', 'English'
    AFRIKAANS = 'AFRIKAANS', 'Afrikaans'
    XHOSA = 'XHOSA', 'Xhosa'


class TranslationLanguage(models.TextChoices):
    AFRIKAANS = 'AFRIKAANS', 'Afrikaans'
    XHOSA = 'XHOSA', 'Xhosa'


class Province(models.TextChoices):
    EASTERN_CAPE = 'EASTERN_CAPE', 'Eastern Cape'
    FREE_STATE = 'FREE_STATE', 'Free State'
    GAUTENG = 'GAUTENG', 'Gauteng'
    KWAZULU_NATAL = 'KWAZULU_NATAL', 'KwaZulu-Natal'
    LIMPOPO = 'LIMPOPO', 'Limpopo'
    MPUMALANGA = 'MPUMALANGA', 'Mpumalanga'
    NORTHERN_CAPE = 'NORTHERN_CAPE', 'Northern Cape'
    NORTH_WEST = 'NORTH_WEST', 'North West'
    WESTERN_CAPE = 'WESTERN_CAPE', 'Western Cape'
    NATIONAL = 'NATIONAL', 'National'


class StoryStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    IN_REVIEW = 'IN_REVIEW', 'In Review'
    NEEDS_REVISION = 'NEEDS_REVISION', 'Needs Revision'
    PENDING_APPROVAL = 'PENDING_APPROVAL', 'Pending Approval'
    PENDING_TRANSLATION = 'PENDING_TRANSLATION', 'Pending Translation'
    APPROVED = 'APPROVED', 'Approved'
    READY_TO_PUBLISH = 'READY_TO_PUBLISH', 'Ready to Publish'
    PUBLISHED = 'PUBLISHED', 'Published'
    ARCHIVED = 'ARCHIVED', 'Archived'


class StoryStage(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    NEEDS_JOURNALIST_REVIEW = 'NEEDS_JOURNALIST_REVIEW', 'Needs Journalist Review'
    NEEDS_SUB_EDITOR_APPROVAL = 'NEEDS_SUB_EDITOR_APPROVAL', 'Needs Sub-Editor Approval'
    APPROVED = 'APPROVED', 'Approved'
    TRANSLATED = 'TRANSLATED', 'Translated'
    PUBLISHED = 'PUBLISHED', 'Published'


class ClassificationType(models.TextChoices):
    LANGUAGE = 'LANGUAGE', 'Language'
    RELIGION = 'RELIGION', 'Religion'
    LOCALITY = 'LOCALITY', 'Locality'
