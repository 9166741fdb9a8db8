"""
Translation creation.

A translation is a new Story in the target language, linked to its
original and assigned to a translator, who becomes its author.
"""

import logging

from django.db import transaction

from apps.core.audit import AuditAction, log_audit
from apps.core.choices import ClassificationType, StoryStage, StoryStatus, TranslationLanguage
from apps.core.exceptions import ErrorCode, ValidationError, WorkflowError
from apps.core.languages import language_to_classification_name
from apps.core.slugs import slug_for
from apps.taxonomy.models import Classification

from .models import Story, StoryAudioClip

logger = logging.getLogger(__name__)


def _validate_items(story, items):
    from .workflow import get_active_staff

    if not items:
        raise ValidationError(
            "At least one translation is required",
            code=ErrorCode.MISSING_FIELD,
            field='translations',
        )

    seen = set()
    resolved = []
    for item in items:
        language = str(item.get('language') or '').upper()
        if language not in TranslationLanguage.values:
            raise ValidationError(
                f"Unsupported translation language: {item.get('language')}",
                code=ErrorCode.INVALID_VALUE,
                field='language',
            )
        if language in seen:
            raise ValidationError(
                f"{language} is listed more than once",
                code=ErrorCode.DUPLICATE,
                field='language',
            )
        seen.add(language)
        translator = get_active_staff(item.get('assigned_to_id'), field='assigned_to_id')
        resolved.append((language, translator))

    existing = set(story.translations.filter(language__in=seen).values_list('language', flat=True))
    if existing:
        raise ValidationError(
            f"Translations already exist for: {', '.join(sorted(existing))}",
            code=ErrorCode.DUPLICATE,
            details={'languages': sorted(existing)},
        )
    return resolved


def create_translations(story, user, items, request=None):
    """
    Create one translation story per ``{language, assigned_to_id}`` item.

    The original must be an APPROVED, non-translation story. Its status
    moves to PENDING_TRANSLATION. Returns the new stories.
    """
    if story.is_translation:
        raise WorkflowError("Cannot translate a translation")
    if story.stage != StoryStage.APPROVED:
        raise WorkflowError(f"Story must be approved before translation (currently {story.stage})")

    resolved = _validate_items(story, items)

    audio_clip_ids = list(story.audio_links.values_list('audio_clip_id', flat=True))
    tag_ids = list(story.tags.values_list('id', flat=True))
    carried_classifications = list(
        story.classifications.exclude(type=ClassificationType.LANGUAGE).values_list('id', flat=True)
    )

    created = []
    with transaction.atomic():
        for language, translator in resolved:
            translation = Story.objects.create(
                title=story.title,
                slug=slug_for(Story, story.title, suffix=language.lower()),
                content='',
                is_translation=True,
                original_story=story,
                language=language,
                author=translator,
                author_role=translator.staff_role,
                category_id=story.category_id,
                stage=StoryStage.DRAFT,
                status=StoryStatus.DRAFT,
            )
            StoryAudioClip.objects.bulk_create([
                StoryAudioClip(story=translation, audio_clip_id=clip_id, added_by=user)
                for clip_id in audio_clip_ids
            ])
            translation.tags.set(tag_ids)

            classification_ids = list(carried_classifications)
            language_label = Classification.objects.filter(
                type=ClassificationType.LANGUAGE,
                name__iexact=language_to_classification_name(language),
            ).first()
            if language_label is not None:
                classification_ids.append(language_label.id)
            translation.classifications.set(classification_ids)
            created.append(translation)

        story.status = StoryStatus.PENDING_TRANSLATION
        story.save(update_fields=['status', 'updated_at'])

        log_audit(
            user,
            AuditAction.STORY_CREATE_TRANSLATIONS,
            'Story',
            story.id,
            metadata={
                'languages': [language for language, _ in resolved],
                'translation_ids': [str(t.id) for t in created],
            },
            request=request,
        )

    logger.info("Created %d translations for story %s", len(created), story.id)
    return created
