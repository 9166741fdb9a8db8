"""
Editorial stage workflow.

    perform_stage_action(story, request.user, 'approve_story', data, request=request)

Each action validates the requester and the story's current stage, moves
the story, stores the relevant checklist and writes an audit row, all in
one transaction. Realtime events go out after commit.

Failures raise:

- ``PermissionDeniedError`` (403) when the role may not take the action
- ``WorkflowError`` (400) when the story is in the wrong stage
- ``ValidationError`` (400) for missing or unsuitable assignees and data
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.core.audit import AuditAction, log_audit
from apps.core.choices import ClassificationType, StaffRole, StoryStage, StoryStatus, UserType
from apps.core.exceptions import ErrorCode, PermissionDeniedError, ValidationError, WorkflowError
from apps.core.metrics import increment_content_published, increment_workflow_transition
from apps.core.permissions import (
    can_approve_story_stage,
    can_publish_story,
    can_review_story,
    can_send_for_translation,
    get_user_role,
    role_at_least,
)
from apps.core.realtime import Channels, EventType, create_event, publish_on_commit

from .models import Story

logger = logging.getLogger(__name__)

STAGE_ACTIONS = {}

# Stages a translation may sit at for its original to count as translated
TRANSLATION_DONE_STAGES = {StoryStage.APPROVED, StoryStage.TRANSLATED, StoryStage.PUBLISHED}


def stage_action(name):
    def register(func):
        STAGE_ACTIONS[name] = func
        return func
    return register


def get_active_staff(user_id, field='assigned_user_id'):
    if not user_id:
        raise ValidationError("An assignee is required", code=ErrorCode.MISSING_FIELD, field=field)
    user = User.objects.filter(pk=user_id, user_type=UserType.STAFF, is_active=True).first()
    if user is None:
        raise ValidationError("Assigned user not found or inactive", code=ErrorCode.INVALID_VALUE, field=field)
    return user


def missing_approval_requirements(story):
    """What a story still lacks before it can be approved."""
    missing = []
    if not story.category_id:
        missing.append('category')
    types = set(story.classifications.values_list('type', flat=True))
    if ClassificationType.LANGUAGE not in types:
        missing.append('language classification')
    if ClassificationType.RELIGION not in types:
        missing.append('religion classification')
    return missing


def perform_stage_action(story, user, action, data=None, request=None):
    """Run one stage action and return the refreshed story."""
    handler = STAGE_ACTIONS.get(action)
    if handler is None:
        raise ValidationError("Invalid action", code=ErrorCode.INVALID_VALUE, field='action')

    role = get_user_role(user)
    data = data or {}

    with transaction.atomic():
        story = Story.objects.select_for_update().get(pk=story.pk)
        previous_stage = story.stage
        handler(story, user, role, data, request)
        log_audit(
            user,
            AuditAction.stage(action),
            'Story',
            story.id,
            metadata={'from_stage': previous_stage, 'to_stage': story.stage, 'title': story.title},
            request=request,
        )
        publish_on_commit(
            Channels.STORIES,
            create_event(
                EventType.STORY_STAGE_CHANGED,
                'story',
                story.id,
                user.id,
                data={'action': action, 'from': previous_stage, 'to': story.stage},
            ),
        )

    increment_workflow_transition(action)
    logger.info("Story %s: %s (%s -> %s) by %s", story.id, action, previous_stage, story.stage, user.email)
    story.refresh_from_db()
    return story


# =============================================================================
# Actions
# =============================================================================

@stage_action('submit_for_review')
def submit_for_review(story, user, role, data, request):
    if story.author_role != StaffRole.INTERN:
        raise WorkflowError("Only stories written by interns are submitted for review")
    if story.author_id != user.id and not role_at_least(role, StaffRole.EDITOR):
        raise PermissionDeniedError("Only the author can submit this story for review")
    if story.stage != StoryStage.DRAFT:
        raise WorkflowError(f"Cannot submit for review from {story.stage} stage")

    reviewer = get_active_staff(data.get('assigned_user_id'))
    if reviewer.staff_role != StaffRole.JOURNALIST:
        raise ValidationError("Reviewer must be a journalist", code=ErrorCode.INVALID_VALUE, field='assigned_user_id')

    story.stage = StoryStage.NEEDS_JOURNALIST_REVIEW
    story.status = StoryStatus.IN_REVIEW
    story.assigned_reviewer = reviewer
    story.author_checklist = data.get('checklist_data') or {}
    story.save()


@stage_action('send_for_approval')
def send_for_approval(story, user, role, data, request):
    if not can_review_story(role):
        raise PermissionDeniedError("Insufficient permissions to send for approval")

    expected = StoryStage.NEEDS_JOURNALIST_REVIEW if story.author_role == StaffRole.INTERN else StoryStage.DRAFT
    if story.stage != expected:
        raise WorkflowError(f"Cannot send for approval from {story.stage} stage")

    approver = get_active_staff(data.get('assigned_user_id'))
    if not role_at_least(approver.staff_role, StaffRole.SUB_EDITOR):
        raise ValidationError(
            "Approver must be a sub-editor or above",
            code=ErrorCode.INVALID_VALUE,
            field='assigned_user_id',
        )

    story.stage = StoryStage.NEEDS_SUB_EDITOR_APPROVAL
    story.status = StoryStatus.PENDING_APPROVAL
    story.assigned_approver = approver
    story.reviewer = user
    story.reviewer_checklist = data.get('checklist_data') or {}
    story.save()


@stage_action('approve_story')
def approve_story(story, user, role, data, request):
    if not can_approve_story_stage(role):
        raise PermissionDeniedError("Insufficient permissions to approve stories")

    self_approvable = story.stage == StoryStage.DRAFT and role_at_least(story.author_role, StaffRole.SUB_EDITOR)
    if story.stage != StoryStage.NEEDS_SUB_EDITOR_APPROVAL and not self_approvable:
        raise WorkflowError(f"Cannot approve story from {story.stage} stage")

    missing = missing_approval_requirements(story)
    if missing:
        raise ValidationError(
            f"Story needs a {', '.join(missing)} before it can be approved",
            code=ErrorCode.MISSING_FIELD,
            details={'missing': missing},
        )

    if story.is_translation:
        story.stage = StoryStage.TRANSLATED
    else:
        story.stage = StoryStage.APPROVED
        story.status = StoryStatus.APPROVED
    story.approver_checklist = data.get('checklist_data') or {}
    story.save()

    if story.is_translation and story.original_story_id:
        mark_original_if_translations_done(story.original_story_id, user, request)


def mark_original_if_translations_done(original_id, user, request=None):
    """
    Move an APPROVED original to TRANSLATED once every translation has
    reached an approved stage. Returns True when the original moved.
    """
    original = Story.objects.select_for_update().get(pk=original_id)
    if original.stage != StoryStage.APPROVED:
        return False
    stages = set(original.translations.values_list('stage', flat=True))
    if not stages or not stages <= TRANSLATION_DONE_STAGES:
        return False

    original.stage = StoryStage.TRANSLATED
    original.save(update_fields=['stage', 'updated_at'])
    log_audit(
        user,
        AuditAction.STORY_AUTO_MARK_TRANSLATED,
        'Story',
        original.id,
        metadata={'title': original.title},
        request=request,
    )
    return True


@stage_action('send_for_translation')
def send_for_translation(story, user, role, data, request):
    from .translations import create_translations

    if not can_send_for_translation(role):
        raise PermissionDeniedError("Insufficient permissions to send for translation")
    if story.stage != StoryStage.APPROVED:
        raise WorkflowError(f"Cannot send for translation from {story.stage} stage")

    languages = data.get('translation_languages') or []
    if not languages:
        raise ValidationError(
            "Must specify translation languages and translators",
            code=ErrorCode.MISSING_FIELD,
            field='translation_languages',
        )

    items = [
        {'language': item.get('language'), 'assigned_to_id': item.get('translator_id') or item.get('assigned_to_id')}
        for item in languages
    ]
    create_translations(story, user, items, request=request)
    story.refresh_from_db()


@stage_action('mark_as_translated')
def mark_as_translated(story, user, role, data, request):
    if not role_at_least(role, StaffRole.SUB_EDITOR):
        raise PermissionDeniedError("Insufficient permissions to mark stories as translated")
    if story.stage != StoryStage.APPROVED:
        raise WorkflowError(f"Cannot mark as translated from {story.stage} stage")
    story.stage = StoryStage.TRANSLATED
    story.save()


@stage_action('publish_story')
def publish_story(story, user, role, data, request):
    if not can_publish_story(role):
        raise PermissionDeniedError("Insufficient permissions to publish stories")
    if story.stage != StoryStage.TRANSLATED:
        raise WorkflowError(
            f"Cannot publish story from {story.stage} stage. Story must be in TRANSLATED stage."
        )
    story.translation_checklist = data.get('checklist_data') or {}
    publish(story, user, request=request)


def publish(story, user=None, request=None, trigger='manual'):
    """
    Publish a story and, for originals, every one of its translations.

    Must run inside a transaction. ``user`` is None for scheduled publishing.
    Returns the number of stories published.
    """
    now = timezone.now()
    story.stage = StoryStage.PUBLISHED
    story.status = StoryStatus.PUBLISHED
    story.published_at = now
    story.published_by = user
    story.scheduled_publish_at = None
    story.save()
    published = 1

    if not story.is_translation:
        for translation in story.translations.exclude(stage=StoryStage.PUBLISHED):
            translation.stage = StoryStage.PUBLISHED
            translation.status = StoryStatus.PUBLISHED
            translation.published_at = now
            translation.published_by = user
            translation.save()
            published += 1
            log_audit(
                user,
                AuditAction.STORY_AUTO_PUBLISH_TRANSLATION,
                'Story',
                translation.id,
                metadata={'original_story_id': str(story.id), 'language': translation.language},
                request=request,
            )

    publish_on_commit(
        Channels.STORIES,
        create_event(
            EventType.STORY_PUBLISHED,
            'story',
            story.id,
            user.id if user else None,
            data={'title': story.title, 'translations': published - 1},
        ),
    )
    increment_content_published('story', trigger=trigger, count=published)
    return published
