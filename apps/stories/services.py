"""
Story mutations used by the newsroom API.

Stage moves live in ``workflow``; this module covers everything else a
newsroom user does to a story: create, edit, delete, direct status changes,
revision requests, reassignment, bulletin flags, follow-ups and audio.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.core import storage
from apps.core.audit import AuditAction, log_audit
from apps.core.choices import StaffRole, StoryStage, StoryStatus, UserType
from apps.core.exceptions import ErrorCode, NotFoundError, PermissionDeniedError, ValidationError, WorkflowError
from apps.core.permissions import (
    can_edit_story_by_stage,
    can_flag_story_for_bulletin,
    can_request_revision,
    can_update_story_status,
    get_stage_lock_reason,
    get_user_role,
    role_at_least,
)
from apps.core.realtime import Channels, EventType, create_event, publish_on_commit
from apps.core.slugs import slug_for
from apps.media.models import AudioClip

from .models import Comment, CommentType, RevisionRequest, Story, StoryAudioClip
from .workflow import get_active_staff

logger = logging.getLogger(__name__)

MIN_REVISION_REASON_LENGTH = 10

# Roles whose stories are filed without taxonomy; editors add it on review
UNCLASSIFIED_AUTHOR_ROLES = {StaffRole.INTERN, StaffRole.JOURNALIST}


def _story_event(event_type, story, user, **data):
    publish_on_commit(
        Channels.STORIES,
        create_event(event_type, 'story', story.id, user.id if user else None, data=data or None),
    )


def _upload_audio(story, files, user, uploaded):
    """
    Validate every file before storing any of them, then link each clip.
    Stored URLs are appended to ``uploaded`` for cleanup on rollback.
    """
    for uploaded_file in files:
        storage.validate_audio_file(uploaded_file)

    clips = []
    for uploaded_file in files:
        result = storage.upload(uploaded_file, folder='audio', kind='audio')
        uploaded.append(result.url)
        clip = AudioClip.from_upload(result, uploaded_file, user)
        StoryAudioClip.objects.create(story=story, audio_clip=clip, added_by=user)
        clips.append(clip)
    return clips


def create_story(user, data, audio_files=(), request=None):
    """
    Create a story from ``StoryWriteSerializer`` data.

    Interns and journalists file without category, tags or classifications.
    """
    role = get_user_role(user)
    tags = data.pop('tags', None)
    classifications = data.pop('classifications', None)
    if role in UNCLASSIFIED_AUTHOR_ROLES:
        data.pop('category', None)
        tags = classifications = None

    with storage.discard_on_error() as uploaded, transaction.atomic():
        story = Story(author=user, author_role=role, **data)
        story.slug = slug_for(Story, story.title)
        story.save()
        if tags:
            story.tags.set(tags)
        if classifications:
            story.classifications.set(classifications)
        clips = _upload_audio(story, list(audio_files), user, uploaded) if audio_files else []

        log_audit(
            user,
            AuditAction.STORY_CREATE,
            'Story',
            story.id,
            metadata={'title': story.title, 'audio_files': len(clips)},
            request=request,
        )
        _story_event(EventType.STORY_CREATED, story, user, title=story.title)

    logger.info("Story %s created by %s", story.id, user.email)
    return story


def ensure_can_edit(story, user):
    role = get_user_role(user)
    if role_at_least(role, StaffRole.EDITOR):
        return
    if not can_edit_story_by_stage(role, story.stage, story.author_id, user.id):
        reason = get_stage_lock_reason(story.stage) or "You can only edit your own stories"
        raise PermissionDeniedError(reason)


def update_story(story, user, data, request=None):
    ensure_can_edit(story, user)

    tags = data.pop('tags', None)
    classifications = data.pop('classifications', None)
    changed = sorted(data)
    if tags is not None:
        changed.append('tags')
    if classifications is not None:
        changed.append('classifications')

    with transaction.atomic():
        new_title = data.get('title')
        if new_title and new_title != story.title:
            story.slug = slug_for(Story, new_title, exclude_id=story.pk)
        for field, value in data.items():
            setattr(story, field, value)
        story.save()
        if tags is not None:
            story.tags.set(tags)
        if classifications is not None:
            story.classifications.set(classifications)

        log_audit(user, AuditAction.STORY_UPDATE, 'Story', story.id, metadata={'fields': changed}, request=request)
        _story_event(EventType.STORY_UPDATED, story, user, fields=changed)

    return story


def delete_story(story, user, request=None):
    """
    Delete a story and its translations, then remove stored audio that no
    longer backs any story or episode.
    """
    story_ids = [story.id] + list(story.translations.values_list('id', flat=True))
    clip_ids = list(
        StoryAudioClip.objects.filter(story_id__in=story_ids).values_list('audio_clip_id', flat=True).distinct()
    )
    story_id, title = story.id, story.title

    with transaction.atomic():
        story.delete()
        orphans = list(
            AudioClip.objects.filter(id__in=clip_ids, story_links__isnull=True, episodes__isnull=True)
        )
        orphan_urls = [clip.url for clip in orphans]
        AudioClip.objects.filter(id__in=[clip.id for clip in orphans]).delete()

        log_audit(
            user,
            AuditAction.STORY_DELETE,
            'Story',
            story_id,
            metadata={'title': title, 'translations_deleted': len(story_ids) - 1, 'audio_removed': len(orphans)},
            request=request,
        )
        publish_on_commit(
            Channels.STORIES,
            create_event(EventType.STORY_DELETED, 'story', story_id, user.id, data={'title': title}),
        )

    for url in orphan_urls:
        storage.discard(url)
    logger.info("Story %s deleted by %s", story_id, user.email)


def change_status(story, user, new_status, assigned_to_id=None, reviewer_id=None, request=None):
    role = get_user_role(user)
    if new_status not in StoryStatus.values:
        raise ValidationError(f"Invalid status: {new_status}", code=ErrorCode.INVALID_VALUE, field='status')
    if not can_update_story_status(role, story.status, new_status):
        raise PermissionDeniedError(f"Cannot move story from {story.status} to {new_status}")

    if role == StaffRole.INTERN and story.author_id != user.id:
        raise PermissionDeniedError("Interns can only update their own stories")
    if role == StaffRole.JOURNALIST and user.id not in (story.author_id, story.assigned_to_id, story.reviewer_id):
        raise PermissionDeniedError("You are not working on this story")

    previous = story.status
    with transaction.atomic():
        story.status = new_status
        if assigned_to_id:
            story.assigned_to = get_active_staff(assigned_to_id, field='assigned_to_id')
        if reviewer_id:
            story.reviewer = get_active_staff(reviewer_id, field='reviewer_id')
        if new_status == StoryStatus.PUBLISHED:
            story.published_at = timezone.now()
            story.published_by = user
        elif previous == StoryStatus.PUBLISHED:
            story.published_at = None
            story.published_by = None
        story.save()

        log_audit(
            user,
            AuditAction.STORY_STATUS_CHANGE,
            'Story',
            story.id,
            metadata={'from': previous, 'to': new_status},
            request=request,
        )
        _story_event(EventType.STORY_STATUS_CHANGED, story, user, **{'from': previous, 'to': new_status})

    return story


def request_revision(story, user, assigned_to_id, reason, request=None):
    reason = (reason or '').strip()
    if len(reason) < MIN_REVISION_REASON_LENGTH:
        raise ValidationError(
            f"Reason must be at least {MIN_REVISION_REASON_LENGTH} characters",
            code=ErrorCode.INVALID_VALUE,
            field='reason',
        )

    role = get_user_role(user)
    if not can_request_revision(role, story.stage, story.assigned_reviewer_id, story.assigned_approver_id, user.id):
        raise PermissionDeniedError("You cannot request a revision on this story")

    if not assigned_to_id:
        raise ValidationError("assigned_to_id is required", code=ErrorCode.MISSING_FIELD, field='assigned_to_id')
    assignee = User.objects.filter(pk=assigned_to_id).first()
    if assignee is None:
        raise NotFoundError("Assigned user not found")

    previous_stage = story.stage
    with transaction.atomic():
        revision = RevisionRequest.objects.create(
            story=story,
            requested_by=user,
            requested_by_role=role,
            assigned_to=assignee,
            reason=reason,
        )
        story.stage = StoryStage.DRAFT
        story.status = StoryStatus.NEEDS_REVISION
        story.assigned_reviewer = None
        story.assigned_approver = None
        story.save()
        Comment.objects.create(story=story, author=user, content=reason, type=CommentType.REVISION_REQUEST)

        log_audit(
            user,
            AuditAction.STORY_REVISION_REQUESTED,
            'Story',
            story.id,
            metadata={'from_stage': previous_stage, 'assigned_to': str(assignee.id), 'revision_id': str(revision.id)},
            request=request,
        )
        _story_event(
            EventType.STORY_STAGE_CHANGED,
            story,
            user,
            action='request_revision',
            **{'from': previous_stage, 'to': StoryStage.DRAFT},
        )

    return revision


def reassign(story, user, assignment_type, assigned_to_id, note='', request=None):
    if not role_at_least(get_user_role(user), StaffRole.SUB_EDITOR):
        raise PermissionDeniedError("Only sub-editors and above can reassign stories")
    if assignment_type not in ('reviewer', 'approver'):
        raise ValidationError("type must be 'reviewer' or 'approver'", code=ErrorCode.INVALID_VALUE, field='type')
    if not assigned_to_id:
        raise ValidationError("assigned_to_id is required", code=ErrorCode.MISSING_FIELD, field='assigned_to_id')

    target = User.objects.filter(pk=assigned_to_id).first()
    if target is None:
        raise NotFoundError("Assigned user not found")
    if target.user_type != UserType.STAFF or not target.is_active:
        raise ValidationError("Assignee must be an active staff member", code=ErrorCode.INVALID_VALUE, field='assigned_to_id')

    if assignment_type == 'reviewer':
        if story.stage != StoryStage.NEEDS_JOURNALIST_REVIEW:
            raise WorkflowError("Reviewers can only be reassigned while a story awaits journalist review")
        if target.staff_role != StaffRole.JOURNALIST:
            raise ValidationError("Reviewer must be a journalist", code=ErrorCode.INVALID_VALUE, field='assigned_to_id')
        previous = story.assigned_reviewer_id
        story.assigned_reviewer = target
    else:
        if story.stage != StoryStage.NEEDS_SUB_EDITOR_APPROVAL:
            raise WorkflowError("Approvers can only be reassigned while a story awaits approval")
        if not role_at_least(target.staff_role, StaffRole.SUB_EDITOR):
            raise ValidationError(
                "Approver must be a sub-editor or above",
                code=ErrorCode.INVALID_VALUE,
                field='assigned_to_id',
            )
        previous = story.assigned_approver_id
        story.assigned_approver = target

    with transaction.atomic():
        story.save()
        if note:
            Comment.objects.create(story=story, author=user, content=note, type=CommentType.EDITORIAL_NOTE)
        log_audit(
            user,
            AuditAction.STORY_REASSIGNED,
            'Story',
            story.id,
            metadata={
                'type': assignment_type,
                'from': str(previous) if previous else None,
                'to': str(target.id),
            },
            request=request,
        )
    return story


def set_bulletin_flag(story, user, flagged, request=None):
    if not isinstance(flagged, bool):
        raise ValidationError("flagged must be a boolean", code=ErrorCode.INVALID_VALUE, field='flagged')
    if not can_flag_story_for_bulletin(get_user_role(user)):
        raise PermissionDeniedError("Only sub-editors and above can flag stories for bulletins")

    story.flagged_for_bulletin = flagged
    story.flagged_for_bulletin_at = timezone.now() if flagged else None
    story.flagged_for_bulletin_by = user if flagged else None
    with transaction.atomic():
        story.save()
        log_audit(
            user,
            AuditAction.STORY_FLAGGED if flagged else AuditAction.STORY_UNFLAGGED,
            'Story',
            story.id,
            metadata={'title': story.title},
            request=request,
        )
    return story


def update_follow_up(story, user, data):
    """Apply ``follow_up_date`` / ``follow_up_note`` / ``completed`` from a parsed payload."""
    if 'follow_up_date' in data:
        story.follow_up_date = data['follow_up_date']
    if 'follow_up_note' in data:
        story.follow_up_note = data['follow_up_note'] or ''
    if 'completed' in data:
        if data['completed']:
            story.follow_up_completed = True
            story.follow_up_completed_at = timezone.now()
            story.follow_up_completed_by = user
        else:
            story.follow_up_completed = False
            story.follow_up_completed_at = None
            story.follow_up_completed_by = None
    story.save()
    return story


def attach_audio(story, user, uploaded_file=None, audio_clip_id=None):
    ensure_can_edit(story, user)
    if uploaded_file is not None:
        with storage.discard_on_error() as uploaded, transaction.atomic():
            return _upload_audio(story, [uploaded_file], user, uploaded)[0]

    if not audio_clip_id:
        raise ValidationError("Provide an audio file or audio_clip_id", code=ErrorCode.MISSING_FIELD, field='file')
    clip = AudioClip.objects.filter(pk=audio_clip_id).first()
    if clip is None:
        raise NotFoundError("Audio clip not found")
    _, created = StoryAudioClip.objects.get_or_create(story=story, audio_clip=clip, defaults={'added_by': user})
    if not created:
        raise ValidationError("Audio clip is already linked to this story", code=ErrorCode.DUPLICATE, field='audio_clip_id')
    return clip


def detach_audio(story, user, clip_id):
    ensure_can_edit(story, user)
    deleted, _ = StoryAudioClip.objects.filter(story=story, audio_clip_id=clip_id).delete()
    if not deleted:
        raise NotFoundError("Audio clip is not linked to this story")
