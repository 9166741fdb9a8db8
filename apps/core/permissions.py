"""
Role-Based Permissions for Newskoop.

Two layers live here:

1. Static lookup tables (``has_story_permission``, ``can_update_story_status``,
   ``get_next_stage_action`` ...). They take plain role/status strings and
   never touch the database, so they are cheap to call from serializers,
   views and tests alike. A ``None`` role always yields ``False``.
2. DRF permission classes that map the authenticated user onto those tables.

Role hierarchy:
    INTERN < JOURNALIST < SUB_EDITOR < EDITOR < ADMIN < SUPERADMIN

Usage:
    from apps.core.permissions import IsStaff, IsSubEditorOrAbove

    class MyView(APIView):
        permission_classes = [IsAuthenticated, IsSubEditorOrAbove]
"""

import logging
from typing import Dict, List, Optional

from rest_framework.permissions import BasePermission

from apps.core.choices import StaffRole, StoryStage, StoryStatus, UserType

logger = logging.getLogger(__name__)


ROLE_LEVELS = {
    StaffRole.INTERN: 1,
    StaffRole.JOURNALIST: 2,
    StaffRole.SUB_EDITOR: 3,
    StaffRole.EDITOR: 4,
    StaffRole.ADMIN: 5,
    StaffRole.SUPERADMIN: 6,
}


def role_level(role: Optional[str]) -> int:
    """Numeric level for a role; 0 for unknown or missing roles."""
    if not role:
        return 0
    return ROLE_LEVELS.get(role, 0)


def role_at_least(role: Optional[str], minimum: str) -> bool:
    return role_level(role) >= ROLE_LEVELS[minimum] if role else False


# =============================================================================
# CRUD permission tables
# =============================================================================

CRUD = ['create', 'read', 'update', 'delete']
CRU = ['create', 'read', 'update']

STORY_PERMISSIONS = {
    StaffRole.INTERN: CRU,
    StaffRole.JOURNALIST: CRU,
    StaffRole.SUB_EDITOR: CRU,
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}

COMMENT_PERMISSIONS = {
    StaffRole.INTERN: CRU,
    StaffRole.JOURNALIST: CRU,
    StaffRole.SUB_EDITOR: CRUD,
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}

# Categories and tags share one table
TAXONOMY_PERMISSIONS = {
    StaffRole.INTERN: ['read'],
    StaffRole.JOURNALIST: ['read'],
    StaffRole.SUB_EDITOR: CRU,
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}

CLASSIFICATION_PERMISSIONS = {
    StaffRole.INTERN: ['read'],
    StaffRole.JOURNALIST: ['read'],
    StaffRole.SUB_EDITOR: ['read'],
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}

TRANSLATION_PERMISSIONS = {
    StaffRole.INTERN: ['read'],
    StaffRole.JOURNALIST: ['read'],
    StaffRole.SUB_EDITOR: CRU + ['approve'],
    StaffRole.EDITOR: CRUD + ['approve'],
    StaffRole.ADMIN: CRUD + ['approve'],
    StaffRole.SUPERADMIN: CRUD + ['approve'],
}

TASK_PERMISSIONS = {
    StaffRole.INTERN: CRU,
    StaffRole.JOURNALIST: CRU,
    StaffRole.SUB_EDITOR: CRUD,
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}

SHOW_PERMISSIONS = {
    StaffRole.INTERN: ['read'],
    StaffRole.JOURNALIST: ['read'],
    StaffRole.SUB_EDITOR: CRU,
    StaffRole.EDITOR: CRUD,
    StaffRole.ADMIN: CRUD,
    StaffRole.SUPERADMIN: CRUD,
}


def _lookup(table: Dict[str, List[str]], role: Optional[str], action: str) -> bool:
    if not role:
        return False
    return action in table.get(role, [])


def has_story_permission(role, action):
    return _lookup(STORY_PERMISSIONS, role, action)


def has_comment_permission(role, action):
    return _lookup(COMMENT_PERMISSIONS, role, action)


def has_category_permission(role, action):
    return _lookup(TAXONOMY_PERMISSIONS, role, action)


def has_tag_permission(role, action):
    return _lookup(TAXONOMY_PERMISSIONS, role, action)


def has_classification_permission(role, action):
    return _lookup(CLASSIFICATION_PERMISSIONS, role, action)


def has_translation_permission(role, action):
    return _lookup(TRANSLATION_PERMISSIONS, role, action)


def has_task_permission(role, action):
    return _lookup(TASK_PERMISSIONS, role, action)


def has_show_permission(role, action):
    return _lookup(SHOW_PERMISSIONS, role, action)


def can_approve_story(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_publish_story(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_delete_story(role) -> bool:
    return role_at_least(role, StaffRole.EDITOR)


def can_flag_story_for_bulletin(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_manage_shows(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_publish_episode(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_delete_show(role) -> bool:
    return role_at_least(role, StaffRole.EDITOR)


def can_edit_show(role, creator_id, user_id) -> bool:
    """Editors edit any show; sub-editors only the shows they created."""
    if role_at_least(role, StaffRole.EDITOR):
        return True
    if role == StaffRole.SUB_EDITOR:
        return str(creator_id) == str(user_id)
    return False


def can_work_on_translation(role, assigned_to_id, user_id) -> bool:
    if role_at_least(role, StaffRole.SUB_EDITOR):
        return True
    return assigned_to_id is not None and str(assigned_to_id) == str(user_id)


# =============================================================================
# Story status transitions
# =============================================================================

S = StoryStatus

_SUB_EDITOR_TRANSITIONS = {
    S.DRAFT: {S.IN_REVIEW},
    S.IN_REVIEW: {S.NEEDS_REVISION, S.PENDING_APPROVAL},
    S.NEEDS_REVISION: {S.IN_REVIEW},
    S.PENDING_APPROVAL: {S.APPROVED, S.NEEDS_REVISION},
    S.APPROVED: {S.NEEDS_REVISION, S.PENDING_TRANSLATION},
    S.PENDING_TRANSLATION: {S.READY_TO_PUBLISH, S.NEEDS_REVISION},
    S.READY_TO_PUBLISH: {S.PUBLISHED, S.NEEDS_REVISION},
}

_EDITOR_TRANSITIONS = {
    S.DRAFT: {S.IN_REVIEW, S.PENDING_APPROVAL},
    S.IN_REVIEW: {S.NEEDS_REVISION, S.PENDING_APPROVAL},
    S.NEEDS_REVISION: {S.IN_REVIEW, S.PENDING_APPROVAL},
    S.PENDING_APPROVAL: {S.APPROVED, S.NEEDS_REVISION},
    S.APPROVED: {S.NEEDS_REVISION, S.PENDING_TRANSLATION, S.ARCHIVED},
    S.PENDING_TRANSLATION: {S.READY_TO_PUBLISH, S.NEEDS_REVISION, S.ARCHIVED},
    S.READY_TO_PUBLISH: {S.PUBLISHED, S.NEEDS_REVISION, S.ARCHIVED},
    S.PUBLISHED: {S.ARCHIVED},
}

_ANY_TRANSITION = {status: set(S.values) for status in S.values}

STATUS_TRANSITIONS = {
    StaffRole.INTERN: {
        S.DRAFT: {S.IN_REVIEW},
        S.NEEDS_REVISION: {S.IN_REVIEW},
    },
    StaffRole.JOURNALIST: {
        S.DRAFT: {S.PENDING_APPROVAL},
        S.IN_REVIEW: {S.NEEDS_REVISION, S.PENDING_APPROVAL},
        S.NEEDS_REVISION: {S.IN_REVIEW},
        S.PENDING_TRANSLATION: {S.READY_TO_PUBLISH},
    },
    StaffRole.SUB_EDITOR: _SUB_EDITOR_TRANSITIONS,
    StaffRole.EDITOR: _EDITOR_TRANSITIONS,
    StaffRole.ADMIN: _ANY_TRANSITION,
    StaffRole.SUPERADMIN: _ANY_TRANSITION,
}


def can_update_story_status(role, current_status, new_status) -> bool:
    if not role:
        return False
    transitions = STATUS_TRANSITIONS.get(role, {})
    return new_status in transitions.get(current_status, set())


def allowed_status_transitions(role, current_status) -> List[str]:
    if not role:
        return []
    return sorted(STATUS_TRANSITIONS.get(role, {}).get(current_status, set()))


LOCKED_STATUSES = {
    S.IN_REVIEW,
    S.PENDING_APPROVAL,
    S.APPROVED,
    S.PUBLISHED,
    S.PENDING_TRANSLATION,
    S.READY_TO_PUBLISH,
}

EDIT_LOCK_REASONS = {
    S.IN_REVIEW: 'Story is currently being reviewed and cannot be edited.',
    S.PENDING_APPROVAL: 'Story is pending approval and cannot be edited.',
    S.APPROVED: 'Story has been approved and cannot be edited.',
    S.PUBLISHED: 'Published stories cannot be edited.',
    S.PENDING_TRANSLATION: 'Story is being translated and cannot be edited.',
    S.READY_TO_PUBLISH: 'Story is ready to publish and cannot be edited.',
}

OWN_ONLY_ROLES = {StaffRole.INTERN, StaffRole.JOURNALIST}


def can_edit_story(role, story_status, author_id, user_id) -> bool:
    if not role:
        return False
    if story_status in LOCKED_STATUSES:
        return False
    is_author = str(author_id) == str(user_id)
    if story_status == S.NEEDS_REVISION:
        return is_author
    if role in OWN_ONLY_ROLES:
        return is_author
    return True


def get_edit_lock_reason(story_status) -> Optional[str]:
    return EDIT_LOCK_REASONS.get(story_status)


# =============================================================================
# Story stage workflow
# =============================================================================

STAGE_LOCK_REASONS = {
    StoryStage.NEEDS_JOURNALIST_REVIEW: 'Story is awaiting journalist review.',
    StoryStage.NEEDS_SUB_EDITOR_APPROVAL: 'Story is awaiting sub-editor approval.',
    StoryStage.APPROVED: 'Story has been approved and is locked for editing.',
    StoryStage.TRANSLATED: 'Story has been translated and is ready to publish.',
    StoryStage.PUBLISHED: 'Published stories cannot be edited.',
}


def can_edit_story_by_stage(role, stage, author_id, user_id) -> bool:
    if not role:
        return False
    if stage != StoryStage.DRAFT:
        return False
    if role_at_least(role, StaffRole.EDITOR):
        return True
    return str(author_id) == str(user_id)


def get_stage_lock_reason(stage) -> Optional[str]:
    return STAGE_LOCK_REASONS.get(stage)


def can_review_story(role) -> bool:
    return role_at_least(role, StaffRole.JOURNALIST)


def can_approve_story_stage(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_send_for_translation(role) -> bool:
    return role_at_least(role, StaffRole.SUB_EDITOR)


def can_request_revision(role, stage, assigned_reviewer_id, assigned_approver_id, user_id) -> bool:
    if not role:
        return False
    if role_at_least(role, StaffRole.EDITOR):
        return True
    user_id = str(user_id)
    if stage == StoryStage.NEEDS_JOURNALIST_REVIEW:
        return assigned_reviewer_id is not None and str(assigned_reviewer_id) == user_id
    if stage == StoryStage.NEEDS_SUB_EDITOR_APPROVAL:
        return assigned_approver_id is not None and str(assigned_approver_id) == user_id
    return False


def get_next_stage_action(role, stage, author_role, is_author) -> Optional[dict]:
    """
    Describe the next workflow step the user can take on a story.

    Returns ``None`` when the user has nothing to do at this stage.
    """
    if not role:
        return None

    if stage == StoryStage.DRAFT and is_author:
        if author_role == StaffRole.INTERN:
            return {
                'action': 'submit_for_review',
                'label': 'Submit for Review',
                'requires_assignment': True,
                'assignment_roles': [StaffRole.JOURNALIST.value],
            }
        if author_role == StaffRole.JOURNALIST:
            return {
                'action': 'send_for_approval',
                'label': 'Submit for Approval',
                'requires_assignment': True,
                'assignment_roles': [StaffRole.SUB_EDITOR.value, StaffRole.EDITOR.value],
            }
        if role_at_least(author_role, StaffRole.SUB_EDITOR):
            return {
                'action': 'approve_story',
                'label': 'Approve Story',
                'requires_assignment': False,
                'assignment_roles': [],
            }

    if stage == StoryStage.NEEDS_JOURNALIST_REVIEW and can_review_story(role):
        return {
            'action': 'send_for_approval',
            'label': 'Send for Approval',
            'requires_assignment': True,
            'assignment_roles': [StaffRole.SUB_EDITOR.value, StaffRole.EDITOR.value],
        }

    if stage == StoryStage.NEEDS_SUB_EDITOR_APPROVAL and can_approve_story_stage(role):
        return {
            'action': 'approve_story',
            'label': 'Approve Story',
            'requires_assignment': False,
            'assignment_roles': [],
        }

    if stage == StoryStage.APPROVED and can_send_for_translation(role):
        return {
            'action': 'send_for_translation',
            'label': 'Send for Translation',
            'requires_assignment': True,
            'assignment_roles': [
                StaffRole.JOURNALIST.value,
                StaffRole.SUB_EDITOR.value,
                StaffRole.EDITOR.value,
            ],
        }

    if stage == StoryStage.TRANSLATED and can_publish_story(role):
        return {
            'action': 'publish_story',
            'label': 'Publish Story',
            'requires_assignment': False,
            'assignment_roles': [],
        }

    return None


# =============================================================================
# DRF permission classes
# =============================================================================

def get_user_role(user) -> Optional[str]:
    """Staff role of an authenticated user, or None."""
    if not user or not user.is_authenticated:
        return None
    if getattr(user, 'user_type', None) != UserType.STAFF:
        return None
    return user.staff_role


def has_role(user, required_role) -> bool:
    """Check if user has at least the required role level."""
    return role_at_least(get_user_role(user), required_role)


class IsActiveUser(BasePermission):
    """Authenticated and not deactivated."""
    message = "Authentication required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_active)


class IsStaff(IsActiveUser):
    """Newsroom staff of any role."""
    message = "Staff access required."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.user_type == UserType.STAFF and bool(request.user.staff_role)


class IsRadioUser(IsActiveUser):
    """Radio-station client account."""
    message = "Radio station access required."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.user_type == UserType.RADIO


class RolePermission(IsStaff):
    """Base class for minimum-role permissions."""

    # Override in subclasses
    minimum_role = StaffRole.INTERN

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return role_at_least(request.user.staff_role, self.minimum_role)


class IsJournalistOrAbove(RolePermission):
    minimum_role = StaffRole.JOURNALIST
    message = "Journalist access required."


class IsSubEditorOrAbove(RolePermission):
    minimum_role = StaffRole.SUB_EDITOR
    message = "Sub-editor access required."


class IsEditorOrAbove(RolePermission):
    minimum_role = StaffRole.EDITOR
    message = "Editor access required."


class IsAdminOrAbove(RolePermission):
    minimum_role = StaffRole.ADMIN
    message = "Admin access required."


class TablePermission(IsStaff):
    """
    Map HTTP methods onto a CRUD lookup table.

    Views set ``permission_table`` to one of the ``has_*_permission``
    functions above.
    """
    METHOD_ACTIONS = {
        'GET': 'read',
        'HEAD': 'read',
        'OPTIONS': 'read',
        'POST': 'create',
        'PUT': 'update',
        'PATCH': 'update',
        'DELETE': 'delete',
    }

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        check = getattr(view, 'permission_table', None)
        if check is None:
            return True
        action = self.METHOD_ACTIONS.get(request.method, 'read')
        return check(request.user.staff_role, action)
