"""
Tests for the editorial stage workflow, translations and publishing.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.choices import StaffRole, StoryStage, StoryStatus
from apps.core.exceptions import ValidationError
from apps.core.models import AuditLog
from apps.stories.models import Comment, CommentType, RevisionRequest, Story
from apps.stories.tasks import publish_scheduled_stories
from apps.stories.translations import create_translations
from apps.stories.workflow import perform_stage_action

URL = '/api/newsroom/stories/'


def stage(client, story, action, **data):
    return client.post(f'{URL}{story.id}/stage/', {'action': action, **data}, format='json')


@pytest.mark.django_db
class TestStageActions:

    def test_intern_to_published(self, client_for, intern, journalist, sub_editor, approvable, make_story):
        story = make_story(intern, **approvable)

        response = stage(client_for(intern), story, 'submit_for_review', assigned_user_id=str(journalist.id))
        assert response.status_code == 200
        assert response.json()['story']['stage'] == StoryStage.NEEDS_JOURNALIST_REVIEW

        response = stage(client_for(journalist), story, 'send_for_approval', assigned_user_id=str(sub_editor.id))
        assert response.status_code == 200

        editor_client = client_for(sub_editor)
        assert stage(editor_client, story, 'approve_story').status_code == 200
        assert stage(editor_client, story, 'mark_as_translated').status_code == 200
        assert stage(editor_client, story, 'publish_story', checklist_data={'final': True}).status_code == 200

        story.refresh_from_db()
        assert story.stage == StoryStage.PUBLISHED
        assert story.status == StoryStatus.PUBLISHED
        assert story.reviewer == journalist
        assert story.published_by == sub_editor
        assert story.translation_checklist == {'final': True}
        actions = set(AuditLog.objects.filter(entity_id=str(story.id)).values_list('action', flat=True))
        assert {'story.stage.submit_for_review', 'story.stage.approve_story', 'story.stage.publish_story'} <= actions

    def test_submit_requires_journalist_assignee(self, client_for, intern, sub_editor, make_story):
        story = make_story(intern)
        response = stage(client_for(intern), story, 'submit_for_review', assigned_user_id=str(sub_editor.id))
        assert response.status_code == 400

    def test_submit_requires_assignee(self, client_for, intern, make_story):
        story = make_story(intern)
        response = stage(client_for(intern), story, 'submit_for_review')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'MISSING_FIELD'

    def test_submit_only_for_intern_stories(self, client_for, journalist, make_story):
        story = make_story(journalist)
        response = stage(client_for(journalist), story, 'submit_for_review', assigned_user_id=str(journalist.id))
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'WORKFLOW_ERROR'

    def test_intern_cannot_send_for_approval(self, client_for, intern, sub_editor, make_story):
        story = make_story(intern)
        response = stage(client_for(intern), story, 'send_for_approval', assigned_user_id=str(sub_editor.id))
        assert response.status_code == 403

    def test_approval_lists_missing_requirements(self, client_for, sub_editor, make_story):
        story = make_story(sub_editor)

        response = stage(client_for(sub_editor), story, 'approve_story')

        assert response.status_code == 400
        assert response.json()['error']['details']['missing'] == [
            'category', 'language classification', 'religion classification',
        ]

    def test_sub_editor_self_approves_own_draft(self, client_for, sub_editor, approvable, make_story):
        story = make_story(sub_editor, **approvable)
        assert stage(client_for(sub_editor), story, 'approve_story').status_code == 200
        story.refresh_from_db()
        assert (story.stage, story.status) == (StoryStage.APPROVED, StoryStatus.APPROVED)

    def test_publish_requires_translated_stage(self, client_for, sub_editor, make_story):
        story = make_story(sub_editor, stage=StoryStage.APPROVED)
        response = stage(client_for(sub_editor), story, 'publish_story')
        assert response.status_code == 400

    def test_unknown_action(self, client_for, sub_editor, make_story):
        story = make_story(sub_editor)
        response = stage(client_for(sub_editor), story, 'teleport')
        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Invalid action'


@pytest.mark.django_db
class TestTranslations:

    @pytest.fixture
    def approved(self, sub_editor, approvable, make_story, classifications):
        story = make_story(
            sub_editor,
            stage=StoryStage.APPROVED,
            status=StoryStatus.APPROVED,
            title='Water restrictions lifted',
            **approvable,
        )
        return story

    def test_create_translations(self, client_for, sub_editor, journalist, approved, classifications):
        response = client_for(sub_editor).post(
            f'{URL}{approved.id}/create-translations/',
            {'translations': [{'language': 'AFRIKAANS', 'assigned_to_id': str(journalist.id)}]},
            format='json',
        )

        assert response.status_code == 201
        translation = approved.translations.get()
        assert translation.slug == 'water-restrictions-lifted-afrikaans'
        assert translation.author == journalist
        assert translation.author_role == StaffRole.JOURNALIST
        assert (translation.stage, translation.status) == (StoryStage.DRAFT, StoryStatus.DRAFT)
        assert translation.content == ''
        assert set(translation.classifications.all()) == {classifications['Afrikaans'], classifications['Christian']}
        approved.refresh_from_db()
        assert approved.status == StoryStatus.PENDING_TRANSLATION
        assert approved.stage == StoryStage.APPROVED

    def test_duplicate_language_rejected(self, sub_editor, journalist, approved):
        create_translations(approved, sub_editor, [{'language': 'XHOSA', 'assigned_to_id': journalist.id}])
        with pytest.raises(ValidationError) as excinfo:
            create_translations(approved, sub_editor, [{'language': 'XHOSA', 'assigned_to_id': journalist.id}])
        assert excinfo.value.error_code == 'DUPLICATE'
        assert approved.translations.count() == 1

    def test_english_is_not_a_target(self, client_for, sub_editor, journalist, approved):
        response = client_for(sub_editor).post(
            f'{URL}{approved.id}/create-translations/',
            {'translations': [{'language': 'ENGLISH', 'assigned_to_id': str(journalist.id)}]},
            format='json',
        )
        assert response.status_code == 400

    def test_journalist_cannot_create_translations(self, client_for, journalist, approved):
        approved.assigned_to = journalist
        approved.save()
        response = client_for(journalist).post(
            f'{URL}{approved.id}/create-translations/',
            {'translations': [{'language': 'XHOSA', 'assigned_to_id': str(journalist.id)}]},
            format='json',
        )
        assert response.status_code == 403

    def test_full_translation_cycle_publishes_everything(self, sub_editor, journalist, approved):
        perform_stage_action(
            approved,
            sub_editor,
            'send_for_translation',
            {'translation_languages': [{'language': 'XHOSA', 'translator_id': str(journalist.id)}]},
        )
        translation = approved.translations.get()

        perform_stage_action(translation, journalist, 'send_for_approval', {'assigned_user_id': sub_editor.id})
        translation = perform_stage_action(translation, sub_editor, 'approve_story')
        assert translation.stage == StoryStage.TRANSLATED

        approved.refresh_from_db()
        assert approved.stage == StoryStage.TRANSLATED
        assert AuditLog.objects.filter(action='story.auto_mark_as_translated').exists()

        perform_stage_action(approved, sub_editor, 'publish_story')
        translation.refresh_from_db()
        assert translation.stage == StoryStage.PUBLISHED
        assert translation.published_by == sub_editor
        assert AuditLog.objects.filter(action='story.auto_publish_translation', entity_id=str(translation.id)).exists()

    def test_translation_list_scoped_for_journalists(self, client_for, sub_editor, journalist, make_staff, approved):
        other = make_staff(StaffRole.JOURNALIST)
        create_translations(approved, sub_editor, [
            {'language': 'XHOSA', 'assigned_to_id': journalist.id},
            {'language': 'AFRIKAANS', 'assigned_to_id': other.id},
        ])

        mine = client_for(journalist).get('/api/newsroom/translations/').json()
        everything = client_for(sub_editor).get('/api/newsroom/translations/').json()

        assert [t['language'] for t in mine['translations']] == ['XHOSA']
        assert everything['pagination']['total'] == 2


@pytest.mark.django_db
class TestRevisionsAndAssignment:

    def test_reviewer_requests_revision(self, client_for, intern, journalist, make_story):
        story = make_story(intern, stage=StoryStage.NEEDS_JOURNALIST_REVIEW, assigned_reviewer=journalist)

        response = client_for(journalist).post(
            f'{URL}{story.id}/revisions/',
            {'assigned_to_id': str(intern.id), 'reason': 'Please add a second source'},
            format='json',
        )

        assert response.status_code == 201
        story.refresh_from_db()
        assert (story.stage, story.status) == (StoryStage.DRAFT, StoryStatus.NEEDS_REVISION)
        assert story.assigned_reviewer is None
        assert Comment.objects.filter(story=story, type=CommentType.REVISION_REQUEST).exists()
        assert RevisionRequest.objects.get().requested_by_role == StaffRole.JOURNALIST

    def test_short_reason_rejected(self, client_for, editor, journalist, make_story):
        story = make_story(journalist)
        response = client_for(editor).post(
            f'{URL}{story.id}/revisions/', {'assigned_to_id': str(journalist.id), 'reason': 'Fix'}, format='json',
        )
        assert response.status_code == 400

    def test_unassigned_journalist_forbidden(self, client_for, intern, journalist, make_staff, make_story):
        other = make_staff(StaffRole.JOURNALIST)
        story = make_story(intern, stage=StoryStage.NEEDS_JOURNALIST_REVIEW, assigned_reviewer=other, assigned_to=journalist)
        response = client_for(journalist).post(
            f'{URL}{story.id}/revisions/',
            {'assigned_to_id': str(intern.id), 'reason': 'Please add a second source'},
            format='json',
        )
        assert response.status_code == 403

    def test_reassign_reviewer(self, client_for, sub_editor, intern, journalist, make_staff, make_story):
        replacement = make_staff(StaffRole.JOURNALIST)
        story = make_story(intern, stage=StoryStage.NEEDS_JOURNALIST_REVIEW, assigned_reviewer=journalist)

        response = client_for(sub_editor).post(
            f'{URL}{story.id}/reassign/',
            {'type': 'reviewer', 'assigned_to_id': str(replacement.id), 'note': 'Covering leave'},
            format='json',
        )

        assert response.status_code == 200
        story.refresh_from_db()
        assert story.assigned_reviewer == replacement
        assert Comment.objects.filter(story=story, type=CommentType.EDITORIAL_NOTE).exists()

    def test_reassign_rejects_radio_user(self, client_for, sub_editor, intern, make_radio_user, make_story):
        story = make_story(intern, stage=StoryStage.NEEDS_JOURNALIST_REVIEW)
        response = client_for(sub_editor).post(
            f'{URL}{story.id}/reassign/',
            {'type': 'reviewer', 'assigned_to_id': str(make_radio_user().id)},
            format='json',
        )
        assert response.status_code == 400

    def test_flag_requires_boolean_and_role(self, client_for, sub_editor, journalist, make_story):
        story = make_story(journalist)

        assert client_for(sub_editor).post(f'{URL}{story.id}/flag/', {'flagged': 'yes'}, format='json').status_code == 400
        assert client_for(journalist).post(f'{URL}{story.id}/flag/', {'flagged': True}, format='json').status_code == 403
        assert client_for(sub_editor).post(f'{URL}{story.id}/flag/', {'flagged': True}, format='json').status_code == 200

        story.refresh_from_db()
        assert story.flagged_for_bulletin
        assert story.flagged_for_bulletin_by == sub_editor


@pytest.mark.django_db
class TestFollowUps:

    def test_planner_groups_by_due_date(self, client_for, sub_editor, journalist, make_story):
        now = timezone.now()
        make_story(journalist, title='Late', follow_up_date=now - timedelta(days=2))
        make_story(journalist, title='Soon', follow_up_date=now + timedelta(days=3))
        make_story(journalist, title='Later', follow_up_date=now + timedelta(days=30))
        make_story(journalist, title='Done', follow_up_date=now - timedelta(days=1), follow_up_completed=True)

        body = client_for(sub_editor).get(f'{URL}follow-ups/').json()

        assert body['counts'] == {'overdue': 1, 'due_today': 0, 'due_soon': 1, 'upcoming': 1, 'total': 3}
        assert body['grouped']['overdue'][0]['title'] == 'Late'
        assert body['grouped']['overdue'][0]['days_until'] == -2

    def test_planner_is_sub_editor_only(self, client_for, journalist):
        assert client_for(journalist).get(f'{URL}follow-ups/').status_code == 403

    def test_complete_follow_up(self, client_for, journalist, make_story):
        story = make_story(journalist)
        client = client_for(journalist)

        client.patch(f'{URL}{story.id}/follow-up/', {'follow_up_date': '2030-01-15', 'follow_up_note': 'Call back'}, format='json')
        client.patch(f'{URL}{story.id}/follow-up/', {'completed': True}, format='json')

        story.refresh_from_db()
        assert story.follow_up_note == 'Call back'
        assert story.follow_up_completed
        assert story.follow_up_completed_by == journalist


@pytest.mark.django_db
class TestScheduledPublishing:

    def test_publishes_due_ready_stories(self, sub_editor, make_story):
        past = timezone.now() - timedelta(minutes=5)
        ready = make_story(sub_editor, stage=StoryStage.TRANSLATED, scheduled_publish_at=past)
        untranslated = make_story(sub_editor, stage=StoryStage.APPROVED, scheduled_publish_at=past)
        waiting = make_story(
            sub_editor,
            stage=StoryStage.APPROVED,
            status=StoryStatus.PENDING_TRANSLATION,
            scheduled_publish_at=past,
        )
        future = make_story(sub_editor, stage=StoryStage.TRANSLATED, scheduled_publish_at=past + timedelta(days=1))

        result = publish_scheduled_stories()

        assert result == {'published': 2, 'failed': []}
        stages = dict(Story.objects.values_list('id', 'stage'))
        assert stages[ready.id] == StoryStage.PUBLISHED
        assert stages[untranslated.id] == StoryStage.PUBLISHED
        assert stages[waiting.id] == StoryStage.APPROVED
        assert stages[future.id] == StoryStage.TRANSLATED
        ready.refresh_from_db()
        assert ready.published_by is None
        assert ready.scheduled_publish_at is None


@pytest.mark.django_db
class TestDashboard:

    def test_my_stories(self, client_for, intern, journalist, make_story):
        make_story(journalist)
        make_story(intern, stage=StoryStage.NEEDS_JOURNALIST_REVIEW, assigned_reviewer=journalist)

        body = client_for(journalist).get('/api/newsroom/dashboard/my-stories/').json()

        assert body['counts']['DRAFT'] == 1
        assert len(body['awaiting_review']) == 1

    def test_editorial_metrics(self, client_for, sub_editor, journalist, make_story):
        make_story(journalist, flagged_for_bulletin=True)
        make_story(journalist, stage=StoryStage.PUBLISHED, published_at=timezone.now())

        body = client_for(sub_editor).get('/api/newsroom/dashboard/editorial-metrics/').json()

        assert body['by_stage']['PUBLISHED'] == 1
        assert body['published_today'] == 1
        assert body['flagged_for_bulletin'] == 1

    def test_metrics_forbidden_for_journalist(self, client_for, journalist):
        assert client_for(journalist).get('/api/newsroom/dashboard/editorial-metrics/').status_code == 403
