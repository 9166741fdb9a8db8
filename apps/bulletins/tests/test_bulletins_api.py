"""
Tests for bulletins and bulletin schedules.
"""

import pytest

from apps.bulletins.models import BULLETIN_CATEGORY_NAME, Bulletin, BulletinSchedule, BulletinStatus
from apps.core.choices import StoryStage, StoryStatus
from apps.core.models import AuditLog
from apps.taxonomy.models import Category

URL = '/api/newsroom/bulletins/'
SCHEDULES = '/api/newsroom/bulletins/schedules/'


@pytest.fixture
def published_story(make_story, journalist):
    def _make(**fields):
        return make_story(journalist, stage=StoryStage.PUBLISHED, status=StoryStatus.PUBLISHED, **fields)
    return _make


def payload(**overrides):
    data = {
        'title': '07:00 English News',
        'intro': 'Good morning, here is the news.',
        'outro': 'That was the news.',
        'language': 'ENGLISH',
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestBulletinCreate:

    def test_creates_with_ordered_stories_and_system_category(self, client_for, sub_editor, published_story):
        first, second = published_story(title='Lead'), published_story(title='Second')

        response = client_for(sub_editor).post(
            URL,
            payload(stories=[{'story_id': str(second.id), 'order': 2}, {'story_id': str(first.id), 'order': 1}]),
            format='json',
        )

        assert response.status_code == 201
        body = response.json()['bulletin']
        assert [s['title'] for s in body['stories']] == ['Lead', 'Second']
        assert body['slug'] == '0700-english-news'
        category = Category.objects.get(name=BULLETIN_CATEGORY_NAME)
        assert not category.is_editable
        assert category.level == 1
        assert Bulletin.objects.get().category == category
        assert AuditLog.objects.filter(action='bulletin.create').exists()

    def test_reuses_system_category(self, client_for, sub_editor):
        client = client_for(sub_editor)
        client.post(URL, payload(), format='json')
        client.post(URL, payload(), format='json')

        assert Category.objects.filter(name=BULLETIN_CATEGORY_NAME).count() == 1
        assert sorted(Bulletin.objects.values_list('slug', flat=True)) == ['0700-english-news', '0700-english-news-1']

    def test_unpublished_story_rejected(self, client_for, sub_editor, make_story, journalist):
        draft = make_story(journalist)

        response = client_for(sub_editor).post(URL, payload(stories=[{'story_id': str(draft.id)}]), format='json')

        assert response.status_code == 400
        assert response.json()['error']['details']['story_ids'] == [str(draft.id)]
        assert not Bulletin.objects.exists()

    def test_missing_outro(self, client_for, sub_editor):
        data = payload()
        del data['outro']
        assert client_for(sub_editor).post(URL, data, format='json').status_code == 400

    def test_journalist_forbidden(self, client_for, journalist):
        assert client_for(journalist).get(URL).status_code == 403


@pytest.mark.django_db
class TestBulletinStatus:

    @pytest.fixture
    def bulletin(self, client_for, sub_editor):
        response = client_for(sub_editor).post(URL, payload(), format='json')
        return Bulletin.objects.get(pk=response.json()['bulletin']['id'])

    def patch(self, client, bulletin, **data):
        return client.patch(f'{URL}{bulletin.id}/', data, format='json')

    def test_walks_the_transition_table(self, client_for, sub_editor, bulletin):
        client = client_for(sub_editor)
        for new_status in ('IN_REVIEW', 'APPROVED', 'PUBLISHED'):
            assert self.patch(client, bulletin, status=new_status).status_code == 200

        bulletin.refresh_from_db()
        assert bulletin.status == BulletinStatus.PUBLISHED
        assert bulletin.published_by == sub_editor
        assert bulletin.published_at is not None

    def test_skipping_a_step_is_rejected(self, client_for, sub_editor, bulletin):
        response = self.patch(client_for(sub_editor), bulletin, status='PUBLISHED')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'WORKFLOW_ERROR'

    def test_admin_sets_any_status(self, client_for, admin_user, bulletin):
        assert self.patch(client_for(admin_user), bulletin, status='ARCHIVED').status_code == 200

    def test_published_bulletin_is_editor_only(self, client_for, sub_editor, editor, bulletin):
        bulletin.status = BulletinStatus.PUBLISHED
        bulletin.save()

        assert self.patch(client_for(sub_editor), bulletin, intro='Changed').status_code == 403
        assert self.patch(client_for(editor), bulletin, intro='Changed').status_code == 200

    def test_delete_is_editor_only(self, client_for, sub_editor, editor, bulletin):
        assert client_for(sub_editor).delete(f'{URL}{bulletin.id}/').status_code == 403
        assert client_for(editor).delete(f'{URL}{bulletin.id}/').status_code == 204

    def test_replace_stories(self, client_for, sub_editor, bulletin, published_story):
        a, b = published_story(title='A'), published_story(title='B')
        client = client_for(sub_editor)

        client.put(f'{URL}{bulletin.id}/stories/', {'stories': [{'story_id': str(a.id)}]}, format='json')
        response = client.put(
            f'{URL}{bulletin.id}/stories/',
            {'stories': [{'story_id': str(b.id), 'order': 0}, {'story_id': str(a.id), 'order': 1}]},
            format='json',
        )

        assert [s['title'] for s in response.json()['stories']] == ['B', 'A']
        assert bulletin.story_links.count() == 2


@pytest.mark.django_db
class TestSchedules:

    def slot(self, **overrides):
        data = {'title': 'Morning', 'time': '07:00', 'language': 'ENGLISH', 'schedule_type': 'WEEKDAY'}
        data.update(overrides)
        return data

    def test_create_and_duplicate_slot(self, client_for, sub_editor):
        client = client_for(sub_editor)

        created = client.post(SCHEDULES, self.slot(), format='json')
        duplicate = client.post(SCHEDULES, self.slot(title='Again'), format='json')

        assert created.status_code == 201
        assert created.json()['schedule']['created_by']['id'] == str(sub_editor.id)
        assert duplicate.status_code == 400
        assert duplicate.json()['error']['code'] == 'DUPLICATE'

    def test_invalid_time(self, client_for, sub_editor):
        response = client_for(sub_editor).post(SCHEDULES, self.slot(time='25:00'), format='json')
        assert response.status_code == 400

    def test_schedule_in_use_cannot_be_deleted(self, client_for, sub_editor):
        client = client_for(sub_editor)
        schedule_id = client.post(SCHEDULES, self.slot(), format='json').json()['schedule']['id']
        client.post(URL, payload(schedule_id=schedule_id), format='json')

        blocked = client.delete(f'{SCHEDULES}{schedule_id}/')
        deactivated = client.patch(f'{SCHEDULES}{schedule_id}/', {'is_active': False}, format='json')

        assert blocked.status_code == 400
        assert deactivated.json()['schedule']['is_active'] is False
        assert BulletinSchedule.objects.filter(pk=schedule_id).exists()
