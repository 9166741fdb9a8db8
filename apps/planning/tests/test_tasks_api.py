"""
Tests for task visibility, assignment and completion.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.models import AuditLog
from apps.planning.models import Task, TaskPriority, TaskStatus, TaskType

URL = '/api/tasks/'


@pytest.fixture
def make_task(db):
    def _make(created_by, **fields):
        fields.setdefault('type', TaskType.STORY_CREATE)
        fields.setdefault('title', 'Follow the council vote')
        return Task.objects.create(created_by=created_by, **fields)
    return _make


@pytest.mark.django_db
class TestVisibility:

    def test_intern_sees_only_own(self, client_for, intern, sub_editor, make_task):
        mine = make_task(sub_editor, assigned_to=intern)
        make_task(sub_editor)

        body = client_for(intern).get(URL).json()

        assert [t['id'] for t in body['tasks']] == [str(mine.id)]

    def test_journalist_sees_open_review_pool(self, client_for, journalist, sub_editor, make_task):
        pool = make_task(sub_editor, type=TaskType.STORY_REVIEW)
        make_task(sub_editor, type=TaskType.STORY_REVIEW, status=TaskStatus.COMPLETED)
        make_task(sub_editor, type=TaskType.BULLETIN_CREATE)

        body = client_for(journalist).get(URL).json()

        assert [t['id'] for t in body['tasks']] == [str(pool.id)]

    def test_sub_editor_sees_all_ordered_by_priority_then_due(self, client_for, sub_editor, intern, make_task):
        soon = timezone.now() + timedelta(hours=2)
        low = make_task(intern, title='Low', priority=TaskPriority.LOW)
        later = make_task(intern, title='Urgent later', priority=TaskPriority.URGENT, due_date=soon + timedelta(days=1))
        first = make_task(intern, title='Urgent soon', priority=TaskPriority.URGENT, due_date=soon)

        body = client_for(sub_editor).get(URL).json()

        assert [t['id'] for t in body['tasks']] == [str(first.id), str(later.id), str(low.id)]

    def test_filters(self, client_for, sub_editor, make_task):
        make_task(sub_editor, title='Translate budget story', type=TaskType.STORY_TRANSLATE)
        make_task(sub_editor, title='Review sports')
        client = client_for(sub_editor)

        assert client.get(URL, {'type': 'STORY_TRANSLATE'}).json()['pagination']['total'] == 1
        assert client.get(URL, {'query': 'sports'}).json()['tasks'][0]['title'] == 'Review sports'


@pytest.mark.django_db
class TestCreateAndUpdate:

    def test_unassigned_task_waits_for_assignment(self, client_for, journalist):
        response = client_for(journalist).post(URL, {'type': 'STORY_CREATE', 'title': 'Pitch'}, format='json')

        assert response.status_code == 201
        assert response.json()['task']['status'] == TaskStatus.PENDING_ASSIGNMENT
        assert AuditLog.objects.filter(action='task.create').exists()

    def test_inactive_assignee_is_404(self, client_for, sub_editor, make_staff):
        retired = make_staff(is_active=False)
        response = client_for(sub_editor).post(
            URL, {'type': 'STORY_CREATE', 'title': 'Pitch', 'assigned_to_id': str(retired.id)}, format='json',
        )
        assert response.status_code == 404

    def test_radio_user_cannot_be_assigned(self, client_for, sub_editor, make_radio_user):
        radio = make_radio_user()
        response = client_for(sub_editor).post(
            URL, {'type': 'STORY_CREATE', 'title': 'Pitch', 'assigned_to_id': str(radio.id)}, format='json',
        )
        assert response.status_code == 404

    def test_outsider_cannot_patch(self, client_for, journalist, sub_editor, make_task):
        task = make_task(sub_editor, type=TaskType.STORY_REVIEW)
        response = client_for(journalist).patch(f'{URL}{task.id}/', {'title': 'Mine now'}, format='json')
        assert response.status_code == 403

    def test_completed_status_stamps_time(self, client_for, journalist, sub_editor, make_task):
        task = make_task(sub_editor, assigned_to=journalist, status=TaskStatus.IN_PROGRESS)

        response = client_for(journalist).patch(f'{URL}{task.id}/', {'status': 'COMPLETED'}, format='json')

        assert response.status_code == 200
        task.refresh_from_db()
        assert task.completed_at is not None

    def test_patch_assignee_moves_out_of_pending_assignment(self, client_for, sub_editor, journalist, make_task):
        task = make_task(sub_editor, status=TaskStatus.PENDING_ASSIGNMENT)

        response = client_for(sub_editor).patch(
            f'{URL}{task.id}/', {'assigned_to_id': str(journalist.id)}, format='json',
        )

        assert response.status_code == 200
        assert response.json()['task']['status'] == TaskStatus.PENDING
        task.refresh_from_db()
        assert (task.assigned_to, task.status) == (journalist, TaskStatus.PENDING)

    def test_journalist_cannot_delete(self, client_for, journalist, make_task):
        task = make_task(journalist)
        assert client_for(journalist).delete(f'{URL}{task.id}/').status_code == 403


@pytest.mark.django_db
class TestAssignAndComplete:

    def test_assign_moves_out_of_pending_assignment(self, client_for, sub_editor, journalist, make_task):
        task = make_task(sub_editor, status=TaskStatus.PENDING_ASSIGNMENT)

        response = client_for(sub_editor).post(
            f'{URL}{task.id}/assign/', {'assigned_to_id': str(journalist.id)}, format='json',
        )

        assert response.status_code == 200
        task.refresh_from_db()
        assert (task.assigned_to, task.status) == (journalist, TaskStatus.PENDING)

    def test_journalist_cannot_assign(self, client_for, journalist, make_task):
        task = make_task(journalist)
        response = client_for(journalist).post(
            f'{URL}{task.id}/assign/', {'assigned_to_id': str(journalist.id)}, format='json',
        )
        assert response.status_code == 403

    def test_blocked_task_cannot_complete(self, client_for, journalist, sub_editor, make_task):
        blocker = make_task(sub_editor)
        task = make_task(sub_editor, assigned_to=journalist, blocked_by=blocker)
        client = client_for(journalist)

        blocked = client.post(f'{URL}{task.id}/complete/')
        blocker.status = TaskStatus.COMPLETED
        blocker.save()
        done = client.post(f'{URL}{task.id}/complete/')

        assert blocked.status_code == 400
        assert done.status_code == 200
        assert done.json()['task']['status'] == TaskStatus.COMPLETED

    def test_only_assignee_completes(self, client_for, intern, journalist, make_task):
        task = make_task(intern, assigned_to=journalist)
        assert client_for(intern).post(f'{URL}{task.id}/complete/').status_code == 403

    def test_comments(self, client_for, journalist, sub_editor, make_task):
        task = make_task(sub_editor, assigned_to=journalist)
        url = f'{URL}{task.id}/comments/'

        client_for(journalist).post(url, {'content': 'On it'}, format='json')
        comments = client_for(sub_editor).get(url).json()['comments']

        assert [c['content'] for c in comments] == ['On it']
