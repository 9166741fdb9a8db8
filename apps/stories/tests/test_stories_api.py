"""
Tests for story CRUD, visibility and direct status changes.
"""

from unittest.mock import patch

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.core import storage
from apps.core.choices import StaffRole, StoryStatus
from apps.core.models import AuditLog
from apps.media.models import AudioClip
from apps.stories.models import Story, StoryAudioClip

URL = '/api/newsroom/stories/'


def mp3(name='clip.mp3'):
    return SimpleUploadedFile(name, b'\x00' * 1024, content_type='audio/mpeg')


@pytest.mark.django_db
class TestCreate:

    def test_journalist_story_drops_taxonomy(self, client_for, journalist, category, classifications):
        response = client_for(journalist).post(
            URL,
            {
                'title': 'Flood warning for Cape Flats',
                'content': '<p>Heavy rain expected</p>',
                'category_id': str(category.id),
                'classification_ids': [str(classifications['English'].id)],
            },
            format='json',
        )

        assert response.status_code == 201
        story = Story.objects.get()
        assert story.slug == 'flood-warning-for-cape-flats'
        assert story.author_role == StaffRole.JOURNALIST
        assert story.category is None
        assert not story.classifications.exists()
        assert AuditLog.objects.filter(action='story.create', entity_id=str(story.id)).exists()

    def test_editor_story_keeps_taxonomy(self, client_for, editor, category, classifications):
        response = client_for(editor).post(
            URL,
            {
                'title': 'Budget speech',
                'category_id': str(category.id),
                'classification_ids': [str(classifications['English'].id)],
            },
            format='json',
        )

        assert response.status_code == 201
        story = Story.objects.get()
        assert story.category == category
        assert list(story.classifications.all()) == [classifications['English']]

    def test_duplicate_titles_get_unique_slugs(self, client_for, journalist):
        client = client_for(journalist)
        client.post(URL, {'title': 'Load shedding update'}, format='json')
        client.post(URL, {'title': 'Load shedding update'}, format='json')

        slugs = sorted(Story.objects.values_list('slug', flat=True))
        assert slugs == ['load-shedding-update', 'load-shedding-update-1']

    def test_multipart_with_audio(self, client_for, journalist):
        response = client_for(journalist).post(
            URL,
            {'title': 'Interview', 'audio_files': [mp3('a.mp3'), mp3('b.mp3')]},
            format='multipart',
        )

        assert response.status_code == 201
        story = Story.objects.get()
        assert story.audio_links.count() == 2
        assert len(response.json()['story']['audio_clips']) == 2

    def test_invalid_audio_creates_nothing(self, client_for, journalist):
        bogus = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = client_for(journalist).post(
            URL, {'title': 'Interview', 'audio_files': [bogus]}, format='multipart',
        )

        assert response.status_code == 400
        assert not Story.objects.exists()
        assert not AudioClip.objects.exists()

    def test_title_required(self, client_for, journalist):
        assert client_for(journalist).post(URL, {'content': 'x'}, format='json').status_code == 400

    def test_uploaded_audio_removed_when_create_rolls_back(self, client_for, journalist):
        stored = []
        real_upload = storage.upload

        def recording_upload(*args, **kwargs):
            result = real_upload(*args, **kwargs)
            stored.append(result.pathname)
            return result

        with patch('apps.core.storage.upload', side_effect=recording_upload), \
                patch('apps.stories.services.log_audit', side_effect=RuntimeError('audit down')):
            response = client_for(journalist).post(
                URL, {'title': 'Interview', 'audio_files': [mp3()]}, format='multipart',
            )

        assert response.status_code == 500
        assert not Story.objects.exists()
        assert not AudioClip.objects.exists()
        assert len(stored) == 1
        assert not default_storage.exists(stored[0])


@pytest.mark.django_db
class TestVisibility:

    def test_intern_lists_only_own(self, client_for, intern, journalist, make_story):
        mine = make_story(intern)
        make_story(journalist)

        body = client_for(intern).get(URL).json()

        assert [s['id'] for s in body['stories']] == [str(mine.id)]
        assert body['pagination']['total'] == 1

    def test_journalist_sees_assigned_reviews(self, client_for, intern, journalist, make_story):
        make_story(intern)
        reviewing = make_story(intern, assigned_reviewer=journalist)

        body = client_for(journalist).get(URL).json()

        assert [s['id'] for s in body['stories']] == [str(reviewing.id)]

    def test_detail_of_hidden_story_is_forbidden(self, client_for, intern, journalist, make_story):
        story = make_story(journalist)
        response = client_for(intern).get(f'{URL}{story.id}/')
        assert response.status_code == 403
        assert response.json()['error']['code'] == 'PERMISSION_DENIED'

    def test_detail_has_next_action(self, client_for, intern, make_story):
        story = make_story(intern)

        body = client_for(intern).get(f'{URL}{story.id}/').json()['story']

        assert body['next_action']['action'] == 'submit_for_review'
        assert body['edit_lock_reason'] is None
        assert body['can_edit'] is True

    def test_filters(self, client_for, editor, journalist, make_story):
        make_story(journalist, title='Taxi strike', flagged_for_bulletin=True)
        make_story(journalist, title='Rugby results')

        client = client_for(editor)
        assert client.get(URL, {'query': 'taxi'}).json()['pagination']['total'] == 1
        assert client.get(URL, {'flagged_for_bulletin': 'true'}).json()['stories'][0]['title'] == 'Taxi strike'
        assert client.get(URL, {'author': str(journalist.id)}).json()['pagination']['total'] == 2


@pytest.mark.django_db
class TestUpdateAndDelete:

    def test_author_edits_draft_and_slug_follows_title(self, client_for, journalist, make_story):
        story = make_story(journalist, title='Old title')

        response = client_for(journalist).patch(f'{URL}{story.id}/', {'title': 'New title'}, format='json')

        assert response.status_code == 200
        story.refresh_from_db()
        assert story.slug == 'new-title'

    def test_locked_stage_blocks_author(self, client_for, journalist, make_story):
        story = make_story(journalist, stage='NEEDS_SUB_EDITOR_APPROVAL')
        response = client_for(journalist).patch(f'{URL}{story.id}/', {'content': 'x'}, format='json')
        assert response.status_code == 403

    def test_editor_overrides_lock(self, client_for, editor, journalist, make_story, classifications):
        story = make_story(journalist, stage='APPROVED')

        response = client_for(editor).patch(
            f'{URL}{story.id}/',
            {'classification_ids': [str(classifications['Muslim'].id)]},
            format='json',
        )

        assert response.status_code == 200
        assert list(story.classifications.all()) == [classifications['Muslim']]

    def test_journalist_cannot_delete(self, client_for, journalist, make_story):
        story = make_story(journalist)
        assert client_for(journalist).delete(f'{URL}{story.id}/').status_code == 403

    def test_delete_cascades_and_removes_unshared_audio(self, client_for, editor, journalist, make_story):
        story = make_story(journalist)
        translation = make_story(journalist, is_translation=True, original_story=story, language='XHOSA')
        shared_story = make_story(journalist)

        def clip(name):
            path = default_storage.save(f'audio/{name}', mp3(name))
            return AudioClip.objects.create(
                filename=path, original_name=name, url=default_storage.url(path), mime_type='audio/mpeg',
            )

        own, shared = clip('own.mp3'), clip('shared.mp3')
        StoryAudioClip.objects.create(story=story, audio_clip=own)
        StoryAudioClip.objects.create(story=translation, audio_clip=own)
        StoryAudioClip.objects.create(story=story, audio_clip=shared)
        StoryAudioClip.objects.create(story=shared_story, audio_clip=shared)

        response = client_for(editor).delete(f'{URL}{story.id}/')

        assert response.status_code == 204
        assert not Story.objects.filter(pk__in=[story.pk, translation.pk]).exists()
        assert not AudioClip.objects.filter(pk=own.pk).exists()
        assert not default_storage.exists(own.filename)
        assert AudioClip.objects.filter(pk=shared.pk).exists()

    def test_storage_failure_after_delete_is_logged(self, client_for, editor, journalist, make_story):
        story = make_story(journalist)
        path = default_storage.save('audio/gone.mp3', mp3('gone.mp3'))
        clip = AudioClip.objects.create(filename=path, original_name='gone.mp3', url=default_storage.url(path))
        StoryAudioClip.objects.create(story=story, audio_clip=clip)

        with patch('apps.core.storage.delete', side_effect=OSError('bucket unavailable')), \
                patch('apps.core.storage.logger') as storage_logger:
            response = client_for(editor).delete(f'{URL}{story.id}/')

        assert response.status_code == 204
        assert not Story.objects.filter(pk=story.pk).exists()
        assert not AudioClip.objects.filter(pk=clip.pk).exists()
        storage_logger.exception.assert_called_once_with('Failed to delete stored file %s', clip.url)


@pytest.mark.django_db
class TestStatusChange:

    def url(self, story):
        return f'{URL}{story.id}/status/'

    def test_intern_submits_own_draft(self, client_for, intern, make_story):
        story = make_story(intern)

        response = client_for(intern).patch(self.url(story), {'status': 'IN_REVIEW'}, format='json')

        assert response.status_code == 200
        story.refresh_from_db()
        assert story.status == StoryStatus.IN_REVIEW
        assert AuditLog.objects.filter(action='story.status_change').exists()

    def test_disallowed_transition(self, client_for, intern, make_story):
        story = make_story(intern)
        response = client_for(intern).patch(self.url(story), {'status': 'PUBLISHED'}, format='json')
        assert response.status_code == 403

    def test_unknown_status(self, client_for, admin_user, journalist, make_story):
        story = make_story(journalist)
        response = client_for(admin_user).patch(self.url(story), {'status': 'LOST'}, format='json')
        assert response.status_code == 400

    def test_publish_and_unpublish_stamps(self, client_for, admin_user, journalist, make_story):
        story = make_story(journalist)
        client = client_for(admin_user)

        client.patch(self.url(story), {'status': 'PUBLISHED'}, format='json')
        story.refresh_from_db()
        assert story.published_at is not None
        assert story.published_by == admin_user

        client.patch(self.url(story), {'status': 'ARCHIVED'}, format='json')
        story.refresh_from_db()
        assert story.published_at is None
        assert story.published_by is None


@pytest.mark.django_db
class TestCommentsAndAudio:

    def test_threaded_comments(self, client_for, journalist, sub_editor, make_story):
        story = make_story(journalist)
        url = f'{URL}{story.id}/comments/'

        parent = client_for(sub_editor).post(url, {'content': 'Check the quote'}, format='json').json()['comment']
        client_for(journalist).post(url, {'content': 'Done', 'parent_id': parent['id']}, format='json')

        comments = client_for(journalist).get(url).json()['comments']
        assert len(comments) == 1
        assert comments[0]['replies'][0]['content'] == 'Done'

    def test_parent_from_other_story_rejected(self, client_for, journalist, make_story):
        story, other = make_story(journalist), make_story(journalist)
        client = client_for(journalist)
        foreign = client.post(f'{URL}{other.id}/comments/', {'content': 'Elsewhere'}, format='json').json()['comment']

        response = client.post(
            f'{URL}{story.id}/comments/', {'content': 'Reply', 'parent_id': foreign['id']}, format='json',
        )

        assert response.status_code == 400

    def test_only_author_edits_comment_content(self, client_for, journalist, sub_editor, make_story):
        story = make_story(journalist)
        url = f'{URL}{story.id}/comments/'
        comment = client_for(journalist).post(url, {'content': 'Draft note'}, format='json').json()['comment']

        edit = client_for(sub_editor).patch(f"{url}{comment['id']}/", {'content': 'Changed'}, format='json')
        resolve = client_for(sub_editor).patch(f"{url}{comment['id']}/", {'is_resolved': True}, format='json')

        assert edit.status_code == 403
        assert resolve.status_code == 200
        assert resolve.json()['comment']['resolved_by']['id'] == str(sub_editor.id)

    def test_link_and_unlink_library_clip(self, client_for, journalist, make_story):
        story = make_story(journalist)
        clip = AudioClip.objects.create(filename='audio/x.mp3', original_name='x.mp3', url='/media/audio/x.mp3')
        client = client_for(journalist)

        linked = client.post(f'{URL}{story.id}/audio/', {'audio_clip_id': str(clip.id)}, format='json')
        again = client.post(f'{URL}{story.id}/audio/', {'audio_clip_id': str(clip.id)}, format='json')
        unlinked = client.delete(f'{URL}{story.id}/audio/{clip.id}/')

        assert linked.status_code == 201
        assert again.status_code == 400
        assert unlinked.status_code == 204
        assert not story.audio_links.exists()
