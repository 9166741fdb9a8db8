"""
Tests for shows, episodes and episode publishing.
"""

from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone

from apps.core.choices import StaffRole
from apps.core.models import AuditLog
from apps.media.models import AudioClip
from apps.shows.models import Episode, EpisodeStatus, Show
from apps.shows.tasks import publish_scheduled_episodes

URL = '/api/newsroom/shows/'


@pytest.fixture
def show(sub_editor):
    return Show.objects.create(title='Morning Drive', created_by=sub_editor)


@pytest.fixture
def episode(show, sub_editor):
    return Episode.objects.create(show=show, title='Pilot', created_by=sub_editor)


@pytest.fixture
def clip(db):
    return AudioClip.objects.create(filename='audio/ep.mp3', original_name='ep.mp3', url='/media/audio/ep.mp3')


@pytest.mark.django_db
class TestShows:

    def test_any_staff_can_list(self, client_for, intern, show):
        body = client_for(intern).get(URL).json()
        assert [s['title'] for s in body['shows']] == ['Morning Drive']

    def test_journalist_cannot_create(self, client_for, journalist):
        assert client_for(journalist).post(URL, {'title': 'Talk'}, format='json').status_code == 403

    def test_sub_editor_creates(self, client_for, sub_editor, category):
        response = client_for(sub_editor).post(
            URL, {'title': 'Sports Hour', 'category_id': str(category.id)}, format='json',
        )

        assert response.status_code == 201
        assert response.json()['show']['slug'] == 'sports-hour'
        assert AuditLog.objects.filter(action='show.create').exists()

    def test_sub_editor_edits_only_own_show(self, client_for, make_staff, show):
        other = make_staff(StaffRole.SUB_EDITOR)
        response = client_for(other).patch(f'{URL}{show.id}/', {'description': 'x'}, format='json')
        assert response.status_code == 403

    def test_editor_edits_any_show(self, client_for, editor, show):
        response = client_for(editor).patch(f'{URL}{show.id}/', {'title': 'Breakfast Show'}, format='json')
        assert response.status_code == 200
        show.refresh_from_db()
        assert show.slug == 'breakfast-show'

    def test_delete_is_editor_only(self, client_for, sub_editor, editor, show):
        assert client_for(sub_editor).delete(f'{URL}{show.id}/').status_code == 403
        assert client_for(editor).delete(f'{URL}{show.id}/').status_code == 204

    def test_cover_upload(self, client_for, sub_editor, show):
        image = SimpleUploadedFile('cover.png', b'\x89PNG' + b'\x00' * 100, content_type='image/png')
        response = client_for(sub_editor).post(f'{URL}{show.id}/cover/', {'file': image}, format='multipart')
        assert response.status_code == 200
        show.refresh_from_db()
        assert show.cover_image


@pytest.mark.django_db
class TestEpisodes:

    def test_numbers_increment_per_show(self, client_for, sub_editor, show):
        client = client_for(sub_editor)
        first = client.post(f'{URL}{show.id}/episodes/', {'title': 'One'}, format='json').json()['episode']
        second = client.post(f'{URL}{show.id}/episodes/', {'title': 'Two'}, format='json').json()['episode']

        assert (first['episode_number'], second['episode_number']) == (1, 2)
        listing = client.get(f'{URL}{show.id}/episodes/').json()
        assert [e['title'] for e in listing['episodes']] == ['Two', 'One']

    def test_episode_from_other_show_is_404(self, client_for, sub_editor, episode):
        other = Show.objects.create(title='Other', created_by=sub_editor)
        response = client_for(sub_editor).get(f'{URL}{other.id}/episodes/{episode.id}/')
        assert response.status_code == 404

    def test_audio_upload_links_clip(self, client_for, sub_editor, show, episode):
        audio = SimpleUploadedFile('ep.mp3', b'\x00' * 512, content_type='audio/mpeg')
        response = client_for(sub_editor).post(
            f'{URL}{show.id}/episodes/{episode.id}/audio/', {'file': audio}, format='multipart',
        )
        assert response.status_code == 201
        assert episode.audio_clips.count() == 1


@pytest.mark.django_db
class TestEpisodePublishing:

    def url(self, show, episode):
        return f'{URL}{show.id}/episodes/{episode.id}/publish/'

    def test_requires_audio(self, client_for, sub_editor, show, episode):
        response = client_for(sub_editor).post(self.url(show, episode), {}, format='json')
        assert response.status_code == 400

    def test_publish_now(self, client_for, sub_editor, show, episode, clip):
        episode.audio_clips.add(clip)

        response = client_for(sub_editor).post(self.url(show, episode), {}, format='json')

        assert response.status_code == 200
        episode.refresh_from_db()
        assert episode.status == EpisodeStatus.PUBLISHED
        assert episode.published_by == sub_editor
        assert AuditLog.objects.filter(action='episode.publish').exists()

    def test_future_date_schedules(self, client_for, sub_editor, show, episode, clip):
        episode.audio_clips.add(clip)
        when = timezone.now() + timedelta(days=1)

        client_for(sub_editor).post(self.url(show, episode), {'scheduled_publish_at': when.isoformat()}, format='json')

        episode.refresh_from_db()
        assert episode.status == EpisodeStatus.DRAFT
        assert episode.scheduled_publish_at is not None

    def test_wrong_show_is_400(self, client_for, sub_editor, episode, clip):
        other = Show.objects.create(title='Other', created_by=sub_editor)
        episode.audio_clips.add(clip)
        response = client_for(sub_editor).post(self.url(other, episode), {}, format='json')
        assert response.status_code == 400

    def test_journalist_cannot_publish(self, client_for, journalist, show, episode, clip):
        episode.audio_clips.add(clip)
        assert client_for(journalist).post(self.url(show, episode), {}, format='json').status_code == 403

    def test_unpublish_clears_fields(self, client_for, sub_editor, show, episode, clip):
        episode.audio_clips.add(clip)
        client = client_for(sub_editor)
        client.post(self.url(show, episode), {}, format='json')

        response = client.delete(self.url(show, episode))

        assert response.status_code == 200
        episode.refresh_from_db()
        assert episode.status == EpisodeStatus.DRAFT
        assert episode.published_at is None
        assert AuditLog.objects.filter(action='episode.unpublish').exists()

    def test_scheduler_publishes_due_episodes(self, show, sub_editor):
        past = timezone.now() - timedelta(minutes=1)
        due = Episode.objects.create(show=show, title='Due', scheduled_publish_at=past, published_by=sub_editor)
        later = Episode.objects.create(show=show, title='Later', scheduled_publish_at=past + timedelta(days=2))

        assert publish_scheduled_episodes() == {'published': 1}

        due.refresh_from_db()
        later.refresh_from_db()
        assert due.status == EpisodeStatus.PUBLISHED
        assert due.published_at is not None
        assert later.status == EpisodeStatus.DRAFT
