"""
Shared pytest fixtures.

``make_staff`` and ``make_radio_user`` build users; ``client_for`` returns
an APIClient already authenticated as a given user.
"""

import itertools

import pytest
from rest_framework.test import APIClient

from apps.core.choices import ClassificationType, StaffRole, UserType

_counter = itertools.count(1)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_staff(db):
    from apps.accounts.models import User

    def _make(role=StaffRole.JOURNALIST, **fields):
        n = next(_counter)
        fields.setdefault('email', f'{str(role).lower()}{n}@newskoop.test')
        fields.setdefault('first_name', str(role).title())
        fields.setdefault('last_name', f'User{n}')
        return User.objects.create_user(
            password=fields.pop('password', 'password123'),
            user_type=UserType.STAFF,
            staff_role=role,
            **fields,
        )

    return _make


@pytest.fixture
def make_station(db):
    from apps.stations.models import Station

    def _make(**fields):
        fields.setdefault('name', f'Station {next(_counter)}')
        return Station.objects.create(**fields)

    return _make


@pytest.fixture
def make_radio_user(db, make_station):
    from apps.accounts.models import User

    def _make(station=None, **fields):
        n = next(_counter)
        fields.setdefault('email', f'radio{n}@station.test')
        fields.setdefault('first_name', 'Radio')
        fields.setdefault('last_name', f'User{n}')
        return User.objects.create_user(
            password=fields.pop('password', 'password123'),
            user_type=UserType.RADIO,
            radio_station=station or make_station(),
            **fields,
        )

    return _make


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def journalist(make_staff):
    return make_staff(StaffRole.JOURNALIST)


@pytest.fixture
def intern(make_staff):
    return make_staff(StaffRole.INTERN)


@pytest.fixture
def sub_editor(make_staff):
    return make_staff(StaffRole.SUB_EDITOR)


@pytest.fixture
def editor(make_staff):
    return make_staff(StaffRole.EDITOR)


@pytest.fixture
def admin_user(make_staff):
    return make_staff(StaffRole.ADMIN)


@pytest.fixture
def superadmin(make_staff):
    return make_staff(StaffRole.SUPERADMIN)


@pytest.fixture
def classifications(db):
    """The default language and religion labels stations filter on."""
    from apps.taxonomy.models import Classification

    labels = {}
    for order, name in enumerate(['English', 'Afrikaans', 'Xhosa']):
        labels[name] = Classification.objects.create(
            name=name, type=ClassificationType.LANGUAGE, sort_order=order,
        )
    for order, name in enumerate(['Christian', 'Muslim', 'Neutral']):
        labels[name] = Classification.objects.create(
            name=name, type=ClassificationType.RELIGION, sort_order=order,
        )
    labels['Cape Town'] = Classification.objects.create(name='Cape Town', type=ClassificationType.LOCALITY)
    return labels


@pytest.fixture
def category(db):
    from apps.taxonomy.models import Category

    return Category.objects.create(name='News')


@pytest.fixture
def make_story(db):
    """Build a story; ``author_role`` follows the author unless given."""
    from apps.stories.models import Story

    def _make(author, **fields):
        fields.setdefault('title', f'Story {next(_counter)}')
        fields.setdefault('content', '<p>Body</p>')
        fields.setdefault('author_role', author.staff_role)
        classifications = fields.pop('classifications', None)
        tags = fields.pop('tags', None)
        story = Story.objects.create(author=author, **fields)
        if classifications:
            story.classifications.set(classifications)
        if tags:
            story.tags.set(tags)
        return story

    return _make


@pytest.fixture
def approvable(classifications, category):
    """Fields a story needs before it can be approved."""
    return {
        'category': category,
        'classifications': [classifications['English'], classifications['Christian']],
    }
