"""
Tests for categories, tags and classifications.
"""

import pytest

from apps.core.choices import ClassificationType
from apps.taxonomy.models import Category, Classification, Tag


# ============================================================================
# Category tree
# ============================================================================

@pytest.mark.django_db
class TestCategoryModel:

    def test_level_follows_parent(self):
        root = Category.objects.create(name='News')
        child = Category.objects.create(name='Local', parent=root)
        grandchild = Category.objects.create(name='Cape Town', parent=child)

        assert (root.level, child.level, grandchild.level) == (1, 2, 3)
        root.refresh_from_db()
        assert root.is_parent is True

    def test_slug_generated_and_unique(self):
        first = Category.objects.create(name='Sport')
        second = Category.objects.create(name='Sport!')
        assert first.slug == 'sport'
        assert second.slug == 'sport-1'

    def test_descendant_ids_cover_subtree(self):
        root = Category.objects.create(name='News')
        child = Category.objects.create(name='Local', parent=root)
        leaf = Category.objects.create(name='Metro', parent=child)
        assert set(root.descendant_ids()) == {root.id, child.id, leaf.id}


@pytest.mark.django_db
class TestCategoryAPI:
    url = '/api/newsroom/categories/'

    def test_list_returns_tree(self, client_for, journalist):
        root = Category.objects.create(name='News')
        Category.objects.create(name='Local', parent=root)

        response = client_for(journalist).get(self.url)

        assert response.status_code == 200
        tree = response.json()['categories']
        assert [c['name'] for c in tree] == ['News']
        assert tree[0]['children'][0]['name'] == 'Local'

    def test_flat_list(self, client_for, journalist):
        root = Category.objects.create(name='News')
        Category.objects.create(name='Local', parent=root)

        response = client_for(journalist).get(self.url, {'flat': 'true'})

        assert len(response.json()['categories']) == 2

    def test_journalist_cannot_create(self, client_for, journalist):
        response = client_for(journalist).post(self.url, {'name': 'Politics'}, format='json')
        assert response.status_code == 403

    def test_sub_editor_creates_child(self, client_for, sub_editor):
        root = Category.objects.create(name='News')
        response = client_for(sub_editor).post(
            self.url, {'name': 'Local', 'parent_id': str(root.id)}, format='json',
        )
        assert response.status_code == 201
        assert response.json()['category']['level'] == 2

    def test_level_three_cannot_have_children(self, client_for, editor):
        a = Category.objects.create(name='A')
        b = Category.objects.create(name='B', parent=a)
        c = Category.objects.create(name='C', parent=b)

        response = client_for(editor).post(
            self.url, {'name': 'D', 'parent_id': str(c.id)}, format='json',
        )

        assert response.status_code == 400
        assert response.json()['error']['field'] == 'parent_id'

    def test_non_editable_category_is_protected(self, client_for, editor):
        system = Category.objects.create(name='News Bulletins', is_editable=False)
        client = client_for(editor)

        assert client.patch(f'{self.url}{system.id}/', {'name': 'X'}, format='json').status_code == 400
        assert client.delete(f'{self.url}{system.id}/').status_code == 400

    def test_cannot_delete_category_with_children(self, client_for, editor):
        root = Category.objects.create(name='News')
        Category.objects.create(name='Local', parent=root)

        response = client_for(editor).delete(f'{self.url}{root.id}/')

        assert response.status_code == 400
        assert Category.objects.filter(pk=root.pk).exists()

    def test_delete_leaf_clears_parent_flag(self, client_for, editor):
        root = Category.objects.create(name='News')
        leaf = Category.objects.create(name='Local', parent=root)

        response = client_for(editor).delete(f'{self.url}{leaf.id}/')

        assert response.status_code == 204
        root.refresh_from_db()
        assert root.is_parent is False


# ============================================================================
# Tags and classifications
# ============================================================================

@pytest.mark.django_db
class TestTagAPI:

    def test_search_by_query(self, client_for, journalist):
        Tag.objects.create(name='Elections')
        Tag.objects.create(name='Weather')

        response = client_for(journalist).get('/api/newsroom/tags/', {'query': 'elect'})

        body = response.json()
        assert [t['name'] for t in body['tags']] == ['Elections']
        assert body['tags'][0]['usage_count'] == 0
        assert body['pagination']['total'] == 1

    def test_duplicate_name_rejected(self, client_for, sub_editor):
        Tag.objects.create(name='Elections')
        response = client_for(sub_editor).post('/api/newsroom/tags/', {'name': 'elections'}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestClassificationAPI:
    url = '/api/newsroom/classifications/'

    def test_filter_by_type(self, client_for, journalist, classifications):
        response = client_for(journalist).get(self.url, {'type': 'religion'})
        names = [c['name'] for c in response.json()['classifications']]
        assert names == ['Christian', 'Muslim', 'Neutral']

    def test_sub_editor_cannot_write(self, client_for, sub_editor):
        response = client_for(sub_editor).post(
            self.url, {'name': 'Zulu', 'type': ClassificationType.LANGUAGE}, format='json',
        )
        assert response.status_code == 403

    def test_slug_carries_type_suffix(self, client_for, editor):
        response = client_for(editor).post(
            self.url, {'name': 'Hindu', 'type': ClassificationType.RELIGION}, format='json',
        )
        assert response.status_code == 201
        assert response.json()['slug'] == 'hindu-religion'

    def test_in_use_classification_cannot_be_deleted(self, client_for, editor, classifications, make_station):
        station = make_station()
        station.classifications.add(classifications['English'])

        response = client_for(editor).delete(f"{self.url}{classifications['English'].id}/")

        assert response.status_code == 400
        assert Classification.objects.filter(pk=classifications['English'].pk).exists()
