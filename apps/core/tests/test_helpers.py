"""
Tests for slugs, due dates, language names and query-string parsing.
"""

from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from apps.core.exceptions import ValidationError
from apps.core.languages import classification_name_to_language, format_language, language_to_classification_name
from apps.core.params import parse_bool, parse_datetime_param, parse_id_list, parse_int
from apps.core.schedule import due_info, group_by_due
from apps.core.slugs import generate_slug, generate_unique_slug
from apps.core.text import excerpt, html_to_text, word_count
from apps.taxonomy.models import Tag


# ============================================================================
# Slugs
# ============================================================================

class TestGenerateSlug:

    @pytest.mark.parametrize('text,expected', [
        ('Breaking News: Cape Town Floods!', 'breaking-news-cape-town-floods'),
        ('  Multiple   spaces  ', 'multiple-spaces'),
        ('dash -- dash', 'dash-dash'),
        ('Ümlaut café', 'mlaut-caf'),
        ('', ''),
        (None, ''),
    ])
    def test_generate_slug(self, text, expected):
        assert generate_slug(text) == expected


@pytest.mark.django_db
class TestUniqueSlug:

    def test_unused_base_returned(self):
        assert generate_unique_slug(Tag, 'politics') == 'politics'

    def test_suffixes_count_up(self):
        Tag.objects.create(name='Politics')
        assert generate_unique_slug(Tag, 'politics') == 'politics-1'

        Tag.objects.create(name='Politics 2', slug='politics-1')
        assert generate_unique_slug(Tag, 'politics') == 'politics-2'

    def test_goes_past_highest_suffix(self):
        Tag.objects.create(name='A', slug='politics')
        Tag.objects.create(name='B', slug='politics-5')

        assert generate_unique_slug(Tag, 'politics') == 'politics-6'

    def test_unrelated_prefix_ignored(self):
        Tag.objects.create(name='A', slug='politics')
        Tag.objects.create(name='B', slug='politics-local')

        assert generate_unique_slug(Tag, 'politics') == 'politics-1'

    def test_excludes_self(self):
        tag = Tag.objects.create(name='Politics')

        assert generate_unique_slug(Tag, 'politics', exclude_id=tag.pk) == 'politics'

    def test_empty_base(self):
        assert generate_unique_slug(Tag, '') == 'untitled'

    def test_model_save_assigns_slug(self):
        Tag.objects.create(name='Sport')
        second = Tag.objects.create(name='Sport!')

        assert second.slug == 'sport-1'


# ============================================================================
# Due dates
# ============================================================================

class TestDueInfo:

    @pytest.fixture
    def now(self):
        return timezone.make_aware(datetime(2024, 6, 10, 12, 0))

    def test_overdue(self, now):
        info = due_info(now - timedelta(days=2), now=now)
        assert info == {'days_until': -2, 'is_overdue': True, 'is_due_today': False, 'is_due_soon': False}

    def test_completed_is_never_overdue(self, now):
        assert due_info(now - timedelta(days=2), completed=True, now=now)['is_overdue'] is False

    def test_due_today_uses_calendar_day(self, now):
        info = due_info(now + timedelta(hours=6), now=now)
        assert info['days_until'] == 0
        assert info['is_due_today']

    def test_due_soon_window(self, now):
        assert due_info(now + timedelta(days=7), now=now)['is_due_soon']
        assert not due_info(now + timedelta(days=8), now=now)['is_due_soon']

    def test_none(self):
        assert due_info(None)['days_until'] is None


class TestGroupByDue:

    def test_groups_and_counts(self):
        now = timezone.now()
        items = [
            {'id': 1, 'due': due_info(now - timedelta(days=1), now=now)},
            {'id': 2, 'due': due_info(now, now=now)},
            {'id': 3, 'due': due_info(now + timedelta(days=3), now=now)},
            {'id': 4, 'due': due_info(now + timedelta(days=30), now=now)},
            {'id': 5, 'due': due_info(now + timedelta(days=40), now=now)},
        ]

        grouped, counts = group_by_due(items)

        assert [i['id'] for i in grouped['overdue']] == [1]
        assert [i['id'] for i in grouped['upcoming']] == [4, 5]
        assert counts == {'overdue': 1, 'due_today': 1, 'due_soon': 1, 'upcoming': 2, 'total': 5}

    def test_flattened_info(self):
        now = timezone.now()
        item = {'id': 1, **due_info(now, now=now)}

        grouped, _ = group_by_due([item], info_key=None)

        assert grouped['due_today'] == [item]


# ============================================================================
# Languages
# ============================================================================

class TestLanguages:

    def test_format_language(self):
        assert format_language('XHOSA') == 'Xhosa'
        assert format_language('afrikaans') == 'Afrikaans'
        assert format_language('ZULU') == 'ZULU'

    def test_classification_name(self):
        assert language_to_classification_name('ENGLISH') == 'English'
        assert language_to_classification_name('ZULU') == 'Zulu'

    def test_reverse_lookup(self):
        assert classification_name_to_language('english') == 'ENGLISH'
        assert classification_name_to_language('Klingon') is None
        assert classification_name_to_language('') is None


# ============================================================================
# Query params
# ============================================================================

class TestParams:

    def test_parse_bool(self):
        assert parse_bool('true') is True
        assert parse_bool('0') is False
        assert parse_bool('', default=True) is True

    def test_parse_int_clamps(self):
        assert parse_int('500', 10, minimum=1, maximum=90) == 90
        assert parse_int('-3', 10, minimum=1) == 1
        assert parse_int(None, 10) == 10

    def test_parse_int_rejects_text(self):
        with pytest.raises(ValidationError) as exc:
            parse_int('many', 10, name='days')
        assert exc.value.field == 'days'

    def test_bare_date_expands_to_day_bounds(self):
        start = parse_datetime_param('2024-06-10')
        end = parse_datetime_param('2024-06-10', end_of_day=True)

        assert timezone.localtime(start).hour == 0
        assert timezone.localtime(end).hour == 23
        assert timezone.is_aware(start)

    def test_full_datetime_kept(self):
        end = parse_datetime_param('2024-06-10T08:30:00+00:00', end_of_day=True)

        assert (end.hour, end.minute) == (8, 30)

    def test_invalid_date(self):
        with pytest.raises(ValidationError):
            parse_datetime_param('yesterday', name='from')

    def test_parse_id_list(self):
        assert parse_id_list('a, b,,c') == ['a', 'b', 'c']
        assert parse_id_list(['a', '']) == ['a']


# ============================================================================
# Story text
# ============================================================================

class TestStoryText:

    def test_html_to_text(self):
        html = '<p>Floods in <strong>Cape Town</strong></p><script>track()</script><p>More   rain</p>'
        assert html_to_text(html) == 'Floods in Cape Town More rain'

    def test_word_count(self):
        assert word_count('<p>One two</p><ul><li>three</li></ul>') == 3
        assert word_count('') == 0

    def test_short_excerpt_unchanged(self):
        assert excerpt('<p>Short story</p>') == 'Short story'

    def test_excerpt_cuts_on_word_boundary(self):
        result = excerpt('<p>alpha beta gamma delta</p>', length=12)
        assert result == 'alpha beta...'
