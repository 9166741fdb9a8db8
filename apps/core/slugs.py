"""
URL slug helpers shared by every sluggable model.
"""

import re
from typing import Optional

_INVALID = re.compile(r'[^a-z0-9\s-]')
_WHITESPACE = re.compile(r'\s+')
_DASHES = re.compile(r'-+')


def generate_slug(text: str) -> str:
    """
    Lowercase, drop anything outside ``[a-z0-9 -]``, turn whitespace into
    dashes and collapse repeated dashes.

        >>> generate_slug("Breaking News: Cape Town Floods!")
        'breaking-news-cape-town-floods'
    """
    slug = _INVALID.sub('', (text or '').lower().strip())
    slug = _WHITESPACE.sub('-', slug)
    slug = _DASHES.sub('-', slug)
    return slug.strip('-')


def generate_unique_slug(
    model,
    base: str,
    exclude_id=None,
    field: str = 'slug',
    queryset=None,
) -> str:
    """
    Return ``base`` if unused, otherwise ``base-N`` with N one past the
    highest numeric suffix already taken.

    ``queryset`` narrows the uniqueness scope (episodes are unique per show).
    """
    base = base or 'untitled'
    qs = queryset if queryset is not None else model._default_manager.all()
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)

    taken = set(
        qs.filter(**{f'{field}__startswith': base}).values_list(field, flat=True)
    )
    if base not in taken:
        return base

    suffix = re.compile(rf'^{re.escape(base)}-(\d+)$')
    highest = 0
    for slug in taken:
        match = suffix.match(slug)
        if match:
            highest = max(highest, int(match.group(1)))

    counter = highest + 1
    while f'{base}-{counter}' in taken:
        counter += 1
    return f'{base}-{counter}'


def slug_for(model, title: str, exclude_id: Optional[object] = None, suffix: str = '', **kwargs) -> str:
    """Convenience wrapper: slugify ``title`` (plus optional suffix) and make it unique."""
    base = generate_slug(title)
    if suffix:
        base = f'{base}-{suffix}' if base else suffix
    return generate_unique_slug(model, base, exclude_id=exclude_id, **kwargs)
