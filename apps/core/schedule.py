"""
Due-date helpers shared by story follow-ups and the newsroom diary.

Days are counted in the local timezone, so something due at 08:00
tomorrow is one day away whatever the current time.
"""

from django.utils import timezone

DUE_SOON_DAYS = 7

GROUPS = ('overdue', 'due_today', 'due_soon', 'upcoming')


def due_info(when, completed=False, now=None):
    """``{days_until, is_overdue, is_due_today, is_due_soon}`` for a due datetime."""
    if when is None:
        return {'days_until': None, 'is_overdue': False, 'is_due_today': False, 'is_due_soon': False}
    now = now or timezone.now()
    days_until = (timezone.localdate(when) - timezone.localdate(now)).days
    return {
        'days_until': days_until,
        'is_overdue': not completed and days_until < 0,
        'is_due_today': days_until == 0,
        'is_due_soon': 1 <= days_until <= DUE_SOON_DAYS,
    }


def due_group(info):
    if info['is_overdue']:
        return 'overdue'
    if info['is_due_today']:
        return 'due_today'
    if info['is_due_soon']:
        return 'due_soon'
    return 'upcoming'


def group_by_due(items, info_key='due'):
    """
    Bucket serialized items that carry a ``due_info`` dict under ``info_key``
    (or flattened into the item itself when ``info_key`` is None).
    """
    grouped = {name: [] for name in GROUPS}
    for item in items:
        info = item[info_key] if info_key else item
        grouped[due_group(info)].append(item)
    counts = {name: len(entries) for name, entries in grouped.items()}
    counts['total'] = len(items)
    return grouped, counts
