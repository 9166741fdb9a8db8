"""
Query-string parsing helpers used by list endpoints.
"""

from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.exceptions import ErrorCode, ValidationError

TRUTHY = ('true', '1', 'yes')


def parse_bool(value, default=None):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in TRUTHY


def parse_int(value, default, minimum=None, maximum=None, name='value'):
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", code=ErrorCode.INVALID_VALUE, field=name)
    if minimum is not None:
        number = max(minimum, number)
    if maximum is not None:
        number = min(maximum, number)
    return number


def parse_datetime_param(value, end_of_day=False, name='date'):
    """
    Parse an ISO date or datetime. Bare dates expand to the start (or end)
    of that day in the current timezone.
    """
    if not value:
        return None
    # parse_datetime also accepts a bare date (as midnight), so try the date form first
    try:
        day = parse_date(value)
        parsed = None if day else parse_datetime(value)
    except ValueError:
        day = parsed = None
    if day is not None:
        parsed = datetime.combine(day, time.max if end_of_day else time.min)
    if parsed is None:
        raise ValidationError(f"Invalid {name}: {value}", code=ErrorCode.INVALID_VALUE, field=name)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def filter_datetime_range(queryset, field, params, start_key='from', end_key='to'):
    start = parse_datetime_param(params.get(start_key), name=start_key)
    end = parse_datetime_param(params.get(end_key), end_of_day=True, name=end_key)
    if start:
        queryset = queryset.filter(**{f'{field}__gte': start})
    if end:
        queryset = queryset.filter(**{f'{field}__lte': end})
    return queryset


def parse_id_list(value):
    """``"a,b, c"`` -> ``['a', 'b', 'c']``; lists pass through."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [part.strip() for part in str(value).split(',') if part.strip()]
