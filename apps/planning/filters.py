from django.db.models import Q
from django_filters import rest_framework as filters

from .models import Task, TaskPriority, TaskStatus, TaskType


class TaskFilter(filters.FilterSet):
    """Filters for the task list."""
    status = filters.ChoiceFilter(choices=TaskStatus.choices)
    type = filters.ChoiceFilter(choices=TaskType.choices)
    priority = filters.ChoiceFilter(choices=TaskPriority.choices)
    assigned_to = filters.UUIDFilter(field_name='assigned_to_id')
    story = filters.UUIDFilter(field_name='story_id')
    query = filters.CharFilter(method='filter_query')

    def filter_query(self, queryset, name, value):
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))

    class Meta:
        model = Task
        fields = ['status', 'type', 'priority']
