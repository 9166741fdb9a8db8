"""
FilterSets for the admin audit and email trails.
"""

from django_filters import rest_framework as filters

from apps.core.models import AuditLog, EmailLog


class AuditLogFilter(filters.FilterSet):
    user = filters.UUIDFilter(field_name='user_id')
    action = filters.CharFilter(field_name='action', lookup_expr='startswith')
    entity_type = filters.CharFilter(field_name='entity_type')
    entity_id = filters.CharFilter(field_name='entity_id')

    class Meta:
        model = AuditLog
        fields = ['user', 'action', 'entity_type', 'entity_id']


class EmailLogFilter(filters.FilterSet):
    type = filters.ChoiceFilter(choices=EmailLog.Type.choices)
    status = filters.ChoiceFilter(choices=EmailLog.Status.choices)
    to = filters.CharFilter(field_name='to', lookup_expr='icontains')

    class Meta:
        model = EmailLog
        fields = ['type', 'status', 'to']
