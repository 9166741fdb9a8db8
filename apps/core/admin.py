"""
Admin interface for the audit and email trails.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import AuditLog, EmailLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only browser over audit entries."""

    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'user', 'ip_address']
    list_filter = ['action', 'entity_type', ('created_at', admin.DateFieldListFilter)]
    search_fields = ['action', 'entity_id', 'user__email']
    raw_id_fields = ['user']
    date_hierarchy = 'created_at'
    readonly_fields = [
        'id', 'user', 'action', 'entity_type', 'entity_id', 'metadata',
        'ip_address', 'user_agent', 'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):

    list_display = ['created_at', 'to', 'type', 'status_badge', 'subject']
    list_filter = ['type', 'status', 'environment']
    search_fields = ['to', 'subject']
    raw_id_fields = ['user']
    readonly_fields = ['sent_at', 'failed_at', 'failure_reason', 'created_at', 'updated_at']

    STATUS_COLORS = {
        EmailLog.Status.SENT: '#28a745',
        EmailLog.Status.FAILED: '#dc3545',
        EmailLog.Status.PENDING: '#6c757d',
    }

    @admin.display(description='Status')
    def status_badge(self, obj):
        return format_html(
            '<span style="color: white; background: {}; padding: 2px 6px; border-radius: 3px;">{}</span>',
            self.STATUS_COLORS.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
