"""
Serializers for the audit and email trails.
"""

from rest_framework import serializers

from .models import AuditLog, EmailLog


class AuditLogSerializer(serializers.ModelSerializer):
    """Audit entry with a compact view of the acting user."""

    user = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'user',
            'action',
            'entity_type',
            'entity_id',
            'metadata',
            'ip_address',
            'user_agent',
            'created_at',
        ]
        read_only_fields = fields

    def get_user(self, obj):
        if obj.user_id is None:
            return None
        return {
            'id': str(obj.user_id),
            'email': obj.user.email,
            'name': obj.user.get_full_name(),
        }


class EmailLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = EmailLog
        fields = [
            'id',
            'to',
            'from_email',
            'subject',
            'type',
            'status',
            'user',
            'metadata',
            'sent_at',
            'failed_at',
            'failure_reason',
            'environment',
            'created_at',
        ]
        read_only_fields = fields
