from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.core.schedule import due_info

from .models import DiaryEntry, Task, TaskComment


class TaskStorySummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    stage = serializers.CharField()


class TaskSerializer(serializers.ModelSerializer):
    assigned_to = UserSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    story = TaskStorySummarySerializer(read_only=True)
    blocked_by_id = serializers.UUIDField(read_only=True)
    is_blocked = serializers.BooleanField(read_only=True)

    class Meta:
        model = Task
        fields = [
            'id', 'type', 'title', 'description', 'status', 'priority',
            'assigned_to', 'created_by', 'story',
            'source_language', 'target_language',
            'due_date', 'scheduled_for', 'completed_at',
            'blocked_by_id', 'is_blocked', 'metadata',
            'created_at', 'updated_at',
        ]


class TaskWriteSerializer(serializers.ModelSerializer):
    """
    Plain field validation for task create/update. Related ids are
    resolved in the view so unknown ids surface as 404s.
    """
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)
    story_id = serializers.UUIDField(required=False, allow_null=True)
    blocked_by_id = serializers.UUIDField(required=False, allow_null=True)

    class Meta:
        model = Task
        fields = [
            'type', 'title', 'description', 'status', 'priority',
            'assigned_to_id', 'story_id', 'blocked_by_id',
            'source_language', 'target_language',
            'due_date', 'scheduled_for', 'metadata',
        ]
        extra_kwargs = {'status': {'required': False}}


class TaskCommentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = TaskComment
        fields = ['id', 'content', 'author', 'created_at', 'updated_at']
        read_only_fields = ['id', 'author', 'created_at', 'updated_at']


class DiaryEntrySerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    completed_by = UserSummarySerializer(read_only=True)
    story = TaskStorySummarySerializer(read_only=True)

    class Meta:
        model = DiaryEntry
        fields = [
            'id', 'title', 'date_time', 'notes', 'story',
            'created_by', 'assigned_to',
            'is_completed', 'completed_at', 'completed_by',
            'created_at', 'updated_at',
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data.update(due_info(instance.date_time, completed=instance.is_completed, now=self.context.get('now')))
        return data


class DiaryEntryWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    date_time = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True)
    story_id = serializers.UUIDField(required=False, allow_null=True)
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)
