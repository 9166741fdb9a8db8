"""
Audio library serializers.
"""

from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer

from .models import AudioClip


class AudioClipSerializer(serializers.ModelSerializer):
    uploaded_by = UserSummarySerializer(read_only=True)
    usage_count = serializers.SerializerMethodField()

    class Meta:
        model = AudioClip
        fields = [
            'id',
            'title',
            'description',
            'tags',
            'filename',
            'original_name',
            'url',
            'duration',
            'file_size',
            'mime_type',
            'uploaded_by',
            'usage_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'filename',
            'original_name',
            'url',
            'file_size',
            'mime_type',
            'uploaded_by',
            'created_at',
            'updated_at',
        ]

    def get_usage_count(self, obj):
        annotated = getattr(obj, 'link_count', None)
        return annotated if annotated is not None else obj.usage_count

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError("tags must be a list of strings")
        return [tag.strip() for tag in value if tag.strip()]


class AudioClipUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    tags = serializers.CharField(required=False, allow_blank=True, help_text='Comma separated')
    duration = serializers.IntegerField(required=False, min_value=0)

    def validate_tags(self, value):
        return [tag.strip() for tag in value.split(',') if tag.strip()]
