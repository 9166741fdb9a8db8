from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer

from .models import Announcement


class AnnouncementSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = Announcement
        fields = [
            'id',
            'title',
            'message',
            'priority',
            'target_audience',
            'is_active',
            'expires_at',
            'author',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'author', 'created_at', 'updated_at']


class AdminAnnouncementSerializer(AnnouncementSerializer):
    dismissal_count = serializers.IntegerField(read_only=True, default=0)

    class Meta(AnnouncementSerializer.Meta):
        fields = AnnouncementSerializer.Meta.fields + ['dismissal_count']
