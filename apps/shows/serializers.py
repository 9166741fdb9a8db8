from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.media.serializers import AudioClipSerializer
from apps.stories.serializers import CategorySummarySerializer, TagSummarySerializer
from apps.taxonomy.models import Category, Classification, Tag
from apps.taxonomy.serializers import ClassificationSummarySerializer

from .models import Episode, Show


class ShowSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)
    tags = TagSummarySerializer(many=True, read_only=True)
    classifications = ClassificationSummarySerializer(many=True, read_only=True)
    episode_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Show
        fields = [
            'id',
            'title',
            'slug',
            'description',
            'cover_image',
            'category',
            'tags',
            'classifications',
            'created_by',
            'is_active',
            'is_published',
            'episode_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ShowWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    category_id = serializers.PrimaryKeyRelatedField(
        source='category',
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    tag_ids = serializers.PrimaryKeyRelatedField(source='tags', queryset=Tag.objects.all(), many=True, required=False)
    classification_ids = serializers.PrimaryKeyRelatedField(
        source='classifications',
        queryset=Classification.objects.all(),
        many=True,
        required=False,
    )
    is_active = serializers.BooleanField(required=False)
    is_published = serializers.BooleanField(required=False)


class EpisodeSerializer(serializers.ModelSerializer):
    show_id = serializers.UUIDField(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    published_by = UserSummarySerializer(read_only=True)
    audio_clips = AudioClipSerializer(many=True, read_only=True)

    class Meta:
        model = Episode
        fields = [
            'id',
            'show_id',
            'title',
            'slug',
            'description',
            'episode_number',
            'content',
            'cover_image',
            'status',
            'duration',
            'scheduled_publish_at',
            'published_at',
            'published_by',
            'created_by',
            'audio_clips',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class EpisodeWriteSerializer(serializers.ModelSerializer):

    class Meta:
        model = Episode
        fields = ['title', 'description', 'content', 'duration', 'cover_image']
