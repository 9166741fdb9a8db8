import re

from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.core.exceptions import DuplicateError, ErrorCode, ValidationError
from apps.stories.serializers import CategorySummarySerializer

from .models import Bulletin, BulletinSchedule, BulletinStatus, BulletinStory

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class BulletinScheduleSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    bulletin_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = BulletinSchedule
        fields = [
            'id',
            'title',
            'time',
            'language',
            'schedule_type',
            'is_active',
            'created_by',
            'bulletin_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']
        # Slot uniqueness is checked in validate() so it maps to DUPLICATE
        validators = []

    def validate_time(self, value):
        if not TIME_PATTERN.match(value or ''):
            raise ValidationError("time must be HH:MM (24-hour)", code=ErrorCode.INVALID_VALUE, field='time')
        return value

    def validate(self, attrs):
        instance = self.instance
        slot = {
            key: attrs.get(key, getattr(instance, key, None))
            for key in ('time', 'language', 'schedule_type')
        }
        clash = BulletinSchedule.objects.filter(**slot)
        if instance is not None:
            clash = clash.exclude(pk=instance.pk)
        if clash.exists():
            raise DuplicateError("A bulletin schedule already exists for this time, language and type")
        return attrs


class BulletinScheduleSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = BulletinSchedule
        fields = ['id', 'title', 'time', 'language', 'schedule_type']


class BulletinStoryEntrySerializer(serializers.ModelSerializer):
    story_id = serializers.UUIDField(read_only=True)
    title = serializers.CharField(source='story.title', read_only=True)
    language = serializers.CharField(source='story.language', read_only=True)
    content = serializers.CharField(source='story.content', read_only=True)

    class Meta:
        model = BulletinStory
        fields = ['story_id', 'order', 'title', 'language', 'content']


class BulletinSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    reviewer = UserSummarySerializer(read_only=True)
    published_by = UserSummarySerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)
    schedule = BulletinScheduleSummarySerializer(read_only=True)
    story_count = serializers.SerializerMethodField()

    class Meta:
        model = Bulletin
        fields = [
            'id',
            'title',
            'slug',
            'intro',
            'outro',
            'language',
            'status',
            'schedule',
            'scheduled_for',
            'author',
            'reviewer',
            'published_by',
            'published_at',
            'review_checklist',
            'category',
            'story_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_story_count(self, obj):
        count = getattr(obj, 'num_stories', None)
        return count if count is not None else obj.story_links.count()


class BulletinDetailSerializer(BulletinSerializer):
    stories = BulletinStoryEntrySerializer(source='ordered_story_links', many=True, read_only=True)

    class Meta(BulletinSerializer.Meta):
        fields = BulletinSerializer.Meta.fields + ['stories']
        read_only_fields = fields


class BulletinStoryItemSerializer(serializers.Serializer):
    story_id = serializers.UUIDField()
    order = serializers.IntegerField(min_value=0, required=False)


class BulletinWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    intro = serializers.CharField()
    outro = serializers.CharField()
    language = serializers.ChoiceField(choices=Bulletin._meta.get_field('language').choices)
    status = serializers.ChoiceField(choices=BulletinStatus.choices, required=False)
    schedule_id = serializers.PrimaryKeyRelatedField(
        source='schedule',
        queryset=BulletinSchedule.objects.all(),
        required=False,
        allow_null=True,
    )
    scheduled_for = serializers.DateTimeField(required=False, allow_null=True)
    review_checklist = serializers.JSONField(required=False, allow_null=True)
    stories = BulletinStoryItemSerializer(many=True, required=False)
