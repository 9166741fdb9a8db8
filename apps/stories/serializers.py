"""
Story serializers.

List and detail representations are read-only; writes go through
``StoryWriteSerializer`` and the functions in ``apps.stories.services``.
"""

from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.core import text
from apps.core.permissions import (
    can_edit_story_by_stage,
    get_next_stage_action,
    get_stage_lock_reason,
    get_user_role,
)
from apps.core.schedule import due_info
from apps.media.serializers import AudioClipSerializer
from apps.taxonomy.models import Category, Classification, Tag
from apps.taxonomy.serializers import ClassificationSummarySerializer

from .models import Comment, RevisionRequest, Story


class CategorySummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'color', 'level']


class TagSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Tag
        fields = ['id', 'name', 'slug', 'color']


class TranslationSummarySerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = Story
        fields = ['id', 'title', 'slug', 'language', 'stage', 'status', 'author', 'updated_at']


class StoryListSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    reviewer = UserSummarySerializer(read_only=True)
    assigned_reviewer = UserSummarySerializer(read_only=True)
    assigned_approver = UserSummarySerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)
    tags = TagSummarySerializer(many=True, read_only=True)
    classifications = ClassificationSummarySerializer(many=True, read_only=True)
    original_story_id = serializers.UUIDField(read_only=True)
    excerpt = serializers.SerializerMethodField()

    class Meta:
        model = Story
        fields = [
            'id',
            'title',
            'slug',
            'status',
            'stage',
            'language',
            'is_translation',
            'original_story_id',
            'excerpt',
            'author',
            'author_role',
            'assigned_to',
            'reviewer',
            'assigned_reviewer',
            'assigned_approver',
            'category',
            'tags',
            'classifications',
            'flagged_for_bulletin',
            'follow_up_date',
            'follow_up_completed',
            'scheduled_publish_at',
            'published_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_excerpt(self, obj):
        return text.excerpt(obj.content)


class CommentSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    resolved_by = UserSummarySerializer(read_only=True)
    parent_id = serializers.UUIDField(read_only=True)
    replies = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            'id',
            'content',
            'type',
            'category',
            'author',
            'parent_id',
            'is_resolved',
            'resolved_by',
            'resolved_at',
            'replies',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_replies(self, obj):
        if obj.parent_id:
            return []
        return CommentSerializer(obj.replies.select_related('author', 'resolved_by'), many=True).data


class StoryDetailSerializer(StoryListSerializer):
    """Full story for the editor screens, with requester-specific hints."""

    published_by = UserSummarySerializer(read_only=True)
    follow_up_completed_by = UserSummarySerializer(read_only=True)
    flagged_for_bulletin_by = UserSummarySerializer(read_only=True)
    audio_clips = serializers.SerializerMethodField()
    translations = TranslationSummarySerializer(many=True, read_only=True)
    comments = serializers.SerializerMethodField()
    next_action = serializers.SerializerMethodField()
    edit_lock_reason = serializers.SerializerMethodField()
    can_edit = serializers.SerializerMethodField()
    word_count = serializers.SerializerMethodField()

    class Meta(StoryListSerializer.Meta):
        fields = StoryListSerializer.Meta.fields + [
            'content',
            'word_count',
            'published_by',
            'follow_up_note',
            'follow_up_completed_at',
            'follow_up_completed_by',
            'flagged_for_bulletin_at',
            'flagged_for_bulletin_by',
            'author_checklist',
            'reviewer_checklist',
            'approver_checklist',
            'translation_checklist',
            'audio_clips',
            'translations',
            'comments',
            'next_action',
            'edit_lock_reason',
            'can_edit',
        ]
        read_only_fields = fields

    def _user(self):
        request = self.context.get('request')
        return getattr(request, 'user', None)

    def get_audio_clips(self, obj):
        clips = [link.audio_clip for link in obj.audio_links.select_related('audio_clip', 'audio_clip__uploaded_by')]
        return AudioClipSerializer(clips, many=True).data

    def get_comments(self, obj):
        top_level = obj.comments.filter(parent__isnull=True).select_related('author', 'resolved_by')
        return CommentSerializer(top_level, many=True).data

    def get_next_action(self, obj):
        user = self._user()
        if user is None:
            return None
        return get_next_stage_action(get_user_role(user), obj.stage, obj.author_role, obj.author_id == user.id)

    def get_word_count(self, obj):
        return text.word_count(obj.content)

    def get_edit_lock_reason(self, obj):
        return get_stage_lock_reason(obj.stage)

    def get_can_edit(self, obj):
        user = self._user()
        if user is None:
            return False
        return can_edit_story_by_stage(get_user_role(user), obj.stage, obj.author_id, user.id)


class StoryWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    content = serializers.CharField(required=False, allow_blank=True)
    language = serializers.ChoiceField(choices=Story._meta.get_field('language').choices, required=False)
    category_id = serializers.PrimaryKeyRelatedField(
        source='category',
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    tag_ids = serializers.PrimaryKeyRelatedField(
        source='tags',
        queryset=Tag.objects.all(),
        many=True,
        required=False,
    )
    classification_ids = serializers.PrimaryKeyRelatedField(
        source='classifications',
        queryset=Classification.objects.all(),
        many=True,
        required=False,
    )
    scheduled_publish_at = serializers.DateTimeField(required=False, allow_null=True)


class RevisionRequestSerializer(serializers.ModelSerializer):
    requested_by = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    is_resolved = serializers.BooleanField(read_only=True)

    class Meta:
        model = RevisionRequest
        fields = [
            'id',
            'story',
            'requested_by',
            'requested_by_role',
            'assigned_to',
            'reason',
            'is_resolved',
            'resolved_at',
            'created_at',
        ]
        read_only_fields = fields


class FollowUpSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = Story
        fields = [
            'id',
            'title',
            'stage',
            'status',
            'author',
            'follow_up_date',
            'follow_up_note',
            'follow_up_completed',
            'follow_up_completed_at',
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data.update(due_info(instance.follow_up_date, completed=instance.follow_up_completed))
        return data
