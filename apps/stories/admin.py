from django.contrib import admin
from django.utils.html import format_html

from .models import Comment, RevisionRequest, Story, StoryAudioClip

STAGE_COLORS = {
    'DRAFT': '#6b7280',
    'NEEDS_JOURNALIST_REVIEW': '#d97706',
    'NEEDS_SUB_EDITOR_APPROVAL': '#ea580c',
    'APPROVED': '#2563eb',
    'TRANSLATED': '#7c3aed',
    'PUBLISHED': '#16a34a',
}


class StoryAudioClipInline(admin.TabularInline):
    model = StoryAudioClip
    extra = 0
    raw_id_fields = ['audio_clip', 'added_by']


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ['type', 'author', 'content', 'is_resolved']
    raw_id_fields = ['author']


@admin.register(Story)
class StoryAdmin(admin.ModelAdmin):
    list_display = ['title', 'stage_badge', 'status', 'language', 'author', 'is_translation', 'published_at', 'updated_at']
    list_filter = ['stage', 'status', 'language', 'is_translation', 'flagged_for_bulletin']
    search_fields = ['title', 'slug', 'author__email']
    raw_id_fields = [
        'author',
        'assigned_to',
        'reviewer',
        'assigned_reviewer',
        'assigned_approver',
        'published_by',
        'original_story',
        'follow_up_completed_by',
        'flagged_for_bulletin_by',
    ]
    filter_horizontal = ['tags', 'classifications']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'
    inlines = [StoryAudioClipInline, CommentInline]

    @admin.display(description='Stage', ordering='stage')
    def stage_badge(self, obj):
        return format_html(
            '<span style="color: white; background: {}; padding: 2px 6px; border-radius: 3px;">{}</span>',
            STAGE_COLORS.get(obj.stage, '#6b7280'),
            obj.get_stage_display(),
        )


@admin.register(RevisionRequest)
class RevisionRequestAdmin(admin.ModelAdmin):
    list_display = ['story', 'requested_by', 'assigned_to', 'is_resolved', 'created_at']
    raw_id_fields = ['story', 'requested_by', 'assigned_to']

    @admin.display(boolean=True)
    def is_resolved(self, obj):
        return obj.is_resolved
