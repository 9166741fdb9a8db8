from django.contrib import admin

from .models import Episode, Show


class EpisodeInline(admin.TabularInline):
    model = Episode
    extra = 0
    fields = ['episode_number', 'title', 'status', 'scheduled_publish_at', 'published_at']
    readonly_fields = ['published_at']
    show_change_link = True


@admin.register(Show)
class ShowAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'created_by', 'is_active', 'is_published']
    list_filter = ['is_active', 'is_published']
    search_fields = ['title', 'slug']
    filter_horizontal = ['tags', 'classifications']
    raw_id_fields = ['created_by']
    inlines = [EpisodeInline]


@admin.register(Episode)
class EpisodeAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'status', 'scheduled_publish_at', 'published_at']
    list_filter = ['status']
    search_fields = ['title', 'show__title']
    raw_id_fields = ['show', 'published_by', 'created_by', 'audio_clips']
