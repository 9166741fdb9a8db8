from django.contrib import admin

from .models import Announcement, AnnouncementDismissal


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ['title', 'priority', 'target_audience', 'is_active', 'expires_at', 'author', 'created_at']
    list_filter = ['priority', 'target_audience', 'is_active']
    search_fields = ['title', 'message']
    raw_id_fields = ['author']


@admin.register(AnnouncementDismissal)
class AnnouncementDismissalAdmin(admin.ModelAdmin):
    list_display = ['announcement', 'user', 'created_at']
    raw_id_fields = ['announcement', 'user']
