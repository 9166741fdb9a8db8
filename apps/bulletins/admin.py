from django.contrib import admin

from .models import Bulletin, BulletinSchedule, BulletinStory


class BulletinStoryInline(admin.TabularInline):
    model = BulletinStory
    extra = 0
    raw_id_fields = ['story']


@admin.register(Bulletin)
class BulletinAdmin(admin.ModelAdmin):
    list_display = ['title', 'language', 'status', 'schedule', 'author', 'published_at']
    list_filter = ['status', 'language']
    search_fields = ['title', 'slug']
    raw_id_fields = ['author', 'reviewer', 'published_by']
    inlines = [BulletinStoryInline]


@admin.register(BulletinSchedule)
class BulletinScheduleAdmin(admin.ModelAdmin):
    list_display = ['title', 'time', 'language', 'schedule_type', 'is_active']
    list_filter = ['schedule_type', 'language', 'is_active']
    list_editable = ['is_active']
