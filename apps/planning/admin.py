from django.contrib import admin

from .models import DiaryEntry, Task, TaskComment


class TaskCommentInline(admin.TabularInline):
    model = TaskComment
    extra = 0
    raw_id_fields = ['author']


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'status', 'priority', 'assigned_to', 'due_date', 'created_at']
    list_filter = ['status', 'priority', 'type']
    search_fields = ['title', 'description']
    raw_id_fields = ['assigned_to', 'created_by', 'story', 'blocked_by']
    inlines = [TaskCommentInline]


@admin.register(DiaryEntry)
class DiaryEntryAdmin(admin.ModelAdmin):
    list_display = ['title', 'date_time', 'assigned_to', 'is_completed']
    list_filter = ['is_completed']
    search_fields = ['title', 'notes']
    date_hierarchy = 'date_time'
    raw_id_fields = ['story', 'created_by', 'assigned_to', 'completed_by']
