from django.contrib import admin
from django.template.defaultfilters import filesizeformat

from .models import AudioClip


@admin.register(AudioClip)
class AudioClipAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'mime_type', 'size_display', 'duration', 'uploaded_by', 'created_at']
    list_filter = ['mime_type']
    search_fields = ['title', 'original_name', 'description']
    readonly_fields = ['filename', 'url', 'file_size', 'mime_type', 'uploaded_by', 'created_at']

    @admin.display(description='Size', ordering='file_size')
    def size_display(self, obj):
        return filesizeformat(obj.file_size)
