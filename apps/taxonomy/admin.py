from django.contrib import admin

from .models import Category, Classification, Tag


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'level', 'parent', 'is_parent', 'is_editable']
    list_filter = ['level', 'is_editable']
    search_fields = ['name', 'slug']
    readonly_fields = ['slug', 'level', 'is_parent', 'created_at', 'updated_at']
    ordering = ['level', 'name']


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'color', 'created_at']
    search_fields = ['name']
    readonly_fields = ['slug']


@admin.register(Classification)
class ClassificationAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'name_afrikaans', 'is_active', 'sort_order']
    list_filter = ['type', 'is_active']
    list_editable = ['is_active', 'sort_order']
    search_fields = ['name', 'name_afrikaans']
    readonly_fields = ['slug']
