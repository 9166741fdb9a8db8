from django.contrib import admin
from django.utils.html import format_html

from apps.accounts.models import User

from .models import Station


class StationUserInline(admin.TabularInline):
    model = User
    fields = ['email', 'first_name', 'last_name', 'is_primary_contact', 'is_active']
    readonly_fields = ['email']
    extra = 0
    show_change_link = True


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ['name', 'province', 'contact_email', 'access_badge', 'is_active', 'created_at']
    list_filter = ['province', 'is_active', 'has_content_access']
    search_fields = ['name', 'contact_email']
    filter_horizontal = ['classifications']
    inlines = [StationUserInline]

    fieldsets = (
        (None, {'fields': ('name', 'description', 'logo_url', 'province')}),
        ('Contact', {'fields': ('contact_number', 'contact_email', 'website')}),
        ('Access', {'fields': ('is_active', 'has_content_access')}),
        ('Content filters', {'fields': ('allowed_languages', 'allowed_religions', 'blocked_categories', 'classifications')}),
    )

    @admin.display(description='Content')
    def access_badge(self, obj):
        color = '#28a745' if obj.can_access_content else '#dc3545'
        label = 'Enabled' if obj.can_access_content else 'Disabled'
        return format_html(
            '<span style="background-color: {}; color: white; padding: 2px 8px; border-radius: 3px;">{}</span>',
            color,
            label,
        )
