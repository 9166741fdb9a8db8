from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import BaseUserCreationForm, UserChangeForm as BaseUserChangeForm
from django.utils.html import format_html

from .models import User


class UserCreationForm(BaseUserCreationForm):

    class Meta:
        model = User
        fields = ('email', 'first_name', 'last_name', 'user_type', 'staff_role', 'radio_station')


class UserChangeForm(BaseUserChangeForm):

    class Meta:
        model = User
        fields = '__all__'


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    form = UserChangeForm
    add_form = UserCreationForm
    list_display = ['email', 'full_name', 'user_type', 'role_badge', 'radio_station', 'is_active', 'last_login_at']
    list_filter = ['user_type', 'staff_role', 'is_active', 'translation_language']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['email']
    readonly_fields = ['last_login_at', 'created_at', 'updated_at', 'reset_token_expires_at']
    filter_horizontal = []

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal', {'fields': ('first_name', 'last_name', 'mobile_number', 'profile_picture_url')}),
        ('Access', {'fields': ('user_type', 'staff_role', 'radio_station', 'is_primary_contact', 'is_active', 'must_change_password')}),
        ('Languages', {'fields': ('translation_language', 'default_language_preference')}),
        ('Activity', {'fields': ('last_login_at', 'reset_token_expires_at', 'created_at', 'updated_at'), 'classes': ('collapse',)}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'user_type', 'staff_role', 'radio_station', 'password1', 'password2'),
        }),
    )

    @admin.display(description='Name')
    def full_name(self, obj):
        return obj.get_full_name()

    @admin.display(description='Role')
    def role_badge(self, obj):
        if not obj.staff_role:
            return '-'
        colors = {
            'SUPERADMIN': '#6f42c1',
            'ADMIN': '#dc3545',
            'EDITOR': '#fd7e14',
            'SUB_EDITOR': '#17a2b8',
            'JOURNALIST': '#28a745',
            'INTERN': '#6c757d',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 2px 8px; border-radius: 3px;">{}</span>',
            colors.get(obj.staff_role, '#6c757d'),
            obj.get_staff_role_display(),
        )
