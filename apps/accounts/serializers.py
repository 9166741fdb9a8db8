"""
Account serializers.
"""

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.core.choices import StaffRole, UserType
from apps.core.exceptions import DuplicateError, ErrorCode, ValidationError
from apps.stations.models import Station

from .models import User

MIN_PASSWORD_LENGTH = 8


class StationSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Station
        fields = ['id', 'name', 'province', 'logo_url']


class UserSerializer(serializers.ModelSerializer):
    """Full user representation returned by auth and admin endpoints."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)
    radio_station = StationSummarySerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'mobile_number',
            'user_type',
            'staff_role',
            'radio_station',
            'is_active',
            'is_primary_contact',
            'must_change_password',
            'translation_language',
            'default_language_preference',
            'profile_picture_url',
            'last_login_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact form embedded in stories, tasks and comments."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'staff_role', 'profile_picture_url']
        read_only_fields = fields


class StaffMemberSerializer(serializers.ModelSerializer):
    """Assignee picker entries."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'staff_role', 'translation_language']
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    """Create and update users from the admin screens."""

    radio_station_id = serializers.PrimaryKeyRelatedField(
        source='radio_station',
        queryset=Station.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = User
        fields = [
            'email',
            'first_name',
            'last_name',
            'mobile_number',
            'user_type',
            'staff_role',
            'radio_station_id',
            'is_active',
            'is_primary_contact',
            'translation_language',
            'default_language_preference',
        ]
        extra_kwargs = {
            # Uniqueness is checked below so the error carries our envelope code
            'email': {'validators': []},
        }

    def validate_email(self, value):
        value = value.lower()
        existing = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise DuplicateError("A user with this email already exists", field='email')
        return value

    def validate(self, attrs):
        user_type = attrs.get('user_type', getattr(self.instance, 'user_type', None))
        staff_role = attrs.get('staff_role', getattr(self.instance, 'staff_role', None))
        station = attrs.get('radio_station', getattr(self.instance, 'radio_station', None))

        if user_type == UserType.STAFF and not staff_role:
            raise ValidationError("Staff users must have a staff role", code=ErrorCode.MISSING_FIELD, field='staff_role')
        if user_type == UserType.RADIO and station is None:
            raise ValidationError(
                "Radio users must belong to a station",
                code=ErrorCode.MISSING_FIELD,
                field='radio_station_id',
            )
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    """Fields users may change about themselves."""

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'mobile_number', 'default_language_preference']


class StaffProfileSerializer(ProfileSerializer):

    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + ['translation_language']


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    token = serializers.CharField()
    new_password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)


class SetPasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    new_password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)

    def validate_new_password(self, value):
        validate_password(value, user=self.context['request'].user)
        return value


def superadmin_guard(actor, target=None, new_role=None):
    """
    Return an error message when an ADMIN reaches for SUPERADMIN powers,
    otherwise None.
    """
    if actor.staff_role == StaffRole.SUPERADMIN:
        return None
    if target is not None and target.staff_role == StaffRole.SUPERADMIN:
        return "Only a super admin can modify a super admin"
    if new_role == StaffRole.SUPERADMIN:
        return "Only a super admin can grant the super admin role"
    return None
