"""
Station serializers.
"""

from django.db import transaction
from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import MIN_PASSWORD_LENGTH, UserSummarySerializer
from apps.core.choices import UserType
from apps.core.exceptions import DuplicateError
from apps.taxonomy.models import Classification
from apps.taxonomy.serializers import ClassificationSummarySerializer

from .models import Station


class StationUserInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, trim_whitespace=False)
    mobile_number = serializers.CharField(max_length=30, required=False, allow_blank=True)


class StationUserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'mobile_number',
            'is_active',
            'is_primary_contact',
            'last_login_at',
            'created_at',
        ]
        read_only_fields = fields


class StationSerializer(serializers.ModelSerializer):
    primary_contacts = serializers.SerializerMethodField()
    user_count = serializers.IntegerField(read_only=True, required=False)
    classifications = ClassificationSummarySerializer(many=True, read_only=True)
    classification_ids = serializers.PrimaryKeyRelatedField(
        source='classifications',
        queryset=Classification.objects.all(),
        many=True,
        required=False,
        write_only=True,
    )

    class Meta:
        model = Station
        fields = [
            'id',
            'name',
            'description',
            'logo_url',
            'province',
            'contact_number',
            'contact_email',
            'website',
            'is_active',
            'has_content_access',
            'allowed_languages',
            'allowed_religions',
            'blocked_categories',
            'classifications',
            'classification_ids',
            'primary_contacts',
            'user_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['logo_url', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'validators': []},
        }

    def get_primary_contacts(self, obj):
        return UserSummarySerializer(obj.primary_contacts(), many=True).data

    def validate_name(self, value):
        existing = Station.objects.filter(name__iexact=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise DuplicateError("A station with this name already exists", field='name')
        return value

    def validate_blocked_categories(self, value):
        return [str(category_id) for category_id in value or []]


class StationCreateSerializer(StationSerializer):
    """Station plus its primary contact and optional extra users."""

    primary_contact = StationUserInputSerializer(write_only=True)
    additional_users = StationUserInputSerializer(many=True, write_only=True, required=False)

    class Meta(StationSerializer.Meta):
        fields = StationSerializer.Meta.fields + ['primary_contact', 'additional_users']

    def validate(self, attrs):
        emails = [attrs['primary_contact']['email'].lower()]
        emails += [u['email'].lower() for u in attrs.get('additional_users', [])]
        if len(set(emails)) != len(emails):
            raise DuplicateError("Each station user needs a different email", field='additional_users')
        taken = User.objects.filter(email__in=emails).values_list('email', flat=True)
        if taken:
            raise DuplicateError(
                "A user with this email already exists",
                field='email',
                details={'emails': sorted(taken)},
            )
        return attrs

    def create(self, validated_data):
        primary = validated_data.pop('primary_contact')
        additional = validated_data.pop('additional_users', [])
        classifications = validated_data.pop('classifications', [])

        with transaction.atomic():
            station = Station.objects.create(**validated_data)
            if classifications:
                station.classifications.set(classifications)
            create_station_user(station, primary, is_primary_contact=True)
            for user_data in additional:
                create_station_user(station, user_data)
        return station


def create_station_user(station, data, is_primary_contact=False):
    data = dict(data)
    password = data.pop('password')
    return User.objects.create_user(
        password=password,
        user_type=UserType.RADIO,
        radio_station=station,
        is_primary_contact=is_primary_contact,
        **data,
    )
