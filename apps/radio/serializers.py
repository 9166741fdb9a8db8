"""
Station-facing representations. Editorial fields (reviewers, checklists,
follow-ups) stay in the newsroom serializers.
"""

from rest_framework import serializers

from apps.accounts.models import User
from apps.core import text
from apps.media.serializers import AudioClipSerializer
from apps.stations.models import Station
from apps.stories.models import Story
from apps.stories.serializers import CategorySummarySerializer, TagSummarySerializer
from apps.taxonomy.models import Category
from apps.taxonomy.serializers import ClassificationSummarySerializer


class StationSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Station
        fields = ['id', 'name', 'allowed_languages', 'allowed_religions']


class RadioStorySerializer(serializers.ModelSerializer):
    excerpt = serializers.SerializerMethodField()
    author_name = serializers.CharField(source='author.get_full_name', read_only=True)
    category = CategorySummarySerializer(read_only=True)
    tags = TagSummarySerializer(many=True, read_only=True)
    classifications = ClassificationSummarySerializer(many=True, read_only=True)
    audio_clips = AudioClipSerializer(many=True, read_only=True)

    class Meta:
        model = Story
        fields = [
            'id',
            'title',
            'slug',
            'content',
            'excerpt',
            'language',
            'is_translation',
            'author_name',
            'category',
            'tags',
            'classifications',
            'audio_clips',
            'published_at',
        ]
        read_only_fields = fields

    def get_excerpt(self, obj):
        return text.excerpt(obj.content)


class RadioTranslationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Story
        fields = ['id', 'title', 'slug', 'language', 'is_translation']
        read_only_fields = fields


class RadioCategorySerializer(serializers.ModelSerializer):
    """A category with its visible story count and unblocked children."""

    story_count = serializers.SerializerMethodField()
    children = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'color', 'level', 'story_count', 'children']

    def get_story_count(self, obj):
        return self.context.get('counts', {}).get(obj.id, 0)

    def get_children(self, obj):
        children = self.context.get('by_parent', {}).get(obj.id, [])
        return RadioCategorySerializer(children, many=True, context=self.context).data


class RadioStationSerializer(serializers.ModelSerializer):
    classifications = ClassificationSummarySerializer(many=True, read_only=True)

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
            'allowed_languages',
            'allowed_religions',
            'classifications',
        ]
        read_only_fields = fields


class StationContactSerializer(serializers.ModelSerializer):
    """Contact details a station's primary contact may change."""

    class Meta:
        model = Station
        fields = ['description', 'contact_number', 'contact_email', 'website']


class RadioProfileSerializer(serializers.ModelSerializer):
    station = StationSummarySerializer(source='radio_station', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'mobile_number',
            'default_language_preference',
            'profile_picture_url',
            'is_primary_contact',
            'station',
        ]
        read_only_fields = ['id', 'email', 'profile_picture_url', 'is_primary_contact', 'station']
