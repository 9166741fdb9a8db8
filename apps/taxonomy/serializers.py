"""
Taxonomy serializers.
"""

from rest_framework import serializers

from apps.core.exceptions import ErrorCode, ValidationError

from .models import MAX_CATEGORY_LEVEL, Category, Classification, Tag


class CategorySerializer(serializers.ModelSerializer):
    parent_id = serializers.PrimaryKeyRelatedField(
        source='parent',
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    story_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = [
            'id',
            'name',
            'slug',
            'description',
            'color',
            'parent_id',
            'level',
            'is_parent',
            'is_editable',
            'story_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['slug', 'level', 'is_parent', 'is_editable', 'created_at', 'updated_at']

    def validate_parent_id(self, parent):
        if parent is None:
            return parent
        if parent.level >= MAX_CATEGORY_LEVEL:
            raise ValidationError(
                f"Categories can only be nested {MAX_CATEGORY_LEVEL} levels deep",
                code=ErrorCode.INVALID_VALUE,
                field='parent_id',
            )
        if self.instance is not None and parent.pk in self.instance.descendant_ids():
            raise ValidationError(
                "A category cannot be moved under itself",
                code=ErrorCode.INVALID_VALUE,
                field='parent_id',
            )
        return parent


class CategoryTreeSerializer(CategorySerializer):
    """Category with its children nested to the full depth."""

    children = serializers.SerializerMethodField()

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ['children']

    def get_children(self, obj):
        children = self.context.get('children_by_parent', {}).get(obj.id, [])
        return CategoryTreeSerializer(children, many=True, context=self.context).data


class TagSerializer(serializers.ModelSerializer):
    usage_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Tag
        fields = ['id', 'name', 'slug', 'color', 'usage_count', 'created_at']
        read_only_fields = ['slug', 'created_at']


class ClassificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Classification
        fields = [
            'id',
            'name',
            'slug',
            'name_afrikaans',
            'description_afrikaans',
            'type',
            'color',
            'is_active',
            'sort_order',
            'created_at',
        ]
        read_only_fields = ['slug', 'created_at']

    def validate(self, attrs):
        name = attrs.get('name', getattr(self.instance, 'name', None))
        type_ = attrs.get('type', getattr(self.instance, 'type', None))
        duplicates = Classification.objects.filter(name__iexact=name, type=type_)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise ValidationError(
                f"A {type_} classification named '{name}' already exists",
                code=ErrorCode.DUPLICATE,
                field='name',
            )
        return attrs


class ClassificationSummarySerializer(serializers.ModelSerializer):
    """Compact form embedded in stories, shows and stations."""

    class Meta:
        model = Classification
        fields = ['id', 'name', 'slug', 'type', 'color']
