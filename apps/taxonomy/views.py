"""
Taxonomy API views.

GET    /api/newsroom/categories/          - Category tree (?flat=true for a list)
POST   /api/newsroom/categories/          - Create category
PATCH  /api/newsroom/categories/{id}/     - Update category
DELETE /api/newsroom/categories/{id}/     - Delete category
GET    /api/newsroom/tags/                - Tags with usage counts
GET    /api/newsroom/classifications/     - Language, religion and locality labels
"""

import logging
from collections import defaultdict

from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.core.exceptions import ErrorCode, ValidationError
from apps.core.pagination import LargePagination
from apps.core.params import parse_bool
from apps.core.permissions import (
    TablePermission,
    has_category_permission,
    has_classification_permission,
    has_tag_permission,
)

from .models import Category, Classification, Tag
from .serializers import (
    CategorySerializer,
    CategoryTreeSerializer,
    ClassificationSerializer,
    TagSerializer,
)

logger = logging.getLogger(__name__)


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Hierarchical story categories, at most three levels deep.

    System categories (``is_editable=False``) cannot be changed or removed.
    """

    permission_classes = [TablePermission]
    permission_table = staticmethod(has_category_permission)
    serializer_class = CategorySerializer
    pagination_class = None
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Category.objects.annotate(story_count=Count('stories', distinct=True))
        params = self.request.query_params
        level = params.get('level')
        if level:
            queryset = queryset.filter(level=level)
        parent_id = params.get('parent_id')
        if parent_id:
            queryset = queryset.filter(parent_id=parent_id)
        return queryset.order_by('level', 'name')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        params = request.query_params
        flat = parse_bool(params.get('flat'), default=False)

        if flat or params.get('level') or params.get('parent_id'):
            return Response({'categories': CategorySerializer(queryset, many=True).data})

        children_by_parent = defaultdict(list)
        roots = []
        for category in queryset:
            if category.parent_id:
                children_by_parent[category.parent_id].append(category)
            else:
                roots.append(category)
        serializer = CategoryTreeSerializer(
            roots,
            many=True,
            context={'children_by_parent': children_by_parent},
        )
        return Response({'categories': serializer.data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info("Category created: %s (level %s)", category.name, category.level)
        return Response({'category': CategorySerializer(category).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        category = self.get_object()
        if not category.is_editable:
            raise ValidationError("This category cannot be edited", code=ErrorCode.INVALID_VALUE)
        serializer = self.get_serializer(category, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        return Response({'category': CategorySerializer(category).data})

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if not category.is_editable:
            raise ValidationError("This category cannot be deleted", code=ErrorCode.INVALID_VALUE)
        if category.children.exists():
            raise ValidationError(
                "Cannot delete a category that has subcategories",
                code=ErrorCode.CONFLICT,
            )
        if category.stories.exists():
            raise ValidationError(
                "Cannot delete a category that has stories",
                code=ErrorCode.CONFLICT,
            )
        parent_id = category.parent_id
        category.delete()
        if parent_id and not Category.objects.filter(parent_id=parent_id).exists():
            Category.objects.filter(pk=parent_id).update(is_parent=False)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TagViewSet(viewsets.ModelViewSet):
    """Free-form story tags."""

    permission_classes = [TablePermission]
    permission_table = staticmethod(has_tag_permission)
    serializer_class = TagSerializer
    pagination_class = LargePagination
    results_key = 'tags'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Tag.objects.annotate(usage_count=Count('stories', distinct=True))
        query = self.request.query_params.get('query')
        if query:
            queryset = queryset.filter(Q(name__icontains=query) | Q(slug__icontains=query))
        return queryset.order_by('name')

    def perform_create(self, serializer):
        name = serializer.validated_data['name']
        if Tag.objects.filter(name__iexact=name).exists():
            raise ValidationError(f"Tag '{name}' already exists", code=ErrorCode.DUPLICATE, field='name')
        serializer.save()


class ClassificationViewSet(viewsets.ModelViewSet):
    """
    Language, religion and locality labels.

    Classifications still attached to stories or stations are deactivated
    rather than deleted.
    """

    permission_classes = [TablePermission]
    permission_table = staticmethod(has_classification_permission)
    serializer_class = ClassificationSerializer
    pagination_class = None
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Classification.objects.all()
        params = self.request.query_params
        type_ = params.get('type')
        if type_:
            queryset = queryset.filter(type=type_.upper())
        is_active = parse_bool(params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset.order_by('sort_order', 'name')

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({'classifications': serializer.data})

    def destroy(self, request, *args, **kwargs):
        classification = self.get_object()
        story_count = classification.stories.count()
        station_count = classification.stations.count()
        if story_count or station_count:
            raise ValidationError(
                "Classification is in use. Deactivate it instead.",
                code=ErrorCode.CONFLICT,
                details={'stories': story_count, 'stations': station_count},
            )
        classification.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
