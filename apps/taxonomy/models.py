"""
Taxonomy models.

Categories form a tree at most three levels deep. Classifications carry
the language, religion and locality labels that radio stations filter on.
"""

from django.db import models

from apps.core.choices import ClassificationType
from apps.core.models import BaseModel
from apps.core.slugs import slug_for

MAX_CATEGORY_LEVEL = 3


class Category(BaseModel):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=20, blank=True)
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children',
    )
    level = models.PositiveSmallIntegerField(default=1)
    is_parent = models.BooleanField(default=False)
    is_editable = models.BooleanField(
        default=True,
        help_text='System categories (e.g. News Bulletins) cannot be changed',
    )

    class Meta:
        db_table = 'categories'
        ordering = ['level', 'name']
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.level = self.parent.level + 1 if self.parent_id else 1
        if not self.slug:
            self.slug = slug_for(Category, self.name, exclude_id=self.pk)
        super().save(*args, **kwargs)
        if self.parent_id and not self.parent.is_parent:
            Category.objects.filter(pk=self.parent_id).update(is_parent=True)

    def descendant_ids(self):
        """Ids of this category and everything below it."""
        ids = [self.id]
        frontier = [self.id]
        while frontier:
            frontier = list(Category.objects.filter(parent_id__in=frontier).values_list('id', flat=True))
            ids.extend(frontier)
        return ids


class Tag(BaseModel):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True)
    color = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = 'tags'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slug_for(Tag, self.name, exclude_id=self.pk)
        super().save(*args, **kwargs)


class Classification(BaseModel):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True)
    name_afrikaans = models.CharField(max_length=100, blank=True)
    description_afrikaans = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=ClassificationType.choices, db_index=True)
    color = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        db_table = 'classifications'
        ordering = ['sort_order', 'name']
        constraints = [
            models.UniqueConstraint(fields=['name', 'type'], name='unique_classification_name_type'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_type_display()})"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slug_for(
                Classification, self.name, exclude_id=self.pk, suffix=str(self.type).lower()
            )
        super().save(*args, **kwargs)
