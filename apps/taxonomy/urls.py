"""
Taxonomy API URLs, mounted at /api/newsroom/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import CategoryViewSet, ClassificationViewSet, TagViewSet

router = PrefixRouter()
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'tags', TagViewSet, basename='tag')
router.register(r'classifications', ClassificationViewSet, basename='classification')

urlpatterns = [
    path('', include(router.urls)),
]
