"""
Story API URLs, mounted at /api/newsroom/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import EditorialMetricsView, MyStoriesView, StoryViewSet, TranslationViewSet

router = PrefixRouter()
router.register(r'stories', StoryViewSet, basename='story')
router.register(r'translations', TranslationViewSet, basename='translation')

urlpatterns = [
    path('dashboard/my-stories/', MyStoriesView.as_view(), name='dashboard-my-stories'),
    path('dashboard/editorial-metrics/', EditorialMetricsView.as_view(), name='dashboard-editorial-metrics'),
    path('', include(router.urls)),
]
