"""
Task URLs are mounted at /api/; the diary lives under /api/newsroom/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import DiaryViewSet, TaskViewSet

router = PrefixRouter()
router.register(r'tasks', TaskViewSet, basename='task')

diary_router = PrefixRouter()
diary_router.register(r'diary', DiaryViewSet, basename='diary')

urlpatterns = [
    path('', include(router.urls)),
]

diary_urlpatterns = [
    path('', include(diary_router.urls)),
]
