"""
Audio library URLs, mounted at /api/newsroom/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import AudioClipViewSet

router = PrefixRouter()
router.register(r'audio-library', AudioClipViewSet, basename='audio-clip')

urlpatterns = [
    path('', include(router.urls)),
]
