"""
Station URLs, mounted at /api/stations/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import StationViewSet

router = PrefixRouter()
router.register(r'', StationViewSet, basename='station')

urlpatterns = [
    path('', include(router.urls)),
]
