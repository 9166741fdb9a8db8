"""
Show API URLs, mounted at /api/newsroom/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import ShowViewSet

router = PrefixRouter()
router.register(r'shows', ShowViewSet, basename='show')

urlpatterns = [
    path('', include(router.urls)),
]
