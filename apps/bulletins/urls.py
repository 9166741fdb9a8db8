"""
Bulletin API URLs, mounted at /api/newsroom/.

Schedules are registered first so ``bulletins/schedules/`` is not read as
a bulletin id.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import BulletinScheduleViewSet, BulletinViewSet

router = PrefixRouter()
router.register(r'bulletins/schedules', BulletinScheduleViewSet, basename='bulletin-schedule')
router.register(r'bulletins', BulletinViewSet, basename='bulletin')

urlpatterns = [
    path('', include(router.urls)),
]
