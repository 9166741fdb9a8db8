"""
Announcement URLs for the admin, newsroom and radio mounts.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import AdminAnnouncementViewSet, NewsroomAnnouncementViewSet, RadioAnnouncementViewSet

admin_router = PrefixRouter()
admin_router.register(r'announcements', AdminAnnouncementViewSet, basename='admin-announcement')

newsroom_router = PrefixRouter()
newsroom_router.register(r'announcements', NewsroomAnnouncementViewSet, basename='newsroom-announcement')

radio_router = PrefixRouter()
radio_router.register(r'announcements', RadioAnnouncementViewSet, basename='radio-announcement')

# Mounted at /api/admin/
admin_urlpatterns = [
    path('', include(admin_router.urls)),
]

# Mounted at /api/newsroom/
urlpatterns = [
    path('', include(newsroom_router.urls)),
]

# Mounted at /api/radio/
radio_urlpatterns = [
    path('', include(radio_router.urls)),
]
