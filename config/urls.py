"""
URL configuration for Newskoop.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from apps.accounts.urls import auth_urlpatterns, staff_urlpatterns
from apps.announcements.urls import admin_urlpatterns as announcement_admin_urlpatterns
from apps.announcements.urls import radio_urlpatterns as announcement_radio_urlpatterns
from apps.core.urls import admin_urlpatterns, realtime_urlpatterns
from apps.planning.urls import diary_urlpatterns

newsroom_urlpatterns = [
    path('', include('apps.taxonomy.urls')),
    path('', include('apps.media.urls')),
    # Stories, translations and the dashboards
    path('', include('apps.stories.urls')),
    path('', include('apps.bulletins.urls')),
    path('', include('apps.shows.urls')),
    path('', include(diary_urlpatterns)),
    path('', include('apps.announcements.urls')),
]

radio_urlpatterns = [
    path('', include(announcement_radio_urlpatterns)),
    path('', include('apps.radio.urls')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include(auth_urlpatterns)),
    path('api/users/', include('apps.accounts.urls')),
    path('api/staff/', include(staff_urlpatterns)),
    path('api/stations/', include('apps.stations.urls')),
    path('api/newsroom/', include(newsroom_urlpatterns)),
    path('api/', include('apps.planning.urls')),
    path('api/radio/', include(radio_urlpatterns)),
    path('api/admin/', include(admin_urlpatterns + announcement_admin_urlpatterns)),
    path('api/realtime/', include(realtime_urlpatterns)),
    # Health, probes and metrics
    path('', include('apps.core.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)

admin.site.site_header = "Newskoop Administration"
admin.site.site_title = "Newskoop Admin Portal"
admin.site.index_title = "Welcome to Newskoop Administration"
