"""
Radio station URLs, mounted at /api/radio/.
"""

from django.urls import include, path

from config.routers import PrefixRouter

from .views import (
    BulletinSchedulesView,
    CategoriesView,
    LocalityTagsView,
    RadioBulletinViewSet,
    RadioProfilePictureView,
    RadioProfileView,
    RadioShowViewSet,
    RadioStoryViewSet,
    RecentStoriesView,
    StationLogoView,
    StationView,
)

router = PrefixRouter()
router.register(r'stories', RadioStoryViewSet, basename='radio-story')
router.register(r'bulletins', RadioBulletinViewSet, basename='radio-bulletin')
router.register(r'shows', RadioShowViewSet, basename='radio-show')

urlpatterns = [
    path('recent-stories/', RecentStoriesView.as_view(), name='radio-recent-stories'),
    path('categories/', CategoriesView.as_view(), name='radio-categories'),
    path('locality-tags/', LocalityTagsView.as_view(), name='radio-locality-tags'),
    path('bulletin-schedules/', BulletinSchedulesView.as_view(), name='radio-bulletin-schedules'),
    path('station/', StationView.as_view(), name='radio-station'),
    path('station/logo/', StationLogoView.as_view(), name='radio-station-logo'),
    path('profile/', RadioProfileView.as_view(), name='radio-profile'),
    path('profile/picture/', RadioProfilePictureView.as_view(), name='radio-profile-picture'),
    path('', include(router.urls)),
]
