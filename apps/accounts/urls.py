"""
Account URLs.

``urlpatterns`` is mounted at /api/users/, ``auth_urlpatterns`` at
/api/auth/ and ``staff_urlpatterns`` at /api/staff/.
"""

from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from config.routers import PrefixRouter

from .views import (
    LoginView,
    LogoutView,
    MeView,
    PasswordResetView,
    ProfilePictureView,
    SetPasswordView,
    StaffProfileView,
    UserViewSet,
)

router = PrefixRouter()
router.register(r'', UserViewSet, basename='user')

urlpatterns = [
    path('', include(router.urls)),
]

auth_urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('me/', MeView.as_view(), name='me'),
    path('reset-password/', PasswordResetView.as_view(), name='reset-password'),
    path('set-password/', SetPasswordView.as_view(), name='set-password'),
]

staff_urlpatterns = [
    path('profile/', StaffProfileView.as_view(), name='staff-profile'),
    path('profile/picture/', ProfilePictureView.as_view(), name='staff-profile-picture'),
]
