"""
Authentication, user administration and staff profile views.

POST   /api/auth/login/                 - Session login
POST   /api/auth/logout/                - Session logout
POST   /api/auth/token/                 - JWT pair for API clients
POST   /api/auth/token/refresh/         - Refresh a JWT access token
GET    /api/auth/me/                    - Current user
PATCH  /api/auth/me/                    - Update own names, phone, language
POST   /api/auth/reset-password/        - Request a reset email
PATCH  /api/auth/reset-password/        - Set a new password with a reset token
POST   /api/auth/set-password/          - Change own password

GET    /api/users/                      - List users (ADMIN+)
POST   /api/users/                      - Create user and send welcome email
GET    /api/users/{id}/                 - User detail
PATCH  /api/users/{id}/                 - Update user
DELETE /api/users/{id}/                 - Delete user
GET    /api/users/summary/              - Counts by type, role and status
GET    /api/users/{id}/activity/        - Recent audit entries for a user
POST   /api/users/{id}/reset-password/  - Email the user a reset link
GET    /api/users/staff/                - Active staff for assignee pickers

GET    /api/staff/profile/              - Own staff profile
PATCH  /api/staff/profile/              - Update own staff profile
POST   /api/staff/profile/picture/      - Upload profile picture
"""

import logging

from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.db.models import Count, ProtectedError, Q
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.audit import AuditAction, log_audit
from apps.core.choices import UserType
from apps.core.exceptions import (
    AuthenticationFailedError,
    ErrorCode,
    NewskoopException,
    PermissionDeniedError,
    ValidationError,
)
from apps.core.models import AuditLog
from apps.core.params import parse_bool, parse_id_list, parse_int
from apps.core.permissions import IsActiveUser, IsAdminOrAbove, IsStaff
from apps.core.serializers import AuditLogSerializer
from apps.core.throttling import (
    DestructiveActionThrottle,
    LoginThrottle,
    PasswordResetThrottle,
    UploadThrottle,
)

from .emails import EmailDeliveryError, send_password_reset_email
from .models import User
from .serializers import (
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    ProfileSerializer,
    SetPasswordSerializer,
    StaffMemberSerializer,
    StaffProfileSerializer,
    UserSerializer,
    UserWriteSerializer,
    superadmin_guard,
)
from .services import create_user_with_welcome_email, replace_profile_picture
from .tasks import send_password_reset_email_task

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a password reset link has been sent."


# =============================================================================
# Authentication
# =============================================================================

class LoginView(APIView):
    """
    Session login with email and password.

    Inactive accounts are treated exactly like bad credentials.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email'].lower()

        user = authenticate(request, username=email, password=serializer.validated_data['password'])
        if user is None or not user.is_active:
            known = User.objects.filter(email=email).first()
            if known is not None:
                log_audit(known, AuditAction.LOGIN_FAILED, 'User', known.id, request=request)
            logger.info("Failed login for %s", email)
            raise AuthenticationFailedError()

        login(request, user)
        user.last_login_at = timezone.now()
        user.save(update_fields=['last_login_at', 'updated_at'])
        log_audit(user, AuditAction.LOGIN, 'User', user.id, request=request)
        return Response({'user': UserSerializer(user).data})


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        log_audit(request.user, AuditAction.LOGOUT, 'User', request.user.id, request=request)
        logout(request)
        return Response({'message': 'Logged out'})


class MeView(APIView):
    """The authenticated user's own record."""

    permission_classes = [IsActiveUser]

    def get(self, request):
        return Response({'user': UserSerializer(request.user).data})

    def patch(self, request):
        serializer = ProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'user': UserSerializer(request.user).data})


class PasswordResetView(APIView):
    """
    POST asks for a reset email; PATCH redeems the token.

    POST always answers with the same message so the endpoint cannot be
    used to discover which emails have accounts.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PasswordResetThrottle]

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email'].lower()

        user = User.objects.filter(email=email, is_active=True).first()
        if user is not None:
            token = user.issue_reset_token()
            try:
                send_password_reset_email(user, token)
            except EmailDeliveryError as e:
                raise NewskoopException(
                    "Failed to send the password reset email",
                    code=ErrorCode.EMAIL_DELIVERY_FAILED,
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                ) from e
            log_audit(user, AuditAction.PASSWORD_RESET_REQUESTED, 'User', user.id, request=request)

        return Response({'message': RESET_REQUESTED_MESSAGE})

    def patch(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(reset_token=serializer.validated_data['token']).first()
        if user is None or not user.reset_token_valid:
            raise ValidationError(
                "Invalid or expired reset token",
                code=ErrorCode.INVALID_TOKEN,
                field='token',
            )

        user.set_password(serializer.validated_data['new_password'])
        user.clear_reset_token()
        user.must_change_password = False
        user.save()
        log_audit(user, AuditAction.PASSWORD_RESET, 'User', user.id, request=request)
        return Response({'message': 'Password has been reset'})


class SetPasswordView(APIView):
    """
    Change the logged-in user's password.

    The current password may be omitted only while ``must_change_password``
    is set (first login with a temporary password).
    """

    permission_classes = [IsActiveUser]

    def post(self, request):
        serializer = SetPasswordSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = request.user

        if not user.must_change_password:
            current = serializer.validated_data.get('current_password')
            if not current or not user.check_password(current):
                raise ValidationError(
                    "Current password is incorrect",
                    code=ErrorCode.INVALID_CREDENTIALS,
                    field='current_password',
                )

        user.set_password(serializer.validated_data['new_password'])
        user.must_change_password = False
        user.save()
        # Keep the current session alive after the hash changes
        update_session_auth_hash(request, user)
        log_audit(user, AuditAction.PASSWORD_CHANGED, 'User', user.id, request=request)
        return Response({'message': 'Password updated'})


# =============================================================================
# User administration
# =============================================================================

class UserViewSet(viewsets.ModelViewSet):
    """
    User administration for ADMIN and SUPERADMIN.

    Admins cannot touch super admins; nobody can delete themselves.
    """

    permission_classes = [IsAdminOrAbove]
    results_key = 'users'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'staff':
            return [IsStaff()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action == 'destroy':
            return [DestructiveActionThrottle()]
        return super().get_throttles()

    def get_serializer_class(self):
        if self.action in ('create', 'partial_update', 'update'):
            return UserWriteSerializer
        return UserSerializer

    def get_queryset(self):
        queryset = User.objects.select_related('radio_station')
        params = self.request.query_params

        query = params.get('query')
        if query:
            queryset = queryset.filter(
                Q(first_name__icontains=query)
                | Q(last_name__icontains=query)
                | Q(email__icontains=query)
            )
        for param, field in (
            ('user_type', 'user_type'),
            ('staff_role', 'staff_role'),
            ('translation_language', 'translation_language'),
        ):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        station = params.get('station') or params.get('radio_station_id')
        if station:
            queryset = queryset.filter(radio_station_id=station)
        is_active = parse_bool(params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset.order_by('-created_at')

    def retrieve(self, request, *args, **kwargs):
        return Response({'user': UserSerializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = UserWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        denied = superadmin_guard(request.user, new_role=serializer.validated_data.get('staff_role'))
        if denied:
            raise PermissionDeniedError(denied)

        user = create_user_with_welcome_email(**serializer.validated_data)
        log_audit(
            request.user,
            AuditAction.USER_CREATE,
            'User',
            user.id,
            metadata={'email': user.email, 'user_type': user.user_type, 'staff_role': user.staff_role},
            request=request,
        )
        return Response({'user': UserSerializer(user).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        target = self.get_object()
        serializer = UserWriteSerializer(target, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        denied = superadmin_guard(request.user, target, serializer.validated_data.get('staff_role'))
        if denied:
            raise PermissionDeniedError(denied)

        changes = {
            field: str(value) for field, value in serializer.validated_data.items()
            if getattr(target, field, None) != value
        }
        user = serializer.save()
        log_audit(request.user, AuditAction.USER_UPDATE, 'User', user.id, metadata={'changes': changes}, request=request)
        return Response({'user': UserSerializer(user).data})

    def destroy(self, request, *args, **kwargs):
        target = self.get_object()
        if target.pk == request.user.pk:
            raise ValidationError("You cannot delete your own account", code=ErrorCode.INVALID_VALUE)
        denied = superadmin_guard(request.user, target)
        if denied:
            raise PermissionDeniedError(denied)

        email = target.email
        try:
            target.delete()
        except ProtectedError:
            raise ValidationError(
                "This user has authored content and cannot be deleted. Deactivate the account instead.",
                code=ErrorCode.CONFLICT,
            )
        log_audit(request.user, AuditAction.USER_DELETE, 'User', kwargs.get('pk'), metadata={'email': email}, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        users = User.objects.order_by()
        by_type = dict(users.values_list('user_type').annotate(n=Count('id')))
        by_role = dict(
            users.filter(user_type=UserType.STAFF).values_list('staff_role').annotate(n=Count('id'))
        )
        return Response({
            'total': users.count(),
            'active': users.filter(is_active=True).count(),
            'inactive': users.filter(is_active=False).count(),
            'by_type': by_type,
            'by_role': by_role,
        })

    @action(detail=True, methods=['get'])
    def activity(self, request, pk=None):
        target = self.get_object()
        limit = parse_int(request.query_params.get('limit'), 50, minimum=1, maximum=200, name='limit')
        entries = AuditLog.objects.filter(user=target).select_related('user')[:limit]
        return Response({'activity': AuditLogSerializer(entries, many=True).data})

    @action(detail=True, methods=['post'], url_path='reset-password')
    def reset_password(self, request, pk=None):
        target = self.get_object()
        denied = superadmin_guard(request.user, target)
        if denied:
            raise PermissionDeniedError(denied)
        token = target.issue_reset_token()
        send_password_reset_email_task.delay(str(target.id), token)
        log_audit(request.user, AuditAction.PASSWORD_RESET_REQUESTED, 'User', target.id, request=request)
        return Response({'message': f"Password reset email queued for {target.email}"})

    @action(detail=False, methods=['get'])
    def staff(self, request):
        queryset = User.objects.staff()
        roles = parse_id_list(request.query_params.get('role'))
        if roles:
            queryset = queryset.filter(staff_role__in=[r.upper() for r in roles])
        language = request.query_params.get('language')
        if language:
            queryset = queryset.filter(translation_language=language.upper())
        return Response({'users': StaffMemberSerializer(queryset, many=True).data})


# =============================================================================
# Staff profile
# =============================================================================

class StaffProfileView(APIView):
    permission_classes = [IsStaff]

    def get(self, request):
        return Response({'user': UserSerializer(request.user).data})

    def patch(self, request):
        serializer = StaffProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'user': UserSerializer(request.user).data})


class ProfilePictureView(APIView):
    """Upload a profile picture; the previous one is removed from storage."""

    parser_classes = [MultiPartParser, FormParser]
    permission_classes = [IsStaff]
    throttle_classes = [UploadThrottle]

    def post(self, request):
        user = replace_profile_picture(request.user, request.FILES.get('file'))
        return Response({'user': UserSerializer(user).data, 'url': user.profile_picture_url})
