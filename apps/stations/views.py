"""
Radio station administration (ADMIN+).

GET    /api/stations/                       - List stations
POST   /api/stations/                       - Create station with its users
GET    /api/stations/{id}/                  - Station detail
PATCH  /api/stations/{id}/                  - Update station
DELETE /api/stations/{id}/                  - Delete station and its users
GET    /api/stations/{id}/users/            - Station users
POST   /api/stations/{id}/users/            - Add a station user
POST   /api/stations/{id}/primary-contact/  - Change the primary contact
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.models import User
from apps.core.audit import AuditAction, log_audit
from apps.core.exceptions import DuplicateError, ErrorCode, NotFoundError, ValidationError
from apps.core.params import parse_bool
from apps.core.permissions import IsAdminOrAbove
from apps.core.throttling import DestructiveActionThrottle

from .models import Station
from .serializers import (
    StationCreateSerializer,
    StationSerializer,
    StationUserInputSerializer,
    StationUserSerializer,
    create_station_user,
)

logger = logging.getLogger(__name__)


class StationViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdminOrAbove]
    results_key = 'stations'
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'create':
            return StationCreateSerializer
        return StationSerializer

    def get_throttles(self):
        if self.action == 'destroy':
            return [DestructiveActionThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        queryset = Station.objects.annotate(user_count=Count('users', distinct=True)).prefetch_related(
            'classifications'
        )
        params = self.request.query_params
        query = params.get('query') or params.get('search')
        if query:
            queryset = queryset.filter(Q(name__icontains=query) | Q(contact_email__icontains=query))
        province = params.get('province')
        if province:
            queryset = queryset.filter(province=province)
        is_active = parse_bool(params.get('is_active'))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset.order_by('name')

    def retrieve(self, request, *args, **kwargs):
        return Response({'station': StationSerializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = StationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        station = serializer.save()
        log_audit(
            request.user,
            AuditAction.STATION_CREATE,
            'Station',
            station.id,
            metadata={'name': station.name, 'users': station.users.count()},
            request=request,
        )
        logger.info("Station created: %s", station.name)
        return Response({'station': StationSerializer(station).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        station = self.get_object()
        serializer = StationSerializer(station, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        station = serializer.save()
        log_audit(
            request.user,
            AuditAction.STATION_UPDATE,
            'Station',
            station.id,
            metadata={'fields': sorted(serializer.validated_data)},
            request=request,
        )
        return Response({'station': StationSerializer(station).data})

    def destroy(self, request, *args, **kwargs):
        station = self.get_object()
        name = station.name
        with transaction.atomic():
            user_count = station.users.count()
            station.delete()
        log_audit(
            request.user,
            AuditAction.STATION_DELETE,
            'Station',
            kwargs.get('pk'),
            metadata={'name': name, 'deleted_users': user_count},
            request=request,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get', 'post'])
    def users(self, request, pk=None):
        station = self.get_object()
        if request.method == 'GET':
            users = station.users.order_by('-is_primary_contact', 'first_name')
            return Response({'users': StationUserSerializer(users, many=True).data})

        serializer = StationUserInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if User.objects.filter(email__iexact=serializer.validated_data['email']).exists():
            raise DuplicateError("A user with this email already exists", field='email')
        user = create_station_user(station, serializer.validated_data)
        log_audit(
            request.user,
            AuditAction.USER_CREATE,
            'User',
            user.id,
            metadata={'email': user.email, 'station': station.name},
            request=request,
        )
        return Response({'user': StationUserSerializer(user).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='primary-contact')
    def primary_contact(self, request, pk=None):
        station = self.get_object()
        user_id = request.data.get('user_id')
        if not user_id:
            raise ValidationError("user_id is required", code=ErrorCode.MISSING_FIELD, field='user_id')

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        if user.radio_station_id != station.id:
            raise ValidationError(
                "User does not belong to this station",
                code=ErrorCode.INVALID_VALUE,
                field='user_id',
            )

        with transaction.atomic():
            station.users.exclude(pk=user.pk).update(is_primary_contact=False)
            user.is_primary_contact = True
            user.save(update_fields=['is_primary_contact', 'updated_at'])

        log_audit(
            request.user,
            AuditAction.STATION_PRIMARY_CONTACT,
            'Station',
            station.id,
            metadata={'user_id': str(user.id)},
            request=request,
        )
        return Response({'station': StationSerializer(station).data})
