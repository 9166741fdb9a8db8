"""
Tests for the error envelope and pagination shape.
"""

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory
from rest_framework import exceptions as drf_exceptions

from apps.core.exceptions import (
    ErrorCode,
    NotFoundError,
    ValidationError,
    WorkflowError,
    newskoop_exception_handler,
)


def handle(exc, request_id='req-1'):
    request = RequestFactory().get('/')
    request.request_id = request_id
    return newskoop_exception_handler(exc, {'request': request})


class TestExceptionHandler:

    def test_newskoop_exception(self):
        response = handle(WorkflowError(
            "Story must be approved first",
            details={'missing': ['classifications']},
        ))

        assert response.status_code == 400
        assert response.data == {
            'error': {
                'code': 'WORKFLOW_ERROR',
                'message': 'Story must be approved first',
                'details': {'missing': ['classifications']},
            },
            'request_id': 'req-1',
        }

    def test_field_included(self):
        response = handle(ValidationError("Email already in use", code=ErrorCode.DUPLICATE, field='email'))

        assert response.data['error']['code'] == 'DUPLICATE'
        assert response.data['error']['field'] == 'email'

    def test_not_found(self):
        assert handle(NotFoundError("Story not found")).status_code == 404
        assert handle(Http404()).data['error']['code'] == 'NOT_FOUND'

    def test_django_validation_error(self):
        response = handle(DjangoValidationError({'title': ['Required']}))

        assert response.status_code == 400
        assert response.data['error']['details'] == {'title': ['Required']}

    def test_drf_serializer_errors(self):
        response = handle(drf_exceptions.ValidationError({'priority': ['Not a valid choice.']}))

        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert response.data['error']['message'] == 'Validation error'
        assert 'priority' in response.data['error']['details']

    @pytest.mark.parametrize('exc,status_code,code', [
        (drf_exceptions.NotAuthenticated(), 401, 'AUTHENTICATION_REQUIRED'),
        (drf_exceptions.PermissionDenied(), 403, 'PERMISSION_DENIED'),
        (drf_exceptions.Throttled(wait=30), 429, 'RATE_LIMITED'),
    ])
    def test_drf_status_codes(self, exc, status_code, code):
        response = handle(exc)

        assert response.status_code == status_code
        assert response.data['error']['code'] == code

    def test_throttle_keeps_retry_after(self):
        assert handle(drf_exceptions.Throttled(wait=30))['Retry-After'] == '30'

    def test_unhandled_is_500_without_detail(self):
        response = handle(RuntimeError('database password leaked'))

        assert response.status_code == 500
        assert response.data['error'] == {'code': 'INTERNAL_ERROR', 'message': 'Internal server error'}


@pytest.mark.django_db
class TestPagination:

    def test_standard_shape(self, client_for, admin_user, make_staff):
        for _ in range(3):
            make_staff()

        body = client_for(admin_user).get('/api/users/', {'perPage': 2, 'page': 2}).json()

        assert body['pagination'] == {'total': 4, 'page': 2, 'perPage': 2, 'totalPages': 2}
        assert len(body['users']) == 2

    def test_page_size_capped(self, client_for, admin_user):
        body = client_for(admin_user).get('/api/users/', {'perPage': 1000}).json()

        assert body['pagination']['perPage'] == 100
