"""
Pagination shared by every list endpoint.

Responses look like:

    {"results": [...], "pagination": {"total": 42, "page": 2, "perPage": 10, "totalPages": 5}}

Views that expose a named collection (``stories``, ``entries`` ...) set a
``results_key`` attribute so the client sees the domain name instead of
``results``.
"""

import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'perPage'
    max_page_size = 100
    results_key = 'results'

    def paginate_queryset(self, queryset, request, view=None):
        self.results_key = getattr(view, 'results_key', self.results_key)
        return super().paginate_queryset(queryset, request, view=view)

    def get_pagination_meta(self):
        total = self.page.paginator.count
        per_page = self.page.paginator.per_page
        return {
            'total': total,
            'page': self.page.number,
            'perPage': per_page,
            'totalPages': math.ceil(total / per_page) if per_page else 0,
        }

    def get_paginated_response(self, data, **extra):
        payload = {self.results_key: data, 'pagination': self.get_pagination_meta()}
        payload.update(extra)
        return Response(payload)

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                self.results_key: schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'total': {'type': 'integer'},
                        'page': {'type': 'integer'},
                        'perPage': {'type': 'integer'},
                        'totalPages': {'type': 'integer'},
                    },
                },
            },
        }


class LargePagination(StandardPagination):
    page_size = 20


class AuditPagination(StandardPagination):
    page_size = 50


def paginator_for(page_size=None, results_key='results'):
    """Build a pagination instance for APIViews that paginate by hand."""
    paginator = StandardPagination()
    if page_size:
        paginator.page_size = page_size
    paginator.results_key = results_key
    return paginator
