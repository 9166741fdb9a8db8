"""
OpenTelemetry Tracing Configuration.

This module provides:
- OTLP exporter configuration
- Django, Celery and requests instrumentation
- A ``traced`` decorator for workflow services

Tracing is opt-in through OTEL_ENABLED; without it spans are created
against the default no-op tracer provider.
"""

import logging
from functools import wraps
from typing import Optional, Callable

from django.conf import settings
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

_tracing_initialized = False


def setup_tracing(
    service_name: str = "newskoop",
    otlp_endpoint: Optional[str] = None,
    console_export: bool = False,
) -> bool:
    """
    Initialize OpenTelemetry tracing.

    Returns True if tracing was initialized, False otherwise.
    """
    global _tracing_initialized

    if _tracing_initialized:
        return True

    resource = Resource.create({
        "service.name": service_name,
        "service.version": getattr(settings, 'VERSION', '1.0.0'),
        "deployment.environment": 'development' if settings.DEBUG else 'production',
    })
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
        logger.info("OTLP exporter configured: %s", otlp_endpoint)

    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracing_initialized = True
    logger.info("OpenTelemetry tracing initialized for %s", service_name)
    return True


def instrument_django():
    from opentelemetry.instrumentation.django import DjangoInstrumentor
    DjangoInstrumentor().instrument()


def instrument_celery():
    from opentelemetry.instrumentation.celery import CeleryInstrumentor
    CeleryInstrumentor().instrument()


def instrument_requests():
    from opentelemetry.instrumentation.requests import RequestsInstrumentor
    RequestsInstrumentor().instrument()


def get_tracer(name: str = "newskoop"):
    return trace.get_tracer(name)


def traced(name: Optional[str] = None, attributes: Optional[dict] = None):
    """
    Decorator to trace a function.

    Usage:
        @traced("stories.publish")
        def publish_story(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        span_name = name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        def wrapper(*args, **kwargs):
            with get_tracer().start_as_current_span(span_name, attributes=attributes) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper
    return decorator


def auto_init():
    """Initialize tracing from Django settings when enabled."""
    if not getattr(settings, 'OTEL_ENABLED', False):
        return

    setup_tracing(
        service_name=getattr(settings, 'OTEL_SERVICE_NAME', 'newskoop'),
        otlp_endpoint=getattr(settings, 'OTEL_EXPORTER_OTLP_ENDPOINT', None),
        console_export=getattr(settings, 'OTEL_CONSOLE_EXPORT', False),
    )
    instrument_django()
    instrument_requests()
