"""
Celery configuration for Newskoop.

The beat schedule (scheduled story/episode publishing, reset-token cleanup)
lives in ``CELERY_BEAT_SCHEDULE`` in settings. Request ids are propagated
through task headers so worker logs correlate with the originating request.
"""

import logging
import os

from celery import Celery
from celery.signals import task_postrun, task_prerun, worker_process_init

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

logger = logging.getLogger(__name__)

app = Celery('newskoop')

# Load configuration from Django settings with CELERY namespace
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()

app.conf.task_routes = {
    'apps.accounts.tasks.send_*': {'queue': 'email'},
}

app.conf.task_default_queue = 'default'


@task_prerun.connect
def setup_task_request_context(task_id, task, args, kwargs, **signals_kwargs):
    """Bind the request id carried in the task headers to this worker thread."""
    from apps.core.middleware import setup_celery_request_context

    headers = getattr(task.request, 'headers', None) or {}
    setup_celery_request_context(headers)


@task_postrun.connect
def cleanup_task_request_context(task_id, task, args, kwargs, retval, state, **signals_kwargs):
    from apps.core.middleware import clear_request_context

    clear_request_context()


@worker_process_init.connect(weak=False)
def init_celery_tracing(*args, **kwargs):
    """Initialize OpenTelemetry tracing for Celery workers."""
    from django.conf import settings

    from apps.core.tracing import instrument_celery, instrument_requests, setup_tracing

    if not getattr(settings, 'OTEL_ENABLED', False):
        return
    setup_tracing(
        service_name=f"{getattr(settings, 'OTEL_SERVICE_NAME', 'newskoop')}-worker",
        otlp_endpoint=getattr(settings, 'OTEL_EXPORTER_OTLP_ENDPOINT', None),
    )
    instrument_celery()
    instrument_requests()
    logger.info("Celery worker tracing initialised")
