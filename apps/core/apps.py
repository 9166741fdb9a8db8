from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        """Initialize app on Django startup."""
        import logging

        from apps.core.observability import register_default_checks
        from apps.core.tracing import auto_init

        register_default_checks()
        try:
            auto_init()
        except Exception as e:
            logging.getLogger(__name__).warning(f"Tracing initialization failed: {e}")
