from django.apps import AppConfig


class RadioConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.radio'
    verbose_name = 'Radio'
