from django.apps import AppConfig


class EnforcementConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'enforcement'
    verbose_name = 'PHI Access Enforcement'
