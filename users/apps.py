# users/apps.py
from django.apps import AppConfig

class UsersConfig(AppConfig):
    """
    Application configuration for the users app.

    Holds the platform accounts for the three actor types (clients, law
    firms, medical providers) and their display profiles.
    """
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'users'

    def ready(self):
        """
        Import and register signal handlers when the app is ready.
        """
        import users.signals  # noqa
