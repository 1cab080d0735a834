from django.apps import AppConfig


class MotorcyclesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fitment.motorcycles'

    def ready(self):
        """Import signals when app is ready"""
        import fitment.motorcycles.signals  # noqa: F401
