from django.apps import AppConfig


class RedirectsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bizbox.redirects'

    def ready(self):
        """Import signals when app is ready"""
        import bizbox.redirects.signals  # noqa: F401  # Redirect lookup cache invalidation
