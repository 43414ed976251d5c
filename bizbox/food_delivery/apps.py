from django.apps import AppConfig


class FoodDeliveryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bizbox.food_delivery'

    def ready(self):
        """Import signals when app is ready"""
        import bizbox.food_delivery.signals  # noqa: F401  # Public menu cache invalidation
