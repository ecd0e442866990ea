from django.apps import AppConfig


class AvailabilityConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'availability'
    verbose_name = 'Order Window'

    def ready(self):
        """Register signals and fail fast on a broken ORDER_WINDOW setting."""
        import availability.signals  # noqa
        from .config import get_order_window_config

        get_order_window_config()
