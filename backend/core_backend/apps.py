from django.apps import AppConfig


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"
    verbose_name = "Storefront Core"
