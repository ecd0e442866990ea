from django.core.signals import setting_changed
from django.dispatch import receiver

from .config import reset_order_window_config


@receiver(setting_changed)
def reload_order_window(sender, setting, **kwargs):
    """Drop the cached order window when ORDER_WINDOW is overridden"""
    if setting == 'ORDER_WINDOW':
        reset_order_window_config()
