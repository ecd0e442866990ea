from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import DayMenuEntry, MenuItem
from .services import MenuService


@receiver(post_save, sender=MenuItem)
@receiver(post_delete, sender=MenuItem)
def clear_menu_cache_on_item_change(sender, instance, **kwargs):
    """Clear every cached weekday, an item can sit on several of them"""
    MenuService.clear_cache()


@receiver(post_save, sender=DayMenuEntry)
@receiver(post_delete, sender=DayMenuEntry)
def clear_menu_cache_on_entry_change(sender, instance, **kwargs):
    """Clear the cached menu for the entry's weekday"""
    MenuService.clear_cache(instance.weekday)
