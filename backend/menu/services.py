import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from django.core.cache import cache

from availability.config import get_order_window_config
from availability.constants import WEEKDAY_NAMES

from .models import DayMenuEntry, MenuItem

logger = logging.getLogger(__name__)


@dataclass
class MenuCategory:
    name: str
    items: List[MenuItem] = field(default_factory=list)


@dataclass
class DayMenu:
    service_day: date
    weekday: str
    categories: List[MenuCategory]

    @property
    def items(self) -> List[MenuItem]:
        return [item for category in self.categories for item in category.items]


class MenuService:
    """
    Read-only access to the weekly menu.

    Menus are keyed by weekday, so the per-weekday category lists are cached
    and shared by every date falling on that weekday.
    """

    CACHE_TIMEOUT = 300  # 5 minutes

    @staticmethod
    def _cache_key(weekday: int) -> str:
        return f"menu_weekday_{weekday}"

    @classmethod
    def menu_for(cls, service_day: date) -> Optional[DayMenu]:
        """
        Return the menu served on the given day, or None when nothing is
        served (closed weekday or no entries).
        """
        weekday = service_day.weekday()
        if weekday not in get_order_window_config().service_weekdays:
            return None

        cache_key = cls._cache_key(weekday)
        categories = cache.get(cache_key)
        if categories is None:
            categories = cls._load_categories(weekday)
            cache.set(cache_key, categories, cls.CACHE_TIMEOUT)

        if not categories:
            return None

        return DayMenu(
            service_day=service_day,
            weekday=WEEKDAY_NAMES[weekday],
            categories=categories,
        )

    @staticmethod
    def _load_categories(weekday: int) -> List[MenuCategory]:
        entries = (
            DayMenuEntry.objects
            .filter(weekday=weekday, menu_item__is_active=True)
            .select_related("menu_item")
            .order_by("position", "id")
        )

        categories: List[MenuCategory] = []
        by_name = {}
        for entry in entries:
            category = by_name.get(entry.category_name)
            if category is None:
                category = MenuCategory(name=entry.category_name)
                by_name[entry.category_name] = category
                categories.append(category)
            category.items.append(entry.menu_item)
        return categories

    @staticmethod
    def get_item(code: str) -> MenuItem:
        """
        Raises:
            MenuItem.DoesNotExist: for unknown or inactive codes
        """
        return MenuItem.objects.get(code=code, is_active=True)

    @classmethod
    def clear_cache(cls, weekday: Optional[int] = None):
        """Clear cached menus for one weekday, or all of them"""
        weekdays = [weekday] if weekday is not None else range(7)
        cache.delete_many([cls._cache_key(day) for day in weekdays])
        logger.debug(f"Cleared menu cache for weekdays {list(weekdays)}")
