from django.contrib import admin

from .models import DayMenuEntry, MenuItem


class DayMenuEntryInline(admin.TabularInline):
    model = DayMenuEntry
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "price", "woo_product_id", "is_popular", "is_active")
    list_filter = ("is_active", "is_popular")
    search_fields = ("code", "name")
    inlines = [DayMenuEntryInline]


@admin.register(DayMenuEntry)
class DayMenuEntryAdmin(admin.ModelAdmin):
    list_display = ("weekday", "category_name", "menu_item", "position")
    list_filter = ("weekday",)
    ordering = ("weekday", "position")
