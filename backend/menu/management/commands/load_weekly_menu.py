from django.core.management.base import BaseCommand
from django.db import transaction

from menu.data import WEEKLY_MENU
from menu.models import DayMenuEntry, MenuItem


class Command(BaseCommand):
    help = "Load the bundled weekly menu (upserts items by code)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Remove day entries that are not part of the bundled menu",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        updated = 0
        kept_entry_ids = []

        for weekday, categories in WEEKLY_MENU.items():
            position = 0
            for category in categories:
                for data in category["items"]:
                    defaults = {key: value for key, value in data.items() if key != "code"}
                    defaults.setdefault("is_popular", False)
                    defaults["is_active"] = True

                    item, was_created = MenuItem.objects.update_or_create(
                        code=data["code"], defaults=defaults
                    )
                    if was_created:
                        created += 1
                    else:
                        updated += 1

                    entry, _ = DayMenuEntry.objects.update_or_create(
                        weekday=weekday,
                        menu_item=item,
                        defaults={"category_name": category["category_name"], "position": position},
                    )
                    kept_entry_ids.append(entry.id)
                    position += 1

        removed = 0
        if options["clear"]:
            removed, _ = DayMenuEntry.objects.exclude(id__in=kept_entry_ids).delete()

        self.stdout.write(self.style.SUCCESS(
            f"Weekly menu loaded. Created: {created}, Updated: {updated}, Removed entries: {removed}"
        ))
