from django.conf import settings
from django.core.management.base import BaseCommand

from cart.services import CartService


class Command(BaseCommand):
    help = "Delete carts with no activity for the given number of hours"

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=None,
            help="Inactivity threshold in hours (default: CART_ABANDONED_AFTER_HOURS)",
        )

    def handle(self, *args, **options):
        hours = options["hours"] or settings.CART_ABANDONED_AFTER_HOURS
        deleted = CartService.cleanup_abandoned_carts(hours=hours)
        self.stdout.write(self.style.SUCCESS(
            f"Deleted {deleted} cart(s) idle for more than {hours} hours"
        ))
