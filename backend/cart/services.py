"""
Cart service layer for managing shopping cart operations.

This service handles:
- Cart retrieval for guest sessions
- Adding/updating/removing lines (merge by item, date and customization)
- The transient shopper notice (past-date rejections)
- Cart lifecycle management (abandonment)

Every mutation runs in one transaction that also records the matching
remote sync intent, see cart.sync.
"""

from datetime import date, timedelta
from typing import Optional
import logging
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from availability.clock import ServiceClock
from availability.services import AvailabilityService
from menu.models import MenuItem

from .customization import Customization
from .exceptions import InvalidCustomizationError, PastDateError
from .models import Cart, CartItem
from .sync import RemoteCartSynchronizer

logger = logging.getLogger(__name__)


class CartSessionService:
    """Resolves the guest identifier a cart is keyed by."""

    GUEST_SESSION_KEY = "guest_id"

    @staticmethod
    def get_or_create_guest_id(request):
        """
        Get or create a unique guest identifier for the session.
        Returns a guest_id that persists for the session.
        """
        if not request.session.session_key:
            request.session.create()
            logger.info(f"[CartSessionService] Created new session: {request.session.session_key}")

        guest_id = request.session.get(CartSessionService.GUEST_SESSION_KEY)
        if not guest_id:
            guest_id = f"guest_{uuid.uuid4().hex[:12]}"
            request.session[CartSessionService.GUEST_SESSION_KEY] = guest_id
            request.session.modified = True
            request.session.save()
            logger.info(f"[CartSessionService] Created NEW guest_id: {guest_id}")

        return guest_id


class CartService:
    """Service for managing cart operations."""

    def __init__(self, clock: Optional[ServiceClock] = None, synchronizer_class=RemoteCartSynchronizer):
        self.availability = AvailabilityService(clock=clock) if clock else AvailabilityService.from_settings()
        self.clock = self.availability.clock
        self.synchronizer_class = synchronizer_class

    @staticmethod
    def get_or_create_cart(session_id: str) -> Cart:
        if not session_id:
            raise ValueError("session_id is required")

        cart, created = Cart.objects.get_or_create(session_id=session_id)
        if created:
            logger.info(f"Created new cart {cart.id} for guest {session_id[:14]}")
        return cart

    def _synchronizer(self, cart: Cart):
        return self.synchronizer_class(cart)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _find_line(cart: Cart, menu_item_id, service_date: date, customization: Customization) -> Optional[CartItem]:
        return (
            CartItem.objects
            .select_for_update()
            .select_related('menu_item')
            .filter(
                cart=cart,
                menu_item_id=menu_item_id,
                service_date=service_date,
                customization_key=customization.canonical_key(),
            )
            .first()
        )

    @staticmethod
    def _next_position(cart: Cart) -> int:
        current = cart.items.aggregate(top=Max('position'))['top']
        return 0 if current is None else current + 1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _check_service_date(self, service_date: date):
        """
        Raises:
            PastDateError: when the date is before today in the service timezone
        """
        if self.clock.to_service_date(service_date) < self.clock.today():
            raise PastDateError(service_date)

    @staticmethod
    def _check_customization(menu_item: MenuItem, customization: Customization):
        try:
            menu_item.validate_customization(customization)
        except ValidationError as e:
            raise InvalidCustomizationError(
                f"Invalid customization for {menu_item.name}",
                errors=e.message_dict,
            ) from e

    @transaction.atomic
    def add_item(
        self,
        cart: Cart,
        menu_item: MenuItem,
        service_date: date,
        customization: Optional[Customization] = None,
    ) -> Optional[CartItem]:
        """
        Add one unit of a dish for a service date.

        A line with the same item, date and customization is incremented,
        otherwise a new line with quantity 1 is created. A past date is not
        an error for the caller: the cart notice is set and None is returned.

        Raises:
            InvalidCustomizationError: if the customization is not offered for the item
        """
        customization = customization or Customization()

        try:
            self._check_service_date(service_date)
        except PastDateError as e:
            self._set_notice(cart, str(e))
            logger.info(f"Rejected past-date add for cart {cart.id}: {menu_item.code} on {service_date}")
            return None

        self._check_customization(menu_item, customization)

        line = self._find_line(cart, menu_item.id, service_date, customization)
        if line:
            line.quantity += 1
            line.save(update_fields=['quantity', 'updated_at'])
            is_new_line = False
        else:
            line = CartItem(
                cart=cart,
                menu_item=menu_item,
                service_date=service_date,
                quantity=1,
                position=self._next_position(cart),
            )
            line.set_customization(customization)
            line.save()
            is_new_line = True

        self._synchronizer(cart).on_add(line, is_new_line)
        cart.touch()

        logger.info(
            f"Cart {cart.id}: {'added' if is_new_line else 'incremented'} {menu_item.code} "
            f"for {service_date} (qty {line.quantity})"
        )
        return line

    @transaction.atomic
    def remove_item(self, cart: Cart, menu_item_id, service_date: date, customization: Optional[Customization] = None) -> bool:
        """Delete the matching line. Returns False (no-op) when there is none."""
        line = self._find_line(cart, menu_item_id, service_date, customization or Customization())
        if line is None:
            return False
        self.remove_line(line)
        return True

    @transaction.atomic
    def remove_line(self, line: CartItem):
        cart = line.cart
        self._synchronizer(cart).on_remove(line)
        logger.info(f"Cart {cart.id}: removed {line.menu_item.code} for {line.service_date}")
        line.delete()
        cart.touch()

    @transaction.atomic
    def update_quantity(
        self,
        cart: Cart,
        menu_item_id,
        service_date: date,
        customization: Optional[Customization],
        delta: int,
    ) -> Optional[CartItem]:
        """
        Change the matching line's quantity by delta, never below 0.

        Returns the updated line, or None when the line was removed or did
        not exist.
        """
        line = self._find_line(cart, menu_item_id, service_date, customization or Customization())
        if line is None:
            return None
        return self.update_line_quantity(line, delta)

    @transaction.atomic
    def update_line_quantity(self, line: CartItem, delta: int) -> Optional[CartItem]:
        cart = line.cart
        new_quantity = max(0, line.quantity + delta)

        if new_quantity == 0:
            self._synchronizer(cart).on_update_quantity(line, 0)
            logger.info(f"Cart {cart.id}: quantity of {line.menu_item.code} reached 0, removing line")
            line.delete()
            cart.touch()
            return None

        line.quantity = new_quantity
        line.save(update_fields=['quantity', 'updated_at'])
        self._synchronizer(cart).on_update_quantity(line, new_quantity)
        cart.touch()
        return line

    @transaction.atomic
    def clear(self, cart: Cart):
        """
        Remove all lines from the cart.

        Args:
            cart: Cart to clear
        """
        self._synchronizer(cart).on_clear()
        cart.items.all().delete()
        cart.touch()
        logger.info(f"Cart {cart.id} cleared")

    # ------------------------------------------------------------------
    # Derived values and notice
    # ------------------------------------------------------------------

    @staticmethod
    def get_totals(cart: Cart):
        return cart.get_totals()

    def _set_notice(self, cart: Cart, message: str):
        cart.notice = message
        cart.notice_expires_at = self.clock.now() + timedelta(seconds=settings.CART_NOTICE_SECONDS)
        cart.save(update_fields=['notice', 'notice_expires_at', 'updated_at'])

    def get_notice(self, cart: Cart) -> str:
        """
        The cart's notice while it is fresh; an expired notice is cleared
        on read.
        """
        if not cart.notice:
            return ''
        notice = cart.active_notice(now=self.clock.now())
        if not notice:
            cart.notice = ''
            cart.notice_expires_at = None
            cart.save(update_fields=['notice', 'notice_expires_at', 'updated_at'])
        return notice

    @staticmethod
    def cleanup_abandoned_carts(hours: int = 24) -> int:
        """
        Delete abandoned carts older than specified hours.

        Args:
            hours: Number of hours of inactivity before cart is considered abandoned

        Returns:
            Number of carts deleted
        """
        threshold = timezone.now() - timedelta(hours=hours)
        abandoned_carts = Cart.objects.filter(last_activity__lt=threshold)
        count = abandoned_carts.count()
        abandoned_carts.delete()

        logger.info(f"Cleaned up {count} abandoned carts (older than {hours} hours)")
        return count
