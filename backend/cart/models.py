import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from menu.models import MenuItem

from .customization import Customization


class Cart(models.Model):
    """
    Shopping cart for one browser session.

    The local cart is authoritative. Its WooCommerce counterpart is kept in
    step through the CartSyncIntent outbox and rebuilt from scratch at
    checkout, see cart.sync.

    Lifecycle:
    1. Created on first visit to the cart API (keyed by the session guest id)
    2. Modified as the shopper adds/removes/updates lines
    3. Fully resynced to WooCommerce at checkout handoff
    4. Cleared after a completed order, deleted once abandoned

    Key Design:
    - NO financial totals stored (calculated from live menu prices)
    - `remote_cart_token` is the rotating Store API Cart-Token
    - `notice` is a transient, self-expiring message for the shopper
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session_id = models.CharField(
        max_length=100,
        unique=True,
        help_text='Guest identifier stored in the Django session'
    )

    # Remote cart session
    remote_cart_token = models.TextField(blank=True, default='')
    is_syncing = models.BooleanField(
        default=False,
        help_text='Set while a full resync is in flight'
    )
    sync_started_at = models.DateTimeField(null=True, blank=True)
    last_synced_at = models.DateTimeField(null=True, blank=True)

    # Transient shopper notice
    notice = models.CharField(max_length=255, blank=True, default='')
    notice_expires_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_activity = models.DateTimeField(
        default=timezone.now,
        help_text='Last time cart was modified (for abandonment tracking)'
    )

    class Meta:
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['last_activity'], name='cart_last_activity_idx'),
        ]

    def __str__(self):
        return f"Guest Cart ({self.session_id[:8]}...)"

    def get_totals(self):
        """Subtotal and item count over all lines (no tax or tip)."""
        total = Decimal('0.00')
        item_count = 0
        for item in self.items.select_related('menu_item'):
            total += item.get_total_price()
            item_count += item.quantity
        return {'total': total, 'item_count': item_count}

    @property
    def total(self):
        return self.get_totals()['total']

    @property
    def item_count(self):
        return self.get_totals()['item_count']

    def touch(self):
        """Update last_activity timestamp."""
        self.last_activity = timezone.now()
        self.save(update_fields=['last_activity', 'updated_at'])

    def active_notice(self, now=None):
        """The notice text while unexpired, else an empty string."""
        now = now or timezone.now()
        if self.notice and self.notice_expires_at and self.notice_expires_at > now:
            return self.notice
        return ''

    def is_sync_in_flight(self, now=None):
        """
        True while a full resync holds the cart.

        A flag older than CART_SYNC_STALE_SECONDS is treated as left over
        from a crashed worker.
        """
        if not self.is_syncing:
            return False
        if self.sync_started_at is None:
            return True
        now = now or timezone.now()
        stale_after = timedelta(seconds=settings.CART_SYNC_STALE_SECONDS)
        return now - self.sync_started_at < stale_after


class CartItem(models.Model):
    """
    One line of the cart: a dish for a service date with a customization.

    Lines are identified by (menu item, service date, customization key);
    adding the same combination again raises the quantity instead of
    creating a second line.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name='items'
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name='cart_items'
    )
    service_date = models.DateField()
    customization = models.JSONField(default=dict, blank=True)
    customization_key = models.TextField(
        blank=True,
        default='',
        help_text='Canonical form of the customization, used for merging'
    )
    quantity = models.PositiveIntegerField(default=1)
    remote_item_key = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text='WooCommerce Store API cart item key'
    )
    position = models.PositiveIntegerField(default=0)

    added_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['position', 'added_at']
        constraints = [
            models.UniqueConstraint(
                fields=['cart', 'menu_item', 'service_date', 'customization_key'],
                name='unique_line_per_cart'
            ),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.menu_item.name} ({self.service_date})"

    def get_customization(self) -> Customization:
        return Customization.from_payload(self.customization)

    def set_customization(self, customization: Customization):
        self.customization = customization.as_dict()
        self.customization_key = customization.canonical_key()

    def get_total_price(self):
        """Get total price for this line (price * quantity)."""
        return self.menu_item.price * self.quantity


class CartSyncIntent(models.Model):
    """
    Outbox row: one pending WooCommerce cart operation.

    Rows are written in the same transaction as the local mutation and
    drained in creation order by cart.tasks.drain_cart_outbox. The payload
    is captured at write time so a later drain does not depend on the line
    still existing.
    """

    class Action(models.TextChoices):
        ADD = 'ADD', 'Add item'
        SET_QUANTITY = 'SET_QUANTITY', 'Set quantity'
        REMOVE = 'REMOVE', 'Remove item'
        CLEAR = 'CLEAR', 'Clear cart'

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        PROCESSING = 'PROCESSING', 'Processing'
        SYNCED = 'SYNCED', 'Synced'
        FAILED = 'FAILED', 'Failed'
        SKIPPED = 'SKIPPED', 'Skipped'
        SUPERSEDED = 'SUPERSEDED', 'Superseded'

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name='sync_intents'
    )
    action = models.CharField(max_length=20, choices=Action.choices)
    cart_item_id = models.UUIDField(
        null=True,
        blank=True,
        help_text='Local line this intent targets (the line may since be deleted)'
    )
    remote_product_id = models.PositiveIntegerField(null=True, blank=True)
    quantity = models.PositiveIntegerField(default=0)
    item_data = models.JSONField(default=list, blank=True)
    remote_item_key = models.CharField(max_length=100, blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    error = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['cart', 'status'], name='cart_sync_intent_status_idx'),
        ]

    def __str__(self):
        return f"{self.action} [{self.status}] cart={self.cart_id}"
