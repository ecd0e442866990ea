"""
Remote cart synchronization.

The local cart is the source of truth. Every mutation records an intent in
the CartSyncIntent outbox inside the mutation's transaction; once that
transaction commits, a Celery task drains the cart's outbox against the
WooCommerce Store API. Incremental failures are logged and recorded on the
intent, never raised: the shopper's cart keeps working when WooCommerce
does not.

Right before checkout, `full_resync()` throws the remote cart away and
rebuilds it line by line. That is the only operation whose failure is
reported to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Exists, Q
from django.utils import timezone

from availability.services import AvailabilityService
from woocommerce.clients import WooStoreClient
from woocommerce.exceptions import WooCommerceError

from .models import Cart, CartItem, CartSyncIntent

logger = logging.getLogger(__name__)


def is_remote_enabled() -> bool:
    return bool(settings.WOOCOMMERCE_STORE_URL)


@dataclass
class ResyncResult:
    ok: bool
    synced: int = 0
    skipped: int = 0
    error: str = ''
    enabled: bool = True
    in_progress: bool = False


class RemoteCartSynchronizer:
    """
    Mirrors one cart into its WooCommerce Store API session.

    Lines whose menu item has no `woo_product_id` are never sent; they still
    count in the local totals.
    """

    def __init__(self, cart: Cart, client: Optional[WooStoreClient] = None):
        self.cart = cart
        self._client = client
        self._drain_scheduled = False
        self._holds_sync = False

    @property
    def enabled(self) -> bool:
        return self._client is not None or is_remote_enabled()

    def get_client(self) -> WooStoreClient:
        if self._client is None:
            self._client = WooStoreClient.from_settings(cart_token=self.cart.remote_cart_token)
        elif self.cart.remote_cart_token:
            self._client.cart_token = self.cart.remote_cart_token
        return self._client

    @staticmethod
    def item_data_for(line: CartItem):
        label = AvailabilityService.display_date(line.service_date)
        return line.get_customization().to_item_data(label)

    # ------------------------------------------------------------------
    # Intent recording (called by CartService inside its transaction)
    # ------------------------------------------------------------------

    def _enqueue(self, action, line=None, **fields) -> CartSyncIntent:
        intent = CartSyncIntent.objects.create(
            cart=self.cart,
            action=action,
            cart_item_id=line.pk if line is not None else None,
            **fields
        )
        self._schedule_drain()
        return intent

    def _schedule_drain(self):
        if self._drain_scheduled:
            return
        self._drain_scheduled = True
        from .tasks import drain_cart_outbox

        cart_id = str(self.cart.pk)
        transaction.on_commit(lambda: drain_cart_outbox.delay(cart_id))

    def _is_mapped(self, line: CartItem) -> bool:
        if line.menu_item.woo_product_id is None:
            logger.debug(f"Menu item {line.menu_item.code} has no WooCommerce mapping, not syncing")
            return False
        return True

    def on_add(self, line: CartItem, is_new_line: bool) -> Optional[CartSyncIntent]:
        """
        A new line becomes an ADD of one unit; a merge becomes a
        SET_QUANTITY to the line's new total so the remote side is not
        double-counted.
        """
        if not self.enabled or not self._is_mapped(line):
            return None

        action = CartSyncIntent.Action.ADD if is_new_line else CartSyncIntent.Action.SET_QUANTITY
        return self._enqueue(
            action,
            line,
            remote_product_id=line.menu_item.woo_product_id,
            quantity=line.quantity,
            item_data=self.item_data_for(line),
            remote_item_key=line.remote_item_key,
        )

    def on_remove(self, line: CartItem) -> Optional[CartSyncIntent]:
        """Must be called before the line is deleted, while it still has its id."""
        if not self.enabled or not self._is_mapped(line):
            return None

        return self._enqueue(
            CartSyncIntent.Action.REMOVE,
            line,
            remote_product_id=line.menu_item.woo_product_id,
            remote_item_key=line.remote_item_key,
        )

    def on_update_quantity(self, line: CartItem, new_quantity: int) -> Optional[CartSyncIntent]:
        if new_quantity <= 0:
            return self.on_remove(line)
        if not self.enabled or not self._is_mapped(line):
            return None

        return self._enqueue(
            CartSyncIntent.Action.SET_QUANTITY,
            line,
            remote_product_id=line.menu_item.woo_product_id,
            quantity=new_quantity,
            item_data=self.item_data_for(line),
            remote_item_key=line.remote_item_key,
        )

    def on_clear(self) -> Optional[CartSyncIntent]:
        if not self.enabled:
            return None

        # Nothing queued before a clear matters any more
        self.cart.sync_intents.filter(status=CartSyncIntent.Status.PENDING).update(
            status=CartSyncIntent.Status.SUPERSEDED,
            processed_at=timezone.now(),
        )
        return self._enqueue(CartSyncIntent.Action.CLEAR)

    # ------------------------------------------------------------------
    # Outbox drain (Celery worker)
    # ------------------------------------------------------------------

    def drain(self) -> Dict[str, int]:
        """
        Apply the cart's pending intents in creation order.

        Returns:
            counts per final intent status
        """
        counts = {status: 0 for status in CartSyncIntent.Status.values}
        if not self.enabled:
            return counts

        self.cart.refresh_from_db()
        if self.cart.is_sync_in_flight():
            logger.info(f"Full resync in flight for cart {self.cart.pk}, leaving outbox for later")
            return counts

        client = None
        while True:
            intent = self._claim_next()
            if intent is None:
                break
            if client is None:
                client = self.get_client()
            try:
                status = self._apply(intent, client)
            except WooCommerceError as e:
                logger.warning(
                    f"Remote cart sync failed for cart {self.cart.pk} "
                    f"({intent.action}, intent {intent.pk}): {e}"
                )
                status = CartSyncIntent.Status.FAILED
                intent.error = str(e)
            finally:
                self._persist_token(client)

            intent.status = status
            intent.processed_at = timezone.now()
            intent.save(update_fields=['status', 'error', 'remote_item_key', 'processed_at'])
            counts[status] += 1

        if client is not None:
            logger.info(f"Drained outbox for cart {self.cart.pk}: {counts}")
        return counts

    @staticmethod
    def _stale_cutoff(now):
        return now - timedelta(seconds=settings.CART_SYNC_STALE_SECONDS)

    def _claim_next(self) -> Optional[CartSyncIntent]:
        """
        Move the oldest pending intent to PROCESSING and return it.

        The claim is a single conditional UPDATE that also requires no live
        claim on the cart, so overlapping drains never apply an intent twice
        and never run a cart's intents out of order. Returns None when the
        outbox is empty or another drain holds the cart; that drain keeps
        claiming until the outbox is empty. A claim older than
        CART_SYNC_STALE_SECONDS no longer holds the cart.
        """
        Status = CartSyncIntent.Status
        while True:
            intent = (
                self.cart.sync_intents
                .filter(status=Status.PENDING)
                .order_by('created_at', 'id')
                .first()
            )
            if intent is None:
                return None

            now = timezone.now()
            live_claims = CartSyncIntent.objects.filter(
                cart_id=self.cart.pk,
                status=Status.PROCESSING,
                processed_at__gte=self._stale_cutoff(now),
            )
            claimed = (
                CartSyncIntent.objects
                .filter(pk=intent.pk, status=Status.PENDING)
                .filter(~Exists(live_claims))
                .update(status=Status.PROCESSING, processed_at=now)
            )
            if claimed:
                intent.status = Status.PROCESSING
                intent.processed_at = now
                return intent
            if live_claims.exists():
                logger.info(f"Outbox of cart {self.cart.pk} is being drained elsewhere")
                return None
            # The row was superseded or claimed and finished meanwhile, look again

    def _apply(self, intent: CartSyncIntent, client: WooStoreClient) -> str:
        Action = CartSyncIntent.Action
        Status = CartSyncIntent.Status

        if intent.action == Action.CLEAR:
            client.clear_all()
            return Status.SYNCED

        if intent.action == Action.ADD:
            self._add(intent, client, intent.quantity)
            return Status.SYNCED

        key = self._resolve_key(intent)

        if intent.action == Action.SET_QUANTITY:
            if key:
                client.set_quantity(key, intent.quantity)
                intent.remote_item_key = key
            else:
                # The line never reached the remote cart, add it whole
                self._add(intent, client, intent.quantity)
            return Status.SYNCED

        if intent.action == Action.REMOVE:
            if not key:
                logger.info(f"No remote key for removed line {intent.cart_item_id}, skipping")
                return Status.SKIPPED
            client.remove_item(key)
            intent.remote_item_key = key
            return Status.SYNCED

        raise ValueError(f"Unknown sync action {intent.action}")

    def _add(self, intent: CartSyncIntent, client: WooStoreClient, quantity: int):
        key = client.add_item(intent.remote_product_id, quantity, intent.item_data)
        intent.remote_item_key = key
        if intent.cart_item_id:
            CartItem.objects.filter(pk=intent.cart_item_id).update(remote_item_key=key)

    def _resolve_key(self, intent: CartSyncIntent) -> str:
        """
        Correlation key for an intent: the one captured when it was queued,
        else the line's current key, else the key an earlier intent for the
        same line obtained.
        """
        if intent.remote_item_key:
            return intent.remote_item_key
        if not intent.cart_item_id:
            return ''

        line_key = (
            CartItem.objects
            .filter(pk=intent.cart_item_id)
            .values_list('remote_item_key', flat=True)
            .first()
        )
        if line_key:
            return line_key

        earlier = (
            CartSyncIntent.objects
            .filter(
                cart=self.cart,
                cart_item_id=intent.cart_item_id,
                status=CartSyncIntent.Status.SYNCED,
                created_at__lte=intent.created_at,
            )
            .exclude(pk=intent.pk)
            .exclude(remote_item_key='')
            .order_by('-created_at', '-id')
            .first()
        )
        return earlier.remote_item_key if earlier else ''

    def _persist_token(self, client: WooStoreClient):
        token = client.cart_token or ''
        if token and token != self.cart.remote_cart_token:
            Cart.objects.filter(pk=self.cart.pk).update(remote_cart_token=token)
            self.cart.remote_cart_token = token

    # ------------------------------------------------------------------
    # Full resync (checkout handoff)
    # ------------------------------------------------------------------

    def acquire_sync(self) -> bool:
        """
        Take the cart's resync flag unless a live resync already holds it.

        Check and write are one UPDATE, so of two concurrent callers only
        one gets True. A flag older than CART_SYNC_STALE_SECONDS is taken
        over.
        """
        if self._holds_sync:
            return True

        started_at = timezone.now()
        claimed = (
            Cart.objects
            .filter(pk=self.cart.pk)
            .filter(Q(is_syncing=False) | Q(sync_started_at__lt=self._stale_cutoff(started_at)))
            .update(is_syncing=True, sync_started_at=started_at)
        )
        if not claimed:
            return False

        self._holds_sync = True
        self.cart.is_syncing = True
        self.cart.sync_started_at = started_at
        return True

    def full_resync(self) -> ResyncResult:
        """
        Rebuild the remote cart from the local lines.

        Clears the remote cart unconditionally, then re-adds every mapped line
        in local order with its full quantity and customization. Pending
        outbox intents are superseded. `is_syncing` is held for the duration
        (see acquire_sync) and always cleared on exit. When another resync
        holds the cart nothing is done and the result has `in_progress` set.
        """
        if not self.enabled:
            return ResyncResult(ok=True, enabled=False)

        if not self.acquire_sync():
            logger.info(f"Full resync for cart {self.cart.pk} refused: another resync is in flight")
            return ResyncResult(ok=False, error='A resync of this cart is already running', in_progress=True)
        started_at = self.cart.sync_started_at

        client = self.get_client()
        synced = 0
        skipped = 0
        result = None
        try:
            self.cart.sync_intents.filter(status=CartSyncIntent.Status.PENDING).update(
                status=CartSyncIntent.Status.SUPERSEDED,
                processed_at=started_at,
            )

            client.clear_all()
            self.cart.items.update(remote_item_key='')

            lines = self.cart.items.select_related('menu_item').order_by('position', 'added_at')
            for line in lines:
                product_id = line.menu_item.woo_product_id
                if product_id is None:
                    skipped += 1
                    continue
                key = client.add_item(product_id, line.quantity, self.item_data_for(line))
                CartItem.objects.filter(pk=line.pk).update(remote_item_key=key)
                synced += 1

            result = ResyncResult(ok=True, synced=synced, skipped=skipped)
            logger.info(f"Full resync for cart {self.cart.pk}: {synced} synced, {skipped} unmapped")
        except WooCommerceError as e:
            logger.error(f"Full resync failed for cart {self.cart.pk} after {synced} lines: {e}")
            result = ResyncResult(ok=False, synced=synced, skipped=skipped, error=str(e))
        finally:
            self._persist_token(client)
            finished = {'is_syncing': False}
            if result is not None and result.ok:
                finished['last_synced_at'] = timezone.now()
            Cart.objects.filter(pk=self.cart.pk).update(**finished)
            self._holds_sync = False
            self.cart.is_syncing = False
            if 'last_synced_at' in finished:
                self.cart.last_synced_at = finished['last_synced_at']

        return result
