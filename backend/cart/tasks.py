from celery import shared_task
from django.conf import settings
import logging

from .models import Cart
from .services import CartService
from .sync import RemoteCartSynchronizer

logger = logging.getLogger(__name__)


@shared_task
def drain_cart_outbox(cart_id):
    """
    Push a cart's pending sync intents to WooCommerce.

    Queued on commit of every cart mutation. Remote failures are recorded
    on the intents by the synchronizer, so this task never retries.

    Args:
        cart_id: UUID of the cart

    Returns:
        dict: Status and per-status intent counts
    """
    try:
        cart = Cart.objects.get(id=cart_id)
    except Cart.DoesNotExist:
        logger.info(f"Cart {cart_id} no longer exists, nothing to drain")
        return {
            "status": "skipped",
            "reason": "cart_not_found",
            "cart_id": str(cart_id)
        }

    counts = RemoteCartSynchronizer(cart).drain()
    return {
        "status": "completed",
        "cart_id": str(cart_id),
        "counts": counts
    }


@shared_task
def cleanup_abandoned_carts(hours=None):
    """
    Periodic task deleting carts idle for longer than CART_ABANDONED_AFTER_HOURS.
    """
    hours = hours or settings.CART_ABANDONED_AFTER_HOURS
    deleted = CartService.cleanup_abandoned_carts(hours=hours)
    return {
        "status": "completed",
        "deleted": deleted,
        "hours": hours
    }
