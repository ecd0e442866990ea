"""
Custom exceptions for checkout.

Every exception carries the HTTP status the API answers with, so views can
translate them with a single except clause.
"""


class CheckoutError(Exception):
    """Base exception for checkout errors."""

    status_code = 400
    default_message = "Checkout failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class EmptyCartError(CheckoutError):
    """Raised when checking out a cart without lines."""

    default_message = "Your cart is empty"


class SyncInProgressError(CheckoutError):
    """Raised when a full resync of the same cart is already running."""

    status_code = 409
    default_message = "Your cart is being prepared for checkout, please wait"


class HandoffFailedError(CheckoutError):
    """Raised when the remote cart could not be rebuilt before checkout."""

    status_code = 503
    default_message = "We could not prepare your cart for checkout. Please try again."

    def __init__(self, message=None, result=None):
        self.result = result
        super().__init__(message)


class InvalidCouponError(CheckoutError):
    """Raised when a coupon code is unknown, expired or used up."""

    default_message = "Coupon not found"


class InvalidTipError(CheckoutError):
    """Raised when a tip rate is not one of the offered options."""

    def __init__(self, tip_rate, message=None):
        self.tip_rate = tip_rate
        super().__init__(message or f"Tip rate {tip_rate} is not available")


class NothingToChargeError(CheckoutError):
    """Raised when a payment intent is requested for a zero total."""

    default_message = "A valid amount greater than $0 is required"


class PaymentNotConfirmedError(CheckoutError):
    """Raised when a paid order arrives without a succeeded PaymentIntent."""

    default_message = "Payment confirmation is required"

    def __init__(self, message=None, payment_status=None):
        self.payment_status = payment_status
        super().__init__(message)


class PaymentConfigurationError(CheckoutError):
    """Raised when Stripe is not configured."""

    status_code = 503
    default_message = "Payment system not configured"


class PaymentProviderError(CheckoutError):
    """Raised when Stripe rejects or fails a request."""

    status_code = 502
    default_message = "Failed to initialize payment"
