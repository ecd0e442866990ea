"""
Custom exceptions for the cart.
"""


class CartError(Exception):
    """Base exception for cart errors."""
    pass


class PastDateError(CartError):
    """Raised when a selection targets a service date before today."""

    default_message = "Selection is not available for past dates."

    def __init__(self, service_date, message=None):
        self.service_date = service_date
        super().__init__(message or self.default_message)


class InvalidCustomizationError(CartError):
    """Raised when a customization payload is malformed or not offered for the item."""

    def __init__(self, message, errors=None):
        self.errors = errors or {}
        super().__init__(message)
