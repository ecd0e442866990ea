"""
Custom exceptions for the WooCommerce transport.
"""


class WooCommerceError(Exception):
    """
    Raised on a failed WooCommerce call: network error, timeout, a non-2xx
    response or an unreadable body.
    """

    def __init__(self, message, status_code=None, body=None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

