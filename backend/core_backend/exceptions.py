"""
Project-wide DRF exception handler.
"""
import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def storefront_exception_handler(exc, context):
    """
    Defer to DRF's default handler, then log the failure with request
    details so API errors show up next to the cart/sync logs.
    """
    response = exception_handler(exc, context)

    request = context.get('request')
    if response is not None and request is not None:
        log = logger.warning if response.status_code < 500 else logger.error
        log(
            f"API error: {exc.__class__.__name__}",
            extra={
                'status_code': response.status_code,
                'path': request.path,
                'method': request.method,
            }
        )

    return response
