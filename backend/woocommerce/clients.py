"""
HTTP clients for WooCommerce.

WooStoreClient talks to the Store API (the shopper's cart session, addressed
by a rotating Cart-Token). WooRestClient talks to the authenticated REST API
v3 (orders and coupons). Every call carries an explicit timeout and raises
WooCommerceError on failure; callers decide whether to swallow it.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from .exceptions import WooCommerceError

logger = logging.getLogger(__name__)


def _error_body(response) -> str:
    return (response.text or '')[:500]


class WooStoreClient:
    """
    Store API cart client.

    The Cart-Token returned by WooCommerce may change on any response; the
    client keeps the latest one in `cart_token` so the caller can persist it
    and hand it back on the next call.
    """

    CART_TOKEN_HEADER = 'Cart-Token'
    NONCE_HEADER = 'X-WC-Store-API-Nonce'

    def __init__(
        self,
        base_url: str,
        cart_token: str = '',
        nonce_url: str = '',
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or '').rstrip('/')
        self.cart_token = cart_token or ''
        self.nonce_url = nonce_url or ''
        self.timeout = timeout
        self.session = session or requests.Session()
        self._nonce: Optional[str] = None

    @classmethod
    def from_settings(cls, cart_token: str = '') -> 'WooStoreClient':
        return cls(
            base_url=settings.WOOCOMMERCE_STORE_URL,
            cart_token=cart_token,
            nonce_url=settings.WOOCOMMERCE_NONCE_URL,
            timeout=settings.WOOCOMMERCE_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def _get_nonce(self) -> str:
        """
        Fetch the Store API nonce once per client.

        A missing nonce is not fatal: stores that do not enforce it accept
        token-only requests, so failures here are logged and ignored.
        """
        if self._nonce is not None:
            return self._nonce
        self._nonce = ''
        if not self.nonce_url:
            return self._nonce
        try:
            response = self.session.get(self.nonce_url, timeout=self.timeout)
            response.raise_for_status()
            self._nonce = response.json().get('nonce', '') or ''
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Could not fetch Store API nonce from {self.nonce_url}: {e}")
        return self._nonce

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        if not self.is_configured:
            raise WooCommerceError("WooCommerce Store API is not configured")

        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {'Accept': 'application/json', 'Content-Type': 'application/json'}
        if self.cart_token:
            headers[self.CART_TOKEN_HEADER] = self.cart_token
        if method != 'GET':
            nonce = self._get_nonce()
            if nonce:
                headers[self.NONCE_HEADER] = nonce

        try:
            response = self.session.request(
                method, url, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise WooCommerceError(f"Store API {method} {path} failed: {e}") from e

        token = response.headers.get(self.CART_TOKEN_HEADER)
        if token:
            self.cart_token = token
        nonce = response.headers.get('Nonce')
        if nonce:
            self._nonce = nonce

        if not response.ok:
            raise WooCommerceError(
                f"Store API {method} {path} returned {response.status_code}",
                status_code=response.status_code,
                body=_error_body(response),
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise WooCommerceError(
                f"Store API {method} {path} returned a non-JSON body",
                status_code=response.status_code,
                body=_error_body(response),
            ) from e

    @staticmethod
    def _extract_item_key(data: Any, product_id: int, item_data: List[Dict[str, str]]) -> str:
        """
        Find the cart item key in an add-item response.

        Some stores answer with the item itself, the Store API answers with
        the whole cart; in that case the newest item for the product with the
        same item data wins, falling back to the newest item for the product.
        """
        if not isinstance(data, dict):
            return ''
        for field in ('key', 'item_key'):
            if data.get(field) and 'items' not in data:
                return str(data[field])

        candidates = [item for item in data.get('items') or [] if item.get('id') == product_id]
        for item in reversed(candidates):
            if (item.get('item_data') or []) == item_data:
                return str(item.get('key') or item.get('item_key') or '')
        if candidates:
            last = candidates[-1]
            return str(last.get('key') or last.get('item_key') or '')
        return ''

    def add_item(self, product_id: int, quantity: int, item_data: Optional[List[Dict[str, str]]] = None) -> str:
        """
        Add a product to the remote cart.

        Returns:
            the remote cart item key

        Raises:
            WooCommerceError: when the call fails or no key can be found
        """
        item_data = item_data or []
        data = self._request('POST', 'cart/add-item', {
            'id': product_id,
            'quantity': quantity,
            'item_data': item_data,
        })
        key = self._extract_item_key(data, product_id, item_data)
        if not key:
            raise WooCommerceError(f"Store API add-item for product {product_id} returned no item key")
        return key

    def set_quantity(self, key: str, quantity: int) -> None:
        self._request('POST', 'cart/update-item', {'key': key, 'quantity': quantity})

    def remove_item(self, key: str) -> None:
        self._request('POST', 'cart/remove-item', {'key': key})

    def clear_all(self) -> None:
        self._request('DELETE', 'cart/items')

    def get_cart(self) -> Dict[str, Any]:
        return self._request('GET', 'cart')


class WooRestClient:
    """WooCommerce REST API v3 client (consumer key/secret auth)."""

    API_PREFIX = 'wp-json/wc/v3'

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or '').rstrip('/')
        self.consumer_key = consumer_key or ''
        self.consumer_secret = consumer_secret or ''
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> 'WooRestClient':
        return cls(
            base_url=settings.WOOCOMMERCE_URL,
            consumer_key=settings.WOOCOMMERCE_CONSUMER_KEY,
            consumer_secret=settings.WOOCOMMERCE_CONSUMER_SECRET,
            timeout=settings.WOOCOMMERCE_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.consumer_key and self.consumer_secret)

    def _request(self, method: str, path: str, payload=None, params=None) -> Any:
        if not self.is_configured:
            raise WooCommerceError("WooCommerce REST API is not configured")

        url = f"{self.base_url}/{self.API_PREFIX}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                params=params,
                auth=(self.consumer_key, self.consumer_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise WooCommerceError(
                f"REST API {method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
                body=_error_body(e.response),
            ) from e
        except requests.exceptions.RequestException as e:
            raise WooCommerceError(f"REST API {method} {path} failed: {e}") from e
        except ValueError as e:
            raise WooCommerceError(f"REST API {method} {path} returned a non-JSON body") from e

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', 'orders', payload=payload)

    def find_coupon(self, code: str) -> Optional[Dict[str, Any]]:
        """Look a coupon up by code; None when WooCommerce has no such coupon."""
        coupons = self._request('GET', 'coupons', params={'code': code})
        if isinstance(coupons, list) and coupons:
            return coupons[0]
        return None
