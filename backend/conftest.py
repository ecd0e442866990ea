"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytz
from django.core.cache import cache

from woocommerce.exceptions import WooCommerceError

EASTERN = pytz.timezone('America/New_York')

STORE_URL = 'https://shop.test/wp-json/wc/store/v1'


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.

    This ensures tests don't interfere with each other through cached data.
    """
    yield  # Run the test
    cache.clear()  # Clear all cache keys


@pytest.fixture(autouse=True)
def storefront_settings(settings):
    """
    Pin the settings tests rely on, whatever the local .env says.

    WooCommerce is "configured" so the synchronizer records intents, but no
    test talks to a real store: remote calls go through FakeStoreClient or
    mocked sessions.
    """
    settings.WOOCOMMERCE_STORE_URL = STORE_URL
    settings.WOOCOMMERCE_NONCE_URL = ''
    settings.WOOCOMMERCE_URL = ''
    settings.WOOCOMMERCE_CONSUMER_KEY = ''
    settings.WOOCOMMERCE_CONSUMER_SECRET = ''
    settings.WOOCOMMERCE_CHECKOUT_URL = 'https://shop.test/checkout/'
    settings.STRIPE_SECRET_KEY = 'sk_test_storefront'
    settings.CART_NOTICE_SECONDS = 3.5
    settings.CART_SYNC_STALE_SECONDS = 60
    settings.ORDER_WINDOW = {
        'TIMEZONE': 'America/New_York',
        'CUTOFF_HOUR': 10,
        'SERVICE_WEEKDAYS': [0, 1, 2, 3, 4],
        'CALENDAR_HORIZON_DAYS': 30,
        'PREVIEW_ORDERABLE': False,
    }
    return settings


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/cart/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


# ============================================================================
# CLOCK FIXTURES
# ============================================================================

class MutableClock:
    """
    A ServiceClock time source tests can move forward.

    Usage:
        clock = MutableClock(EASTERN.localize(datetime(2024, 3, 6, 9)))
        service_clock = ServiceClock('America/New_York', now_func=clock)
        clock.advance(seconds=5)
    """

    def __init__(self, now):
        self.current = now

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock_at():
    """
    Factory for a ServiceClock pinned to a New York wall time.

    Usage:
        def test_cutoff(clock_at):
            clock = clock_at(2024, 3, 6, 9, 0)
    """
    from availability.clock import ServiceClock

    def make(year, month, day, hour=0, minute=0):
        source = MutableClock(EASTERN.localize(datetime(year, month, day, hour, minute)))
        clock = ServiceClock('America/New_York', now_func=source)
        clock.source = source
        return clock

    return make


@pytest.fixture
def wednesday_clock(clock_at):
    """Wednesday 2024-03-06 09:00 New York, before the cutoff."""
    return clock_at(2024, 3, 6, 9, 0)


@pytest.fixture
def fixed_now(monkeypatch):
    """
    Pin the system clock to Wednesday 2024-03-06 09:00 New York for code that
    builds its own ServiceClock (API views, tasks).
    """
    now = EASTERN.localize(datetime(2024, 3, 6, 9, 0))
    monkeypatch.setattr('availability.clock.system_now', lambda: now)
    return now


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def menu_item(db):
    """A mapped bowl with the full set of customization options."""
    from menu.models import MenuItem
    return MenuItem.objects.create(
        code='bowl-a',
        name='Bowl A',
        description='Test bowl',
        price=Decimal('12.90'),
        woo_product_id=1360,
        customization_options={
            'bases': ['Rice', 'Quinoa'],
            'sauces': ['Tahini', 'No sauce'],
            'has_vegetarian_option': {
                'label': 'Make it vegetarian?',
                'instructions': 'Replace protein with mushrooms',
            },
            'dislikes': ['No tomato', 'No cucumber'],
        },
    )


@pytest.fixture
def second_menu_item(db):
    from menu.models import MenuItem
    return MenuItem.objects.create(
        code='bowl-b',
        name='Bowl B',
        price=Decimal('15.90'),
        woo_product_id=1185,
    )


@pytest.fixture
def unmapped_menu_item(db):
    """A dish with no WooCommerce product, never sent to the remote cart."""
    from menu.models import MenuItem
    return MenuItem.objects.create(
        code='side-salad',
        name='Side Salad',
        price=Decimal('5.00'),
        woo_product_id=None,
    )


@pytest.fixture
def weekly_menu(db):
    """Load the bundled weekly menu."""
    from django.core.management import call_command
    call_command('load_weekly_menu')


# ============================================================================
# CART FIXTURES
# ============================================================================

@pytest.fixture
def cart(db):
    from cart.models import Cart
    return Cart.objects.create(session_id='guest_test0001')


class FakeStoreClient:
    """
    In-memory stand-in for WooStoreClient.

    Keeps remote lines in a dict keyed by item key, rotates the Cart-Token on
    every call and can be told to fail the next N calls (or all of them).
    """

    def __init__(self):
        self.lines = {}
        self.calls = []
        self.cart_token = ''
        self.fail_all = False
        self.fail_next = 0
        self._keys = itertools.count(1)
        self._tokens = itertools.count(1)

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        self.cart_token = f"token-{next(self._tokens)}"
        if self.fail_all or self.fail_next > 0:
            self.fail_next = max(0, self.fail_next - 1)
            raise WooCommerceError(f"Store API {name} failed: connection refused")

    def add_item(self, product_id, quantity, item_data=None):
        self._call('add_item', product_id, quantity)
        key = f"key-{next(self._keys)}"
        self.lines[key] = {'id': product_id, 'quantity': quantity, 'item_data': list(item_data or [])}
        return key

    def set_quantity(self, key, quantity):
        self._call('set_quantity', key, quantity)
        if key not in self.lines:
            raise WooCommerceError("Store API update-item returned 404", status_code=404)
        self.lines[key]['quantity'] = quantity

    def remove_item(self, key):
        self._call('remove_item', key)
        if key not in self.lines:
            raise WooCommerceError("Store API remove-item returned 404", status_code=404)
        del self.lines[key]

    def clear_all(self):
        self._call('clear_all')
        self.lines.clear()

    def get_cart(self):
        self._call('get_cart')
        return {'items': [dict(key=key, **line) for key, line in self.lines.items()]}

    def call_names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_store_client():
    return FakeStoreClient()


@pytest.fixture
def cart_service(wednesday_clock, fake_store_client):
    """
    CartService on the Wednesday clock whose synchronizers share the fake
    Store API client.
    """
    from cart.services import CartService
    from cart.sync import RemoteCartSynchronizer

    def synchronizer(cart):
        return RemoteCartSynchronizer(cart, client=fake_store_client)

    return CartService(clock=wednesday_clock, synchronizer_class=synchronizer)
