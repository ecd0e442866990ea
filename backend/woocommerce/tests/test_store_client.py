"""
WooCommerce Client Tests

Store API and REST API clients against a mocked requests session.
"""

import json
from unittest.mock import Mock

import pytest
import requests

from woocommerce.clients import WooRestClient, WooStoreClient
from woocommerce.exceptions import WooCommerceError

STORE_URL = 'https://shop.test/wp-json/wc/store/v1'


def make_response(status_code=200, body=None, headers=None, raw=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = STORE_URL
    if raw is not None:
        response._content = raw.encode()
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b''
    response.headers.update(headers or {})
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def store_client(session):
    return WooStoreClient(STORE_URL, cart_token='token-0', session=session, timeout=5)


class TestStoreRequests:

    def test_add_item_posts_payload_with_token(self, store_client, session):
        session.request.return_value = make_response(body={'key': 'abc123'})
        item_data = [{'key': 'Service Date', 'value': 'Thursday, Mar 7'}]

        key = store_client.add_item(1360, 2, item_data)

        assert key == 'abc123'
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == 'POST'
        assert url == f'{STORE_URL}/cart/add-item'
        assert kwargs['json'] == {'id': 1360, 'quantity': 2, 'item_data': item_data}
        assert kwargs['headers']['Cart-Token'] == 'token-0'
        assert kwargs['timeout'] == 5

    def test_rotated_token_is_captured(self, store_client, session):
        session.request.return_value = make_response(body={'key': 'abc'}, headers={'Cart-Token': 'token-1'})

        store_client.add_item(1360, 1)

        assert store_client.cart_token == 'token-1'

    def test_no_token_header_without_token(self, session):
        client = WooStoreClient(STORE_URL, session=session)
        session.request.return_value = make_response(body={'items': []})

        client.get_cart()

        assert 'Cart-Token' not in session.request.call_args.kwargs['headers']

    def test_quantity_remove_and_clear_endpoints(self, store_client, session):
        session.request.return_value = make_response(body={})

        store_client.set_quantity('abc', 3)
        store_client.remove_item('abc')
        store_client.clear_all()

        calls = [(c.args[0], c.args[1], c.kwargs['json']) for c in session.request.call_args_list]
        assert calls == [
            ('POST', f'{STORE_URL}/cart/update-item', {'key': 'abc', 'quantity': 3}),
            ('POST', f'{STORE_URL}/cart/remove-item', {'key': 'abc'}),
            ('DELETE', f'{STORE_URL}/cart/items', None),
        ]

    def test_empty_body_is_empty_dict(self, store_client, session):
        session.request.return_value = make_response(status_code=204)

        assert store_client.get_cart() == {}


class TestNonce:

    def test_nonce_fetched_once_and_sent_on_writes(self, session):
        client = WooStoreClient(STORE_URL, nonce_url='https://shop.test/nonce', session=session)
        session.get.return_value = make_response(body={'nonce': 'n-1'})
        session.request.return_value = make_response(body={})

        client.set_quantity('abc', 1)
        client.remove_item('abc')

        assert session.get.call_count == 1
        assert session.request.call_args.kwargs['headers']['X-WC-Store-API-Nonce'] == 'n-1'

    def test_nonce_not_sent_on_reads(self, session):
        client = WooStoreClient(STORE_URL, nonce_url='https://shop.test/nonce', session=session)
        session.request.return_value = make_response(body={'items': []})

        client.get_cart()

        session.get.assert_not_called()
        assert 'X-WC-Store-API-Nonce' not in session.request.call_args.kwargs['headers']

    def test_nonce_failure_is_not_fatal(self, session):
        client = WooStoreClient(STORE_URL, nonce_url='https://shop.test/nonce', session=session)
        session.get.side_effect = requests.exceptions.ConnectionError('down')
        session.request.return_value = make_response(body={})

        client.clear_all()

        assert 'X-WC-Store-API-Nonce' not in session.request.call_args.kwargs['headers']

    def test_nonce_refreshed_from_response(self, store_client, session):
        session.request.return_value = make_response(body={}, headers={'Nonce': 'n-2'})

        store_client.clear_all()
        store_client.clear_all()

        assert session.request.call_args.kwargs['headers']['X-WC-Store-API-Nonce'] == 'n-2'


class TestStoreErrors:

    def test_connection_error(self, store_client, session):
        session.request.side_effect = requests.exceptions.Timeout('timed out')

        with pytest.raises(WooCommerceError) as exc_info:
            store_client.clear_all()

        assert 'timed out' in str(exc_info.value)
        assert exc_info.value.status_code is None

    def test_error_status(self, store_client, session):
        session.request.return_value = make_response(
            status_code=404,
            body={'code': 'woocommerce_rest_cart_invalid_key'},
            headers={'Cart-Token': 'token-9'},
        )

        with pytest.raises(WooCommerceError) as exc_info:
            store_client.remove_item('missing')

        assert exc_info.value.status_code == 404
        assert 'woocommerce_rest_cart_invalid_key' in exc_info.value.body
        # The rotated token is kept even on failure
        assert store_client.cart_token == 'token-9'

    def test_non_json_body(self, store_client, session):
        session.request.return_value = make_response(raw='<html>maintenance</html>')

        with pytest.raises(WooCommerceError):
            store_client.get_cart()

    def test_not_configured(self, session):
        client = WooStoreClient('', session=session)

        with pytest.raises(WooCommerceError):
            client.get_cart()
        session.request.assert_not_called()

    def test_add_without_key_raises(self, store_client, session):
        session.request.return_value = make_response(body={'items': []})

        with pytest.raises(WooCommerceError):
            store_client.add_item(1360, 1)


class TestExtractItemKey:

    def test_matching_item_data_wins(self):
        data = {'items': [
            {'key': 'k1', 'id': 1360, 'item_data': [{'key': 'Base', 'value': 'Rice'}]},
            {'key': 'k2', 'id': 1360, 'item_data': [{'key': 'Base', 'value': 'Quinoa'}]},
            {'key': 'k3', 'id': 1185, 'item_data': [{'key': 'Base', 'value': 'Rice'}]},
        ]}

        key = WooStoreClient._extract_item_key(data, 1360, [{'key': 'Base', 'value': 'Rice'}])

        assert key == 'k1'

    def test_falls_back_to_newest_for_product(self):
        data = {'items': [
            {'key': 'k1', 'id': 1360, 'item_data': []},
            {'key': 'k2', 'id': 1360, 'item_data': []},
        ]}

        assert WooStoreClient._extract_item_key(data, 1360, [{'key': 'Base', 'value': 'Rice'}]) == 'k2'

    def test_item_key_field(self):
        assert WooStoreClient._extract_item_key({'item_key': 'k9'}, 1360, []) == 'k9'

    def test_unrelated_payload(self):
        assert WooStoreClient._extract_item_key([], 1360, []) == ''


class TestRestClient:

    @pytest.fixture
    def rest_client(self, session):
        return WooRestClient('https://shop.test', 'ck_test', 'cs_test', session=session, timeout=5)

    def test_create_order(self, rest_client, session):
        session.request.return_value = make_response(status_code=201, body={'id': 501, 'number': '501'})

        order = rest_client.create_order({'status': 'processing'})

        assert order['id'] == 501
        method, url = session.request.call_args.args
        assert method == 'POST'
        assert url == 'https://shop.test/wp-json/wc/v3/orders'
        assert session.request.call_args.kwargs['auth'] == ('ck_test', 'cs_test')

    def test_find_coupon(self, rest_client, session):
        session.request.return_value = make_response(body=[{'code': 'save10', 'amount': '10'}])

        coupon = rest_client.find_coupon('SAVE10')

        assert coupon['code'] == 'save10'
        assert session.request.call_args.kwargs['params'] == {'code': 'SAVE10'}

    def test_find_coupon_missing(self, rest_client, session):
        session.request.return_value = make_response(body=[])

        assert rest_client.find_coupon('NOPE') is None

    def test_http_error(self, rest_client, session):
        session.request.return_value = make_response(status_code=500, body={'message': 'boom'})

        with pytest.raises(WooCommerceError) as exc_info:
            rest_client.create_order({})

        assert exc_info.value.status_code == 500

    def test_not_configured(self, session):
        client = WooRestClient('https://shop.test', '', '', session=session)

        assert client.is_configured is False
        with pytest.raises(WooCommerceError):
            client.find_coupon('SAVE10')
