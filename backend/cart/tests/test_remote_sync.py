"""
Remote Cart Sync Tests

The CartSyncIntent outbox, its drain against the Store API and the full
resync run at checkout. Remote calls go through FakeStoreClient.
"""

import uuid
from datetime import date, timedelta

import pytest
from django.utils import timezone

from cart.customization import Customization
from cart.models import Cart, CartSyncIntent
from cart.services import CartService
from cart.sync import RemoteCartSynchronizer
from cart.tasks import drain_cart_outbox

THURSDAY = date(2024, 3, 7)
FRIDAY = date(2024, 3, 8)

Action = CartSyncIntent.Action
Status = CartSyncIntent.Status


@pytest.fixture
def synchronizer(cart, fake_store_client):
    return RemoteCartSynchronizer(cart, client=fake_store_client)


def intents(cart):
    return list(CartSyncIntent.objects.filter(cart=cart).order_by('created_at', 'id'))


@pytest.mark.django_db
class TestIntentRecording:

    def test_new_line_records_add(self, cart_service, cart, menu_item):
        cart_service.add_item(cart, menu_item, THURSDAY, Customization(base='Rice'))

        [intent] = intents(cart)
        assert intent.action == Action.ADD
        assert intent.status == Status.PENDING
        assert intent.remote_product_id == 1360
        assert intent.quantity == 1
        assert intent.item_data == [
            {'key': 'Service Date', 'value': 'Thursday, Mar 7'},
            {'key': 'Base', 'value': 'Rice'},
        ]

    def test_merge_records_set_quantity_to_new_total(self, cart_service, cart, menu_item):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, menu_item, THURSDAY)

        actions = [(i.action, i.quantity) for i in intents(cart)]
        assert actions == [(Action.ADD, 1), (Action.SET_QUANTITY, 2)]

    def test_unmapped_item_records_nothing(self, cart_service, cart, unmapped_menu_item):
        line = cart_service.add_item(cart, unmapped_menu_item, THURSDAY)
        cart_service.update_line_quantity(line, 1)
        cart_service.remove_item(cart, unmapped_menu_item.id, THURSDAY)

        assert intents(cart) == []

    def test_decrement_to_zero_records_remove(self, cart_service, cart, menu_item):
        line = cart_service.add_item(cart, menu_item, THURSDAY)
        line_id = line.pk
        cart_service.update_line_quantity(line, -1)

        assert [i.action for i in intents(cart)] == [Action.ADD, Action.REMOVE]
        assert intents(cart)[1].cart_item_id == line_id

    def test_clear_supersedes_pending(self, cart_service, cart, menu_item):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.clear(cart)

        add, clear = intents(cart)
        assert add.status == Status.SUPERSEDED
        assert clear.action == Action.CLEAR
        assert clear.status == Status.PENDING

    def test_drain_scheduled_once_per_mutation(self, cart_service, cart, menu_item, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            cart_service.add_item(cart, menu_item, THURSDAY)

        assert len(callbacks) == 1

    def test_disabled_when_store_not_configured(self, settings, wednesday_clock, cart, menu_item):
        settings.WOOCOMMERCE_STORE_URL = ''
        service = CartService(clock=wednesday_clock)

        service.add_item(cart, menu_item, THURSDAY)

        assert intents(cart) == []


@pytest.mark.django_db
class TestOutboxDrain:

    def test_add_captures_remote_key(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        line = cart_service.add_item(cart, menu_item, THURSDAY)

        counts = synchronizer.drain()

        assert counts[Status.SYNCED] == 1
        line.refresh_from_db()
        assert line.remote_item_key == 'key-1'
        assert fake_store_client.lines['key-1']['quantity'] == 1
        assert intents(cart)[0].status == Status.SYNCED
        assert intents(cart)[0].processed_at is not None

    def test_merge_sets_quantity_instead_of_adding(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, menu_item, THURSDAY)

        synchronizer.drain()

        assert fake_store_client.call_names() == ['add_item', 'set_quantity']
        assert list(fake_store_client.lines) == ['key-1']
        assert fake_store_client.lines['key-1']['quantity'] == 2

    def test_later_drain_uses_stored_line_key(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        line = cart_service.add_item(cart, menu_item, THURSDAY)
        synchronizer.drain()

        cart_service.update_line_quantity(line, 2)
        synchronizer.drain()

        assert fake_store_client.calls[-1] == ('set_quantity', 'key-1', 3)
        assert intents(cart)[-1].remote_item_key == 'key-1'

    def test_remove_after_deleted_line_uses_earlier_intent_key(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        """The line is gone by the time REMOVE drains; the ADD's key is used."""
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.remove_item(cart, menu_item.id, THURSDAY)

        synchronizer.drain()

        assert fake_store_client.call_names() == ['add_item', 'remove_item']
        assert fake_store_client.lines == {}
        assert [i.status for i in intents(cart)] == [Status.SYNCED, Status.SYNCED]

    def test_set_quantity_without_key_adds_whole_line(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        fake_store_client.fail_next = 1
        synchronizer.drain()

        cart_service.add_item(cart, menu_item, THURSDAY)
        synchronizer.drain()

        assert fake_store_client.lines == {
            'key-1': {'id': 1360, 'quantity': 2, 'item_data': [{'key': 'Service Date', 'value': 'Thursday, Mar 7'}]},
        }
        assert cart.items.get().remote_item_key == 'key-1'

    def test_remove_without_key_is_skipped(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        fake_store_client.fail_all = True
        cart_service.add_item(cart, menu_item, THURSDAY)
        synchronizer.drain()

        fake_store_client.fail_all = False
        cart_service.remove_item(cart, menu_item.id, THURSDAY)
        counts = synchronizer.drain()

        assert counts[Status.SKIPPED] == 1
        assert 'remove_item' not in fake_store_client.call_names()

    def test_failure_keeps_local_cart(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        fake_store_client.fail_all = True
        cart_service.add_item(cart, menu_item, THURSDAY)

        counts = synchronizer.drain()

        assert counts[Status.FAILED] == 1
        assert cart.items.get().quantity == 1
        [intent] = intents(cart)
        assert intent.status == Status.FAILED
        assert 'connection refused' in intent.error

    def test_failed_intent_does_not_block_later_ones(self, cart_service, cart, menu_item, second_menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, second_menu_item, THURSDAY)
        fake_store_client.fail_next = 1

        counts = synchronizer.drain()

        assert counts[Status.FAILED] == 1
        assert counts[Status.SYNCED] == 1
        assert [line['id'] for line in fake_store_client.lines.values()] == [1185]

    def test_cart_token_persisted(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)

        synchronizer.drain()

        cart.refresh_from_db()
        assert cart.remote_cart_token == fake_store_client.cart_token
        assert cart.remote_cart_token.startswith('token-')

    def test_token_persisted_even_on_failure(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        fake_store_client.fail_all = True
        cart_service.add_item(cart, menu_item, THURSDAY)

        synchronizer.drain()

        assert Cart.objects.get(pk=cart.pk).remote_cart_token == 'token-1'

    def test_clear_drains_to_clear_all(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        synchronizer.drain()
        cart_service.add_item(cart, menu_item, FRIDAY)
        cart_service.clear(cart)

        synchronizer.drain()

        assert fake_store_client.call_names() == ['add_item', 'clear_all']
        assert fake_store_client.lines == {}

    def test_drain_waits_for_full_resync(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        Cart.objects.filter(pk=cart.pk).update(is_syncing=True, sync_started_at=timezone.now())

        counts = synchronizer.drain()

        assert sum(counts.values()) == 0
        assert fake_store_client.calls == []
        assert intents(cart)[0].status == Status.PENDING

    def test_stale_syncing_flag_is_ignored(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        Cart.objects.filter(pk=cart.pk).update(
            is_syncing=True,
            sync_started_at=timezone.now() - timedelta(seconds=120),
        )

        counts = synchronizer.drain()

        assert counts[Status.SYNCED] == 1

    def test_overlapping_drains_apply_each_intent_once(self, cart_service, cart, menu_item, fake_store_client):
        """A second worker draining the same cart mid-call must not re-send the ADD."""
        overlapping = []
        add_item = fake_store_client.add_item

        def add_item_while_another_worker_drains(product_id, quantity, item_data=None):
            if not overlapping:
                other = RemoteCartSynchronizer(Cart.objects.get(pk=cart.pk), client=fake_store_client)
                overlapping.append(other.drain())
            return add_item(product_id, quantity, item_data)

        fake_store_client.add_item = add_item_while_another_worker_drains
        cart_service.add_item(cart, menu_item, THURSDAY)

        counts = RemoteCartSynchronizer(cart, client=fake_store_client).drain()

        assert counts[Status.SYNCED] == 1
        assert sum(overlapping[0].values()) == 0
        assert len(fake_store_client.lines) == 1
        assert intents(cart)[0].status == Status.SYNCED

    def test_overlapping_drain_leaves_later_intents_in_order(self, cart_service, cart, menu_item, fake_store_client):
        overlapping = []
        add_item = fake_store_client.add_item

        def add_item_while_another_worker_drains(product_id, quantity, item_data=None):
            if not overlapping:
                other = RemoteCartSynchronizer(Cart.objects.get(pk=cart.pk), client=fake_store_client)
                overlapping.append(other.drain())
            return add_item(product_id, quantity, item_data)

        fake_store_client.add_item = add_item_while_another_worker_drains
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, menu_item, THURSDAY)

        counts = RemoteCartSynchronizer(cart, client=fake_store_client).drain()

        assert counts[Status.SYNCED] == 2
        assert sum(overlapping[0].values()) == 0
        assert fake_store_client.call_names() == ['add_item', 'set_quantity']
        assert [line['quantity'] for line in fake_store_client.lines.values()] == [2]

    def test_stale_claim_does_not_block_outbox(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        CartSyncIntent.objects.create(
            cart=cart,
            action=Action.CLEAR,
            status=Status.PROCESSING,
            processed_at=timezone.now() - timedelta(seconds=120),
        )

        counts = synchronizer.drain()

        assert counts[Status.SYNCED] == 1
        assert fake_store_client.call_names() == ['add_item']


@pytest.mark.django_db
class TestResyncFlag:

    def test_only_one_synchronizer_acquires(self, cart, fake_store_client):
        first = RemoteCartSynchronizer(cart, client=fake_store_client)
        second = RemoteCartSynchronizer(Cart.objects.get(pk=cart.pk), client=fake_store_client)

        assert first.acquire_sync() is True
        assert second.acquire_sync() is False
        assert Cart.objects.get(pk=cart.pk).is_syncing is True

    def test_resync_refused_while_flag_held_elsewhere(self, cart_service, cart, menu_item, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        RemoteCartSynchronizer(cart, client=fake_store_client).acquire_sync()

        result = RemoteCartSynchronizer(Cart.objects.get(pk=cart.pk), client=fake_store_client).full_resync()

        assert (result.ok, result.in_progress) == (False, True)
        assert fake_store_client.calls == []
        assert Cart.objects.get(pk=cart.pk).is_syncing is True

    def test_stale_flag_is_taken_over(self, cart, fake_store_client):
        Cart.objects.filter(pk=cart.pk).update(
            is_syncing=True,
            sync_started_at=timezone.now() - timedelta(seconds=120),
        )

        assert RemoteCartSynchronizer(cart, client=fake_store_client).acquire_sync() is True

    def test_flag_released_for_next_resync(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)

        assert synchronizer.full_resync().ok is True
        assert RemoteCartSynchronizer(cart, client=fake_store_client).acquire_sync() is True


@pytest.mark.django_db
class TestFullResync:

    def test_rebuilds_remote_cart_from_local_lines(self, cart_service, cart, menu_item, second_menu_item, synchronizer, fake_store_client):
        """Whatever the remote cart held before, afterwards it mirrors the local lines."""
        fake_store_client.lines['stale-key'] = {'id': 9999, 'quantity': 4, 'item_data': []}
        cart_service.add_item(cart, menu_item, THURSDAY, Customization(base='Rice'))
        cart_service.add_item(cart, menu_item, THURSDAY, Customization(base='Rice'))
        cart_service.add_item(cart, second_menu_item, FRIDAY)

        result = synchronizer.full_resync()

        assert result.ok is True
        assert result.synced == 2
        remote = sorted((line['id'], line['quantity']) for line in fake_store_client.lines.values())
        assert remote == [(1185, 1), (1360, 2)]
        assert 'stale-key' not in fake_store_client.lines
        assert fake_store_client.call_names()[0] == 'clear_all'

    def test_unmapped_lines_are_skipped(self, cart_service, cart, menu_item, unmapped_menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, unmapped_menu_item, THURSDAY)

        result = synchronizer.full_resync()

        assert (result.ok, result.synced, result.skipped) == (True, 1, 1)
        assert [(line['id'], line['quantity']) for line in fake_store_client.lines.values()] == [(1360, 2)]
        # Local totals still include the unmapped dish
        assert cart.get_totals()['item_count'] == 3

    def test_lines_get_fresh_keys_and_pending_intents_superseded(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)

        synchronizer.full_resync()

        assert intents(cart)[0].status == Status.SUPERSEDED
        assert cart.items.get().remote_item_key in fake_store_client.lines
        cart.refresh_from_db()
        assert cart.is_syncing is False
        assert cart.last_synced_at is not None
        assert cart.remote_cart_token == fake_store_client.cart_token

    def test_failure_reports_error_and_releases_flag(self, cart_service, cart, menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        fake_store_client.fail_all = True

        result = synchronizer.full_resync()

        assert result.ok is False
        assert 'connection refused' in result.error
        cart.refresh_from_db()
        assert cart.is_syncing is False
        assert cart.last_synced_at is None
        assert cart.items.count() == 1

    def test_failure_midway_counts_synced_lines(self, cart_service, cart, menu_item, second_menu_item, synchronizer, fake_store_client):
        cart_service.add_item(cart, menu_item, THURSDAY)
        cart_service.add_item(cart, second_menu_item, THURSDAY)

        original_add = fake_store_client.add_item

        def add_then_fail(product_id, quantity, item_data=None):
            if product_id == 1185:
                fake_store_client.fail_next = 1
            return original_add(product_id, quantity, item_data)

        fake_store_client.add_item = add_then_fail
        result = synchronizer.full_resync()

        assert result.ok is False
        assert result.synced == 1

    def test_disabled_store_is_a_noop(self, settings, cart):
        settings.WOOCOMMERCE_STORE_URL = ''

        result = RemoteCartSynchronizer(cart).full_resync()

        assert result.ok is True
        assert result.enabled is False
        cart.refresh_from_db()
        assert cart.is_syncing is False


@pytest.mark.django_db
class TestDrainTask:

    def test_missing_cart_is_skipped(self):
        cart_id = str(uuid.uuid4())

        result = drain_cart_outbox(cart_id)

        assert result == {'status': 'skipped', 'reason': 'cart_not_found', 'cart_id': cart_id}

    def test_drains_cart(self, monkeypatch, cart_service, cart, menu_item, fake_store_client):
        monkeypatch.setattr(
            'cart.tasks.RemoteCartSynchronizer',
            lambda c: RemoteCartSynchronizer(c, client=fake_store_client),
        )
        cart_service.add_item(cart, menu_item, THURSDAY)

        result = drain_cart_outbox(str(cart.id))

        assert result['status'] == 'completed'
        assert result['counts'][Status.SYNCED] == 1
        assert len(fake_store_client.lines) == 1
