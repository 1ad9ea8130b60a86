"""
Tests for the local cart store
"""

import asyncio
import pytest
from decimal import Decimal

from shared.cart.client import StorefrontClientError
from shared.cart.models import CheckoutSession
from shared.cart.persistence import MemoryCartStorage, PersistedCartState, dump_cart_state
from shared.cart.store import OUTDATED_CART_MESSAGE, CartStore
from shared.cart.utils import build_cart

from .conftest import SWEATER_ID, TOTE_ID, make_item, make_persistent


def _store_with(api, items, has_session=False):
    storage = MemoryCartStorage(dump_cart_state(PersistedCartState(cart=build_cart(items))))
    store = CartStore(api=api, storage=storage)
    if has_session:
        store._set(has_persistent_cart_session=True)
    return store


class TestMutations:
    """Tests for local cart mutations."""

    def test_add_twice_increments(self, mock_cart_api, sweater):
        store = CartStore(api=mock_cart_api)

        store.add_to_cart(sweater)
        store.add_to_cart(sweater)

        assert len(store.cart.items) == 1
        assert store.cart.items[0].quantity == 2
        assert store.cart.item_count == 2
        assert store.cart.total == Decimal("178.00")
        assert store.state.is_open is True
        mock_cart_api.replace_cart.assert_not_called()

    def test_add_forces_single_unit(self, mock_cart_api, sweater):
        store = CartStore(api=mock_cart_api)
        store.add_to_cart(sweater.model_copy(update={"quantity": 5}))
        assert store.cart.items[0].quantity == 1

    def test_add_normalizes_id(self, mock_cart_api):
        store = CartStore(api=mock_cart_api)
        store.add_to_cart(make_item(SWEATER_ID, id="line-7"))
        assert store.cart.items[0].id == SWEATER_ID

    def test_update_quantity(self, mock_cart_api, sweater, tote):
        store = _store_with(mock_cart_api, [sweater, tote])

        store.update_quantity(SWEATER_ID, 4)

        assert store.cart.items[0].quantity == 4
        assert store.cart.item_count == 5

    def test_update_quantity_zero_removes(self, mock_cart_api, sweater, tote):
        store = _store_with(mock_cart_api, [sweater, tote])

        store.update_quantity(SWEATER_ID, 0)

        assert [item.id for item in store.cart.items] == [TOTE_ID]

    def test_remove_unknown_is_noop(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [sweater])
        store.remove_from_cart("gid://platform/ProductVariant/9999")
        assert len(store.cart.items) == 1

    def test_clear_and_toggle(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [sweater])

        store.toggle_cart()
        assert store.state.is_open is True
        store.clear_cart()

        assert store.cart.items == []
        assert store.cart.total == Decimal("0")
        store.close_cart()
        assert store.state.is_open is False

    def test_mutations_persisted(self, mock_cart_api, sweater):
        storage = MemoryCartStorage()
        store = CartStore(api=mock_cart_api, storage=storage)

        store.add_to_cart(sweater)

        reloaded = CartStore(api=mock_cart_api, storage=storage)
        assert reloaded.cart.items[0].id == SWEATER_ID
        assert reloaded.state.is_open is True
        assert reloaded.state.has_persistent_cart_session is False

    def test_subscribe(self, mock_cart_api, sweater):
        store = CartStore(api=mock_cart_api)
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.add_to_cart(sweater)
        unsubscribe()
        store.close_cart()

        assert len(seen) == 1
        assert seen[0].cart.item_count == 1

    def test_failing_listener_does_not_break_mutation(self, mock_cart_api, sweater):
        store = CartStore(api=mock_cart_api)

        def broken(state):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.add_to_cart(sweater)

        assert store.cart.item_count == 1


class TestSync:
    """Tests for background persistent cart sync."""

    @pytest.mark.asyncio
    async def test_mutation_dispatches_sync(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [], has_session=True)

        store.add_to_cart(sweater)
        await store.wait_for_pending_syncs()

        mock_cart_api.replace_cart.assert_awaited_once()
        sent = mock_cart_api.replace_cart.await_args.args[0]
        assert [(item.id, item.quantity) for item in sent] == [(SWEATER_ID, 1)]

    @pytest.mark.asyncio
    async def test_sync_uses_snapshot_at_dispatch(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [], has_session=True)

        store.add_to_cart(sweater)
        store.add_to_cart(sweater)
        await store.wait_for_pending_syncs()

        quantities = [
            call.args[0][0].quantity for call in mock_cart_api.replace_cart.await_args_list
        ]
        assert sorted(quantities) == [1, 2]

    @pytest.mark.asyncio
    async def test_sync_failure_is_logged_not_raised(self, mock_cart_api, sweater):
        mock_cart_api.replace_cart.side_effect = StorefrontClientError("Failed to persist cart.", 500)
        store = _store_with(mock_cart_api, [], has_session=True)

        store.add_to_cart(sweater)
        await store.wait_for_pending_syncs()

        assert store.cart.item_count == 1

    @pytest.mark.asyncio
    async def test_sync_sends_only_valid_items(self, mock_cart_api, sweater, legacy_item):
        store = _store_with(mock_cart_api, [legacy_item], has_session=True)

        await store.sync_persistent_cart()

        sent = mock_cart_api.replace_cart.await_args.args[0]
        assert sent == []

    @pytest.mark.asyncio
    async def test_no_sync_after_disable(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [], has_session=True)

        store.disable_persistent_cart()
        store.add_to_cart(sweater)
        await store.wait_for_pending_syncs()

        mock_cart_api.replace_cart.assert_not_called()


class TestHydrate:
    """Tests for reconciling with the server cart."""

    @pytest.mark.asyncio
    async def test_empty_remote_receives_local_items(self, mock_cart_api, sweater, tote):
        mock_cart_api.fetch_cart.return_value = make_persistent([])
        store = _store_with(mock_cart_api, [sweater, tote])

        await store.hydrate_persistent_cart()

        mock_cart_api.replace_cart.assert_awaited_once()
        sent = mock_cart_api.replace_cart.await_args.args[0]
        assert sorted(item.id for item in sent) == sorted([SWEATER_ID, TOTE_ID])
        assert store.cart.item_count == 2
        assert store.state.has_persistent_cart_session is True
        assert store.state.is_syncing_persistent_cart is False

    @pytest.mark.asyncio
    async def test_equal_carts_skip_write(self, mock_cart_api, sweater):
        mock_cart_api.fetch_cart.return_value = make_persistent([sweater])
        store = _store_with(mock_cart_api, [sweater])

        await store.hydrate_persistent_cart()

        mock_cart_api.replace_cart.assert_not_called()
        assert store.state.has_persistent_cart_session is True
        assert store.cart.item_count == 1

    @pytest.mark.asyncio
    async def test_empty_local_adopts_remote(self, mock_cart_api, tote):
        mock_cart_api.fetch_cart.return_value = make_persistent([tote.model_copy(update={"quantity": 3})])
        store = _store_with(mock_cart_api, [])

        await store.hydrate_persistent_cart()

        mock_cart_api.replace_cart.assert_not_called()
        assert store.cart.items[0].id == TOTE_ID
        assert store.cart.item_count == 3

    @pytest.mark.asyncio
    async def test_overlapping_carts_merged_additively(self, mock_cart_api, sweater, tote):
        mock_cart_api.fetch_cart.return_value = make_persistent([sweater])
        store = _store_with(mock_cart_api, [sweater, tote])

        await store.hydrate_persistent_cart()

        sent = {item.id: item.quantity for item in mock_cart_api.replace_cart.await_args.args[0]}
        assert sent == {SWEATER_ID: 2, TOTE_ID: 1}
        assert store.cart.item_count == 3

    @pytest.mark.asyncio
    async def test_only_invalid_local_items_keeps_remote(self, mock_cart_api, sweater, legacy_item):
        mock_cart_api.fetch_cart.return_value = make_persistent([sweater])
        store = _store_with(mock_cart_api, [legacy_item])

        await store.hydrate_persistent_cart()

        mock_cart_api.replace_cart.assert_not_called()
        assert [item.id for item in store.cart.items] == [SWEATER_ID]

    @pytest.mark.asyncio
    async def test_fetch_failure_disables_session(self, mock_cart_api, sweater):
        mock_cart_api.fetch_cart.side_effect = StorefrontClientError("Failed to load cart.", 500)
        store = _store_with(mock_cart_api, [sweater], has_session=True)

        await store.hydrate_persistent_cart()

        assert store.state.has_persistent_cart_session is False
        assert store.state.is_syncing_persistent_cart is False
        assert store.cart.item_count == 1

    @pytest.mark.asyncio
    async def test_anonymous_disables_session(self, mock_cart_api, sweater):
        store = _store_with(mock_cart_api, [sweater])

        await store.hydrate_persistent_cart()

        assert store.state.has_persistent_cart_session is False
        mock_cart_api.replace_cart.assert_not_called()

    @pytest.mark.asyncio
    async def test_push_failure_keeps_local_merge(self, mock_cart_api, sweater, tote):
        mock_cart_api.fetch_cart.return_value = make_persistent([sweater])
        mock_cart_api.replace_cart.side_effect = StorefrontClientError("Failed to persist cart.", 500)
        store = _store_with(mock_cart_api, [tote])

        await store.hydrate_persistent_cart()

        assert {item.id for item in store.cart.items} == {SWEATER_ID, TOTE_ID}
        assert store.state.has_persistent_cart_session is True

    @pytest.mark.asyncio
    async def test_repeated_hydrate_does_not_double_count(self, mock_cart_api, sweater):
        remote = {"cart": make_persistent([])}

        def replace(items):
            remote["cart"] = make_persistent(items)
            return remote["cart"]

        mock_cart_api.fetch_cart.side_effect = lambda: remote["cart"]
        mock_cart_api.replace_cart.side_effect = replace
        store = _store_with(mock_cart_api, [sweater.model_copy(update={"quantity": 2})])

        await store.hydrate_persistent_cart()
        first_count = store.cart.item_count
        await store.hydrate_persistent_cart()

        assert first_count == 2
        assert store.cart.item_count == 2
        assert mock_cart_api.replace_cart.await_count == 1

    @pytest.mark.asyncio
    async def test_mutation_during_merge_push_is_kept(self, mock_cart_api, sweater, tote):
        push_started = asyncio.Event()
        release_push = asyncio.Event()

        async def held_replace(items):
            push_started.set()
            await release_push.wait()
            return make_persistent(items)

        mock_cart_api.fetch_cart.return_value = make_persistent([])
        mock_cart_api.replace_cart.side_effect = held_replace
        store = CartStore(api=mock_cart_api)
        store.add_to_cart(sweater)

        hydrate = asyncio.create_task(store.hydrate_persistent_cart())
        await push_started.wait()
        store.add_to_cart(tote)
        release_push.set()
        await hydrate
        await store.wait_for_pending_syncs()

        assert {item.id: item.quantity for item in store.cart.items} == {SWEATER_ID: 1, TOTE_ID: 1}
        assert store.state.has_persistent_cart_session is True
        assert mock_cart_api.replace_cart.await_count == 2
        resent = mock_cart_api.replace_cart.await_args.args[0]
        assert {item.id for item in resent} == {SWEATER_ID, TOTE_ID}


class TestCheckout:
    """Tests for checkout from the store."""

    @pytest.mark.asyncio
    async def test_success_clears_without_sync(self, mock_cart_api, sweater):
        mock_cart_api.create_checkout.return_value = CheckoutSession(
            checkout_url="https://shop.test/checkouts/xyz",
        )
        store = _store_with(mock_cart_api, [sweater], has_session=True)
        store.toggle_cart()

        result = await store.checkout()
        await store.wait_for_pending_syncs()

        assert result.success is True
        assert result.checkout_url == "https://shop.test/checkouts/xyz"
        assert store.cart.items == []
        assert store.state.is_open is False
        mock_cart_api.replace_cart.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_cart(self, mock_cart_api):
        store = CartStore(api=mock_cart_api)

        result = await store.checkout()

        assert result.success is False
        assert result.error == "Cart is empty"
        mock_cart_api.create_checkout.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_invalid_items(self, mock_cart_api, legacy_item):
        store = _store_with(mock_cart_api, [legacy_item])

        result = await store.checkout()

        assert result.success is False
        assert result.error == OUTDATED_CART_MESSAGE
        assert store.cart.items == []
        mock_cart_api.create_checkout.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_items_healed_before_checkout(self, mock_cart_api, sweater, legacy_item):
        mock_cart_api.create_checkout.return_value = CheckoutSession(checkout_url="https://shop.test/c/1")
        store = _store_with(mock_cart_api, [sweater, legacy_item])

        result = await store.checkout()

        assert result.success is True
        sent = mock_cart_api.create_checkout.await_args.args[0]
        assert [item.id for item in sent] == [SWEATER_ID]

    @pytest.mark.asyncio
    async def test_failure_preserves_cart(self, mock_cart_api, sweater):
        mock_cart_api.create_checkout.side_effect = StorefrontClientError("Failed to process checkout", 500)
        store = _store_with(mock_cart_api, [sweater])

        result = await store.checkout()

        assert result.success is False
        assert result.error == "Failed to process checkout"
        assert store.cart.item_count == 1
