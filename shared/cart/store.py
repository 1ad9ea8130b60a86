"""
Local Cart Store

Optimistic, persisted, observable cart state. Every mutation applies to
local state first; when a persistent (server-side) cart session exists the
store then fires an independent background sync. Syncs are not queued: each
one sends the local snapshot taken when it was dispatched, so the remote cart
converges to the last-dispatched view (last writer wins).
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from .models import Cart, CartItem
from .persistence import (
    CartStorage,
    MemoryCartStorage,
    PersistedCartState,
    dump_cart_state,
    load_cart_state,
)
from .utils import (
    build_cart,
    empty_cart,
    filter_checkout_items,
    is_valid_checkout_item,
    item_lists_equal,
    merge_item_lists,
    normalize_item,
    normalize_items,
)

logger = logging.getLogger(__name__)

OUTDATED_CART_MESSAGE = (
    "Your cart had outdated items and was refreshed. Please add products again."
)


@dataclass(frozen=True)
class CartStoreState:
    """Snapshot of the store"""
    cart: Cart = field(default_factory=empty_cart)
    is_open: bool = False
    is_syncing_persistent_cart: bool = False
    has_persistent_cart_session: bool = False


@dataclass
class CheckoutResult:
    """Outcome of CartStore.checkout"""
    success: bool
    checkout_url: Optional[str] = None
    error: Optional[str] = None


Listener = Callable[[CartStoreState], Any]


class CartStore:
    """
    Cart state container for one application instance.

    `api` is the persistent cart collaborator; it must provide
    `fetch_cart()`, `replace_cart(items)` and `create_checkout(items)`
    coroutines (StorefrontCartClient does).

    Usage:
        store = CartStore(api=client, storage=JSONFileCartStorage(data_dir))
        store.add_to_cart(item)
        await store.hydrate_persistent_cart()
        result = await store.checkout()
    """

    def __init__(self, api: Any, storage: Optional[CartStorage] = None):
        self._api = api
        self._storage = storage or MemoryCartStorage()
        persisted = load_cart_state(self._storage)
        self._state = CartStoreState(cart=persisted.cart, is_open=persisted.is_open)
        self._listeners: list[Listener] = []
        self._sync_tasks: set[asyncio.Task] = set()

    # ==================== State ====================

    @property
    def state(self) -> CartStoreState:
        return self._state

    @property
    def cart(self) -> Cart:
        return self._state.cart

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(state)` after every change; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)

        if "cart" in changes or "is_open" in changes:
            self._persist()

        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Cart store listener failed")

    def _persist(self) -> None:
        envelope = dump_cart_state(
            PersistedCartState(cart=self._state.cart, is_open=self._state.is_open)
        )
        try:
            self._storage.save(envelope)
        except OSError as e:
            logger.error(f"Failed to persist cart state: {e}")

    # ==================== Mutations ====================

    def add_to_cart(self, item: CartItem) -> None:
        """Add one unit of the item's variant and open the drawer"""
        new_item = normalize_item(item.model_copy(update={"quantity": 1}))
        items = list(self._state.cart.items)

        index = next(
            (i for i, existing in enumerate(items) if existing.id == new_item.id),
            None,
        )
        if index is not None:
            items[index] = items[index].model_copy(
                update={"quantity": items[index].quantity + 1}
            )
        else:
            items.append(new_item)

        self._set(cart=build_cart(items), is_open=True)
        self._schedule_sync()

    def remove_from_cart(self, item_id: str) -> None:
        """Remove the item whose normalized key is `item_id`"""
        items = [item for item in self._state.cart.items if item.id != item_id]
        self._set(cart=build_cart(items))
        self._schedule_sync()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_from_cart(item_id)
            return

        items = [
            item.model_copy(update={"quantity": quantity}) if item.id == item_id else item
            for item in self._state.cart.items
        ]
        self._set(cart=build_cart(items))
        self._schedule_sync()

    def clear_cart(self, skip_sync: bool = False) -> None:
        self._set(cart=empty_cart())
        if not skip_sync:
            self._schedule_sync()

    def toggle_cart(self) -> None:
        self._set(is_open=not self._state.is_open)

    def close_cart(self) -> None:
        self._set(is_open=False)

    # ==================== Persistent cart sync ====================

    def disable_persistent_cart(self) -> None:
        """Stop syncing to the server cart (logout)"""
        self._set(has_persistent_cart_session=False, is_syncing_persistent_cart=False)

    def _snapshot_for_sync(self) -> Optional[list[CartItem]]:
        if not self._state.has_persistent_cart_session:
            return None
        return filter_checkout_items(self._state.cart.items)

    def _schedule_sync(self) -> None:
        """Dispatch a background sync of the current snapshot, without awaiting it"""
        items = self._snapshot_for_sync()
        if items is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; skipping persistent cart sync")
            return

        task = loop.create_task(self._push_items(items))
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_tasks.discard)

    async def _push_items(self, items: list[CartItem]) -> None:
        try:
            await self._api.replace_cart(items)
        except Exception as e:
            logger.error(f"Failed to sync persistent cart: {e}")

    async def sync_persistent_cart(self) -> None:
        """Replace the server cart lines with the local items; failures are logged"""
        items = self._snapshot_for_sync()
        if items is None:
            return
        await self._push_items(items)

    async def wait_for_pending_syncs(self) -> None:
        """Wait for background syncs dispatched so far"""
        while self._sync_tasks:
            await asyncio.gather(*list(self._sync_tasks), return_exceptions=True)

    async def hydrate_persistent_cart(self) -> None:
        """
        Reconcile the local cart with the customer's server cart.

        Called once per session bootstrap. Equal carts are adopted as-is; a
        differing server cart is merged additively with the local one and
        the merge is pushed back when it changes the server cart.
        """
        self._set(is_syncing_persistent_cart=True)
        try:
            try:
                persistent = await self._api.fetch_cart()
            except Exception as e:
                logger.error(f"Failed to load persistent cart: {e}")
                persistent = None

            if persistent is None:
                self._set(has_persistent_cart_session=False)
                return

            local_items = normalize_items(self._state.cart.items)
            remote_items = normalize_items(persistent.cart.items)

            if item_lists_equal(local_items, remote_items):
                self._set(cart=build_cart(remote_items), has_persistent_cart_session=True)
                return

            merged = merge_item_lists(remote_items, local_items)
            if item_lists_equal(merged, remote_items):
                self._set(cart=build_cart(remote_items), has_persistent_cart_session=True)
                return

            pushed_from = self._state.cart
            try:
                updated = await self._api.replace_cart(merged)
                cart = updated.cart
            except Exception as e:
                logger.error(f"Failed to push merged cart, keeping local merge: {e}")
                cart = build_cart(merged)

            if self._state.cart is not pushed_from:
                # The cart changed while the merge was in flight: keep those
                # changes, merged with the server cart, and push them again.
                current = normalize_items(self._state.cart.items)
                self._set(
                    cart=build_cart(merge_item_lists(remote_items, current)),
                    has_persistent_cart_session=True,
                )
                self._schedule_sync()
                return

            self._set(cart=cart, has_persistent_cart_session=True)
        finally:
            self._set(is_syncing_persistent_cart=False)

    # ==================== Checkout ====================

    async def checkout(self) -> CheckoutResult:
        """Create a checkout for the valid items; clears the cart on success"""
        cart = self._state.cart
        if not cart.items:
            return CheckoutResult(success=False, error="Cart is empty")

        normalized = normalize_items(cart.items)
        valid_items = [item for item in normalized if is_valid_checkout_item(item)]

        # Heal carts persisted with non-variant ids before checking out.
        if len(valid_items) != len(cart.items) or any(
            new.id != old.id for new, old in zip(normalized, cart.items)
        ):
            self._set(cart=build_cart(valid_items))

        if not valid_items:
            return CheckoutResult(success=False, error=OUTDATED_CART_MESSAGE)

        try:
            session = await self._api.create_checkout(valid_items)
        except Exception as e:
            logger.error(f"Checkout error: {e}")
            return CheckoutResult(success=False, error=str(e) or "Checkout failed")

        self.clear_cart(skip_sync=True)
        self.close_cart()
        return CheckoutResult(success=True, checkout_url=session.checkout_url)
