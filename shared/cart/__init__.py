# Shared cart library

from .models import (
    Cart,
    CartImage,
    CartItem,
    CheckoutSession,
    ItemIdentity,
    LegacyUnresolved,
    Money,
    PersistentCart,
    ResolvedVariant,
    resolve_identity,
)
from .utils import (
    build_cart,
    is_valid_checkout_item,
    item_lists_equal,
    merge_item_lists,
    normalize_item_key,
)
from .persistence import CartStorage, JSONFileCartStorage, MemoryCartStorage
from .client import StorefrontCartClient, StorefrontClientError
from .store import CartStore, CartStoreState, CheckoutResult

__all__ = [
    "Cart",
    "CartImage",
    "CartItem",
    "CheckoutSession",
    "ItemIdentity",
    "LegacyUnresolved",
    "Money",
    "PersistentCart",
    "ResolvedVariant",
    "resolve_identity",
    "build_cart",
    "is_valid_checkout_item",
    "item_lists_equal",
    "merge_item_lists",
    "normalize_item_key",
    "CartStorage",
    "JSONFileCartStorage",
    "MemoryCartStorage",
    "StorefrontCartClient",
    "StorefrontClientError",
    "CartStore",
    "CartStoreState",
    "CheckoutResult",
]
