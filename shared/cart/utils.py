"""
Cart math utilities

Pure functions over cart items: validation, key normalisation, aggregate
totals, list comparison and the additive server/local merge. No I/O.
"""

from decimal import Decimal
from typing import Iterable

from .models import Cart, CartItem, Money, ResolvedVariant, resolve_identity


def parse_amount(money: Money) -> Decimal:
    """Decimal value of a money amount (validated on construction)"""
    return Decimal(money.amount)


def normalize_item_key(item: CartItem) -> str:
    """Dedup key: the variant id when known, else the raw id"""
    return item.variant_id or item.id


def normalize_item(item: CartItem) -> CartItem:
    """Copy of the item whose id is its normalized key"""
    key = normalize_item_key(item)
    if key == item.id:
        return item
    return item.model_copy(update={"id": key})


def normalize_items(items: Iterable[CartItem]) -> list[CartItem]:
    return [normalize_item(item) for item in items]


def is_valid_checkout_item(item: CartItem) -> bool:
    """An item can be checked out iff it has a positive quantity and a resolved variant"""
    return item.quantity > 0 and isinstance(resolve_identity(item), ResolvedVariant)


def filter_checkout_items(items: Iterable[CartItem]) -> list[CartItem]:
    """Normalize, then drop everything that cannot be sent to the platform"""
    return [item for item in normalize_items(items) if is_valid_checkout_item(item)]


def build_cart(items: Iterable[CartItem]) -> Cart:
    """Cart with total and item_count recomputed from the items"""
    items = list(items)
    total = sum(
        (parse_amount(item.price) * item.quantity for item in items),
        Decimal("0"),
    )
    item_count = sum(item.quantity for item in items)
    return Cart(items=items, total=total, item_count=item_count)


def empty_cart() -> Cart:
    return build_cart([])


def item_lists_equal(a: list[CartItem], b: list[CartItem]) -> bool:
    """
    True when both lists hold the same keys with the same quantities.

    Metadata (title, price, image) is ignored; callers use this to skip
    redundant remote writes.
    """
    if len(a) != len(b):
        return False

    sorted_a = sorted(a, key=normalize_item_key)
    sorted_b = sorted(b, key=normalize_item_key)

    for item_a, item_b in zip(sorted_a, sorted_b):
        if normalize_item_key(item_a) != normalize_item_key(item_b):
            return False
        if item_a.quantity != item_b.quantity:
            return False

    return True


def merge_item_lists(
    remote_items: list[CartItem],
    local_items: list[CartItem],
) -> list[CartItem]:
    """
    Additive merge of a remote cart with the local one.

    Remote items come first, so on a key collision the remote metadata is
    kept and the quantities are summed. Invalid items are dropped.
    """
    merged: dict[str, CartItem] = {}

    for item in [*remote_items, *local_items]:
        normalized = normalize_item(item)
        key = normalized.id
        existing = merged.get(key)
        if existing:
            merged[key] = existing.model_copy(
                update={"quantity": existing.quantity + item.quantity}
            )
        else:
            merged[key] = normalized

    return [item for item in merged.values() if is_valid_checkout_item(item)]


def to_cart_lines(items: Iterable[CartItem]) -> list[dict]:
    """Platform line inputs for the valid items"""
    return [
        {"merchandiseId": normalize_item_key(item), "quantity": item.quantity}
        for item in items
        if is_valid_checkout_item(item)
    ]
