"""Cart data models shared by the storefront server and the local cart store"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


VARIANT_GID_MARKER = "ProductVariant/"


class Money(BaseModel):
    """Amount as a decimal string plus currency code"""
    amount: str
    currency_code: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("amount")
    @classmethod
    def amount_is_decimal(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except (InvalidOperation, TypeError):
            raise ValueError(f"amount must be a decimal string, got {value!r}")
        if not parsed.is_finite():
            raise ValueError(f"amount must be finite, got {value!r}")
        return value


class CartImage(BaseModel):
    """Featured image reference"""
    url: str


class CartItem(BaseModel):
    """One purchasable variant and its quantity"""
    id: str
    variant_id: Optional[str] = None
    product_id: Optional[str] = None
    title: str = ""
    variant_title: Optional[str] = None
    handle: str = ""
    price: Money
    featured_image: Optional[CartImage] = None
    # Not range-checked: persisted legacy data is loaded first, then healed.
    quantity: int = 1

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Cart(BaseModel):
    """Cart items plus derived aggregates. Build with utils.build_cart."""
    items: list[CartItem] = []
    total: Decimal = Decimal("0")
    item_count: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@dataclass(frozen=True)
class ResolvedVariant:
    """Item identity that names a purchasable variant"""
    id: str


@dataclass(frozen=True)
class LegacyUnresolved:
    """Item identity from old data that never resolved to a variant"""
    raw_id: str


ItemIdentity = Union[ResolvedVariant, LegacyUnresolved]


def is_variant_gid(value: Optional[str]) -> bool:
    return bool(value) and VARIANT_GID_MARKER in value


def resolve_identity(item: CartItem) -> ItemIdentity:
    """Classify an item's identity; an explicit variant id always wins."""
    if item.variant_id:
        return ResolvedVariant(item.variant_id)
    if is_variant_gid(item.id):
        return ResolvedVariant(item.id)
    return LegacyUnresolved(item.id)


@dataclass
class PersistentCart:
    """Server-persisted cart as returned by the storefront cart routes"""
    cart: Cart
    cart_id: str
    checkout_url: str


@dataclass
class CheckoutSession:
    """A checkout created from a list of cart items"""
    checkout_url: str
    checkout_id: Optional[str] = None
    details: Optional[dict] = None
