"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import AsyncMock

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("PLATFORM_BASE_URL", "http://platform.test")

from shared.cart.models import CartItem, Money, PersistentCart
from shared.cart.utils import build_cart

SWEATER_ID = "gid://platform/ProductVariant/1001"
TOTE_ID = "gid://platform/ProductVariant/2001"
POUR_OVER_ID = "gid://platform/ProductVariant/3001"


def make_item(item_id: str, quantity: int = 1, price: str = "10.00", **overrides) -> CartItem:
    """Cart item keyed by a variant id, with sensible defaults"""
    suffix = item_id.rsplit("/", 1)[-1]
    data = {
        "id": item_id,
        "variant_id": item_id,
        "title": f"Product {suffix}",
        "handle": f"product-{suffix}",
        "price": Money(amount=price, currency_code="USD"),
        "quantity": quantity,
    }
    data.update(overrides)
    return CartItem(**data)


def make_persistent(items, cart_id: str = "gid://platform/Cart/abc") -> PersistentCart:
    return PersistentCart(
        cart=build_cart(items),
        cart_id=cart_id,
        checkout_url=f"https://shop.test/checkouts/{cart_id.rsplit('/', 1)[-1]}",
    )


@pytest.fixture
def sweater():
    """Sample variant item"""
    return make_item(SWEATER_ID, price="89.00", title="Merino Crew Sweater")


@pytest.fixture
def tote():
    """Second sample variant item"""
    return make_item(TOTE_ID, price="24.50", title="Canvas Tote")


@pytest.fixture
def legacy_item():
    """Item persisted before variant ids were tracked"""
    return make_item("merino-crew-sweater", variant_id=None, price="89.00")


@pytest.fixture
def mock_cart_api():
    """Mock persistent cart collaborator (StorefrontCartClient interface)"""
    api = AsyncMock()
    api.fetch_cart.return_value = None
    api.replace_cart.side_effect = lambda items: make_persistent(items)
    return api


@pytest.fixture
def mock_graphql_client():
    """Mock platform GraphQL client"""
    client = AsyncMock()
    client.execute.return_value = {}
    return client


def remote_cart_data(
    cart_id: str = "gid://platform/Cart/abc",
    lines: list[tuple[str, str, int]] = (),
) -> dict:
    """Storefront API cart body; lines are (line id, variant id, quantity)"""
    return {
        "id": cart_id,
        "checkoutUrl": f"https://shop.test/checkouts/{cart_id.rsplit('/', 1)[-1]}",
        "cost": {
            "subtotalAmount": {"amount": "0.0", "currencyCode": "USD"},
            "totalAmount": {"amount": "0.0", "currencyCode": "USD"},
            "totalTaxAmount": None,
        },
        "lines": {
            "edges": [
                {
                    "node": {
                        "id": line_id,
                        "quantity": quantity,
                        "merchandise": {
                            "id": variant_id,
                            "title": "Default Title",
                            "priceV2": {"amount": "10.00", "currencyCode": "USD"},
                            "image": None,
                            "product": {
                                "id": "gid://platform/Product/1",
                                "title": "Product",
                                "handle": "product",
                            },
                        },
                    }
                }
                for line_id, variant_id, quantity in lines
            ]
        },
    }


def remote_product_data(
    handle: str = "merino-crew-sweater",
    variant_id: str = SWEATER_ID,
    price: str = "89.00",
) -> dict:
    """Storefront API product body with one variant (none when variant_id is None)"""
    return {
        "id": "gid://platform/Product/101",
        "title": "Merino Crew Sweater",
        "handle": handle,
        "description": "Fine-gauge merino wool crew neck.",
        "featuredImage": {"url": "https://cdn.test/merino.jpg"},
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": variant_id,
                        "title": "Navy / M",
                        "priceV2": {"amount": price, "currencyCode": "USD"},
                    }
                }
            ] if variant_id else []
        },
        "priceRange": {"minVariantPrice": {"amount": price, "currencyCode": "USD"}},
    }
