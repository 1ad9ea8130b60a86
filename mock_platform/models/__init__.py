# Mock Platform Models

from .product import Product, ProductVariant
from .cart import CartLine, PlatformCart
from .customer import AccessToken, PlatformCustomer

__all__ = [
    "Product",
    "ProductVariant",
    "CartLine",
    "PlatformCart",
    "AccessToken",
    "PlatformCustomer",
]
