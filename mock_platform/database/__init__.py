# Database modules

import os

from .products import product_db, ProductDatabase
from .carts import CartDatabase, CartInputError
from .customers import CustomerDatabase

cart_db = CartDatabase(
    product_db,
    checkout_base_url=os.getenv("MOCK_PLATFORM_PUBLIC_URL", "http://localhost:8001"),
)
customer_db = CustomerDatabase()

__all__ = [
    "product_db",
    "ProductDatabase",
    "cart_db",
    "CartDatabase",
    "CartInputError",
    "customer_db",
    "CustomerDatabase",
]
