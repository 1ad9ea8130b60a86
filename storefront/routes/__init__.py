# Storefront Routes

from .auth import router as auth_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .products import router as products_router
from .search import router as search_router

__all__ = ["auth_router", "cart_router", "checkout_router", "products_router", "search_router"]
