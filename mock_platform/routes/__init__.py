# API Routes

from .storefront import router as storefront_router
from .admin import router as admin_router

__all__ = ["storefront_router", "admin_router"]
