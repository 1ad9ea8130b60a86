# Storefront Services

from .platform_client import (
    PlatformAPIError,
    PlatformGraphQLClient,
    create_admin_client,
    create_storefront_client,
)
from .cart_service import (
    CartConsistencyError,
    CartUserError,
    RemoteCartError,
    RemoteCartService,
)
from .cart_mapper import map_remote_cart_to_cart, product_to_cart_item, to_cart_response
from .catalog_service import CatalogService, ProductPage
from .customer_auth import CustomerAuthService
from .customer_admin import CartReferenceStore, SiteCustomerVerifier

__all__ = [
    "PlatformAPIError",
    "PlatformGraphQLClient",
    "create_admin_client",
    "create_storefront_client",
    "CartConsistencyError",
    "CartUserError",
    "RemoteCartError",
    "RemoteCartService",
    "map_remote_cart_to_cart",
    "product_to_cart_item",
    "to_cart_response",
    "CatalogService",
    "ProductPage",
    "CustomerAuthService",
    "CartReferenceStore",
    "SiteCustomerVerifier",
]
