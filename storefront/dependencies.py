"""Service wiring for the storefront app"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from .core.config import Settings
from .core.session import CartSessionResolver
from .services import (
    CartReferenceStore,
    CatalogService,
    CustomerAuthService,
    PlatformGraphQLClient,
    RemoteCartService,
    SiteCustomerVerifier,
    create_admin_client,
    create_storefront_client,
)


@dataclass
class StorefrontServices:
    """Everything the routes need, built once per app instance"""
    carts: RemoteCartService
    auth: CustomerAuthService
    verifier: SiteCustomerVerifier
    sessions: CartSessionResolver
    catalog: Optional[CatalogService] = None
    storefront_client: Optional[PlatformGraphQLClient] = None
    admin_client: Optional[PlatformGraphQLClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StorefrontServices":
        storefront_client = create_storefront_client(settings, transport=transport)
        admin_client = create_admin_client(settings, transport=transport)

        auth = CustomerAuthService(storefront_client)
        verifier = SiteCustomerVerifier(admin_client)
        return cls(
            carts=RemoteCartService(storefront_client),
            auth=auth,
            verifier=verifier,
            sessions=CartSessionResolver(
                auth=auth,
                references=CartReferenceStore(admin_client),
                settings=settings,
                verifier=verifier,
            ),
            catalog=CatalogService(storefront_client),
            storefront_client=storefront_client,
            admin_client=admin_client,
        )

    async def close(self) -> None:
        """Close platform HTTP clients"""
        if self.storefront_client:
            await self.storefront_client.close()
        if self.admin_client:
            await self.admin_client.close()


def get_services(request: Request) -> StorefrontServices:
    return request.app.state.services


def get_cart_service(request: Request) -> RemoteCartService:
    return get_services(request).carts


def get_session_resolver(request: Request) -> CartSessionResolver:
    return get_services(request).sessions


def get_customer_auth(request: Request) -> CustomerAuthService:
    return get_services(request).auth


def get_site_verifier(request: Request) -> SiteCustomerVerifier:
    return get_services(request).verifier


def get_catalog_service(request: Request) -> CatalogService:
    return get_services(request).catalog
