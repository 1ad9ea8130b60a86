"""
Storefront Cart Client

HTTP client the local cart store uses to reach the storefront server's
session, catalog, cart and checkout routes. Cookies (customer token, cart reference)
live in the client's cookie jar, the same way a browser would hold them.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .models import Cart, CartItem, CheckoutSession, PersistentCart
from .utils import build_cart

logger = logging.getLogger(__name__)


class StorefrontClientError(Exception):
    """Storefront request failed or returned an unusable body"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorefrontCartClient:
    """
    Client for the storefront server routes.

    Usage:
        client = StorefrontCartClient("http://localhost:8000")
        await client.login("ada@example.com", "secret-password")
        persistent = await client.fetch_cart()
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize storefront client.

        Args:
            base_url: Base URL of the storefront server
            timeout: Request timeout in seconds
            transport: Optional transport (e.g. an ASGI app in tests)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Send a JSON request and return the decoded body"""
        try:
            response = await self._http_client.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise StorefrontClientError(f"Request to {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(f"Request failed: {method} {path} {response.status_code} - {message or response.text}")
            raise StorefrontClientError(
                message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            raise StorefrontClientError(f"Unexpected response body from {path}")
        return data

    @staticmethod
    def _serialize_items(items: list[CartItem]) -> list[dict]:
        return [item.model_dump(by_alias=True, mode="json", exclude_none=True) for item in items]

    @staticmethod
    def _to_persistent_cart(data: dict) -> PersistentCart:
        try:
            cart = Cart.model_validate(data.get("cart") or {})
        except ValidationError as e:
            raise StorefrontClientError(f"Malformed cart in response: {e.error_count()} errors") from e

        if not data.get("cartId"):
            raise StorefrontClientError("Cart response is missing cartId")

        return PersistentCart(
            # Totals are recomputed locally.
            cart=build_cart(cart.items),
            cart_id=data["cartId"],
            checkout_url=data.get("checkoutUrl", ""),
        )

    # ==================== Session ====================

    async def get_session(self) -> bool:
        """Whether the server recognises the current customer cookie"""
        data = await self._request("GET", "/api/auth/session")
        return bool(data.get("authenticated"))

    async def login(self, email: str, password: str) -> None:
        await self._request("POST", "/api/auth/login", body={"email": email, "password": password})

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> None:
        await self._request(
            "POST",
            "/api/auth/register",
            body={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
        )

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")

    # ==================== Catalog ====================

    async def list_products(self, cursor: Optional[str] = None) -> dict[str, Any]:
        """One catalog page: products, nextCursor and hasNextPage"""
        path = "/api/products"
        if cursor:
            path = f"{path}?{httpx.QueryParams({'cursor': cursor})}"
        return await self._request("GET", path)

    async def get_product_cart_item(self, handle: str) -> Optional[CartItem]:
        """Item to add for the product's first variant, or None if unknown or unavailable"""
        try:
            data = await self._request("GET", f"/api/products/{quote(handle, safe='')}")
        except StorefrontClientError as e:
            if e.status_code == 404:
                return None
            raise

        raw_item = data.get("cartItem")
        if not raw_item:
            return None
        try:
            return CartItem.model_validate(raw_item)
        except ValidationError as e:
            raise StorefrontClientError(f"Malformed cart item in response: {e.error_count()} errors") from e

    # ==================== Cart ====================

    async def fetch_cart(self) -> Optional[PersistentCart]:
        """Get the customer's server-persisted cart, or None when anonymous"""
        data = await self._request("GET", "/api/cart")
        if not data.get("authenticated"):
            return None
        return self._to_persistent_cart(data)

    async def replace_cart(self, items: list[CartItem]) -> PersistentCart:
        """Replace the server-persisted cart lines with the given items"""
        data = await self._request(
            "PUT",
            "/api/cart",
            body={"items": self._serialize_items(items)},
        )
        return self._to_persistent_cart(data)

    # ==================== Checkout ====================

    async def create_checkout(self, items: list[CartItem]) -> CheckoutSession:
        """Create a checkout for the given items"""
        data = await self._request(
            "POST",
            "/api/checkout",
            body={"items": self._serialize_items(items)},
        )

        if not data.get("success") or not data.get("checkoutUrl"):
            raise StorefrontClientError(data.get("message") or "Checkout failed")

        checkout = data.get("checkout") or {}
        return CheckoutSession(
            checkout_url=data["checkoutUrl"],
            checkout_id=checkout.get("id"),
            details=checkout,
        )
