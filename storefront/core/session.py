"""
Cart session resolution

Per-request answers to "who is the customer" and "which remote cart is
theirs". The browser-held cart cookie wins over the server-stored reference,
since it reflects the most recent activity in that browser.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request, Response

from .config import Settings
from ..services.customer_admin import CartReferenceStore, SiteCustomerVerifier
from ..services.customer_auth import CustomerAuthService
from ..services.platform_client import PlatformAPIError

logger = logging.getLogger(__name__)


@dataclass
class CartSessionContext:
    """Authenticated customer for the current request"""
    customer_id: str
    customer_access_token: str


class CartSessionResolver:
    """Resolves customer context and cart references from request cookies"""

    def __init__(
        self,
        auth: CustomerAuthService,
        references: CartReferenceStore,
        settings: Settings,
        verifier: Optional[SiteCustomerVerifier] = None,
    ):
        self.auth = auth
        self.references = references
        self.settings = settings
        self.verifier = verifier or SiteCustomerVerifier(None)

    async def resolve_authenticated_context(
        self, request: Request
    ) -> Optional[CartSessionContext]:
        """Context for the customer token cookie; None means anonymous"""
        token = request.cookies.get(self.settings.customer_token_cookie)
        if not token:
            return None

        try:
            customer = await self.auth.get_customer_by_access_token(token)
        except PlatformAPIError as e:
            logger.warning(f"Customer lookup failed, treating request as anonymous: {e}")
            return None

        if not customer:
            return None

        return CartSessionContext(customer_id=customer.id, customer_access_token=token)

    async def is_authenticated(self, request: Request) -> bool:
        """Session check, including site-customer verification when enabled"""
        context = await self.resolve_authenticated_context(request)
        if not context:
            return False

        if not self.verifier.enabled:
            return True

        origin_customer_id = request.cookies.get(self.settings.customer_origin_cookie)
        if origin_customer_id != context.customer_id:
            return False

        try:
            return await self.verifier.is_site_customer(context.customer_id)
        except PlatformAPIError as e:
            logger.warning(f"Site customer verification failed: {e}")
            return False

    async def resolve_preferred_cart_id(
        self, request: Request, customer_id: str
    ) -> Optional[str]:
        """Cart cookie, else the server-stored reference, else None"""
        cart_id_from_cookie = request.cookies.get(self.settings.cart_cookie)
        if cart_id_from_cookie:
            return cart_id_from_cookie

        try:
            stored_cart_id = await self.references.get(customer_id)
        except PlatformAPIError as e:
            logger.warning(f"Failed to read stored cart ID for {customer_id}: {e}")
            return None

        return stored_cart_id or None

    async def persist_cart_reference(
        self, response: Response, customer_id: str, cart_id: str
    ) -> None:
        """Write the cart cookie; store the server reference best-effort"""
        self.set_cart_cookie(response, cart_id)
        try:
            await self.references.set(customer_id, cart_id)
        except PlatformAPIError as e:
            logger.error(f"Failed to store customer cart ID: {e}")

    # ==================== Cookies ====================

    def set_cart_cookie(self, response: Response, cart_id: str) -> None:
        response.set_cookie(
            self.settings.cart_cookie,
            cart_id,
            max_age=self.settings.cart_cookie_max_age,
            path="/",
            httponly=True,
            secure=self.settings.secure_cookies,
            samesite="lax",
        )

    def set_customer_cookies(
        self,
        response: Response,
        access_token: str,
        customer_id: str,
        expires_at: Optional[str] = None,
    ) -> None:
        expires = None
        if expires_at:
            try:
                expires = datetime.fromisoformat(expires_at.replace("Z", "+00:00")).astimezone(timezone.utc)
            except ValueError:
                logger.warning(f"Ignoring unparseable token expiry {expires_at!r}")

        for name, value in (
            (self.settings.customer_token_cookie, access_token),
            (self.settings.customer_origin_cookie, customer_id),
        ):
            response.set_cookie(
                name,
                value,
                expires=expires,
                path="/",
                httponly=True,
                secure=self.settings.secure_cookies,
                samesite="lax",
            )

    def clear_customer_cookies(self, response: Response) -> None:
        for name in (self.settings.customer_token_cookie, self.settings.customer_origin_cookie):
            response.set_cookie(
                name,
                "",
                max_age=0,
                path="/",
                httponly=True,
                secure=self.settings.secure_cookies,
                samesite="lax",
            )
