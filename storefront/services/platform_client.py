"""
Commerce Platform GraphQL Client

Thin async client for the platform's storefront and admin GraphQL
endpoints. Query documents are sent as-is; response shapes are validated by
the services that own each operation.
"""

import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings

logger = logging.getLogger(__name__)


class PlatformAPIError(Exception):
    """Transport, HTTP or GraphQL-level failure talking to the platform"""
    pass


class PlatformGraphQLClient:
    """
    Client for one platform GraphQL endpoint.

    Usage:
        client = create_storefront_client(settings)
        data = await client.execute(GET_CART_QUERY, {"id": cart_id})
        await client.close()
    """

    def __init__(
        self,
        endpoint: str,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def execute(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Run a GraphQL document.

        Args:
            query: GraphQL query or mutation document
            variables: Operation variables

        Returns:
            The response's `data` object

        Raises:
            PlatformAPIError: on network failure, non-2xx status, GraphQL
                errors or a response without data
        """
        try:
            response = await self._http_client.post(
                self.endpoint,
                headers=self._headers,
                json={"query": query, "variables": variables or {}},
            )
        except httpx.HTTPError as e:
            raise PlatformAPIError(f"Platform request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Platform request failed: {response.status_code} - {response.text}")
            raise PlatformAPIError(
                f"Platform request failed: {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise PlatformAPIError("Platform returned invalid JSON") from e

        errors = result.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise PlatformAPIError(f"Platform API error: {message}")

        data = result.get("data")
        if not isinstance(data, dict):
            raise PlatformAPIError("No data returned from platform API")
        return data


def create_storefront_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PlatformGraphQLClient:
    """Storefront API client; prefers the private token for cart and customer calls"""
    if settings.storefront_private_access_token:
        headers = {"Storefront-Private-Token": settings.storefront_private_access_token}
    elif settings.storefront_public_access_token:
        headers = {"X-Storefront-Access-Token": settings.storefront_public_access_token}
    else:
        logger.warning("No storefront access token configured")
        headers = {}

    return PlatformGraphQLClient(
        endpoint=settings.storefront_endpoint,
        headers=headers,
        timeout=settings.request_timeout,
        transport=transport,
    )


def create_admin_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[PlatformGraphQLClient]:
    """Admin API client, or None when admin credentials are not configured"""
    if not settings.admin_configured:
        return None

    return PlatformGraphQLClient(
        endpoint=settings.admin_endpoint,
        headers={"X-Admin-Access-Token": settings.admin_access_token},
        timeout=settings.request_timeout,
        transport=transport,
    )
