"""
Customer admin operations

Admin-API backed helpers: the per-customer cart reference (a customer
metafield) and the site-customer tag. Both degrade to no-ops when admin
credentials are not configured.
"""

import logging
from typing import Optional

from .platform_client import PlatformAPIError, PlatformGraphQLClient

logger = logging.getLogger(__name__)

SITE_CUSTOMER_TAG = "headless-site"
CART_METAFIELD_NAMESPACE = "headless"
CART_METAFIELD_KEY = "active_cart_id"


ADMIN_TAGS_ADD_MUTATION = """
  mutation addCustomerTag($id: ID!, $tags: [String!]!) {
    tagsAdd(id: $id, tags: $tags) {
      userErrors {
        message
      }
    }
  }
"""

ADMIN_CUSTOMER_TAGS_QUERY = """
  query customerTags($id: ID!) {
    customer(id: $id) {
      id
      tags
    }
  }
"""

ADMIN_CUSTOMER_CART_METAFIELD_QUERY = """
  query customerCartMetafield($id: ID!, $namespace: String!, $key: String!) {
    customer(id: $id) {
      id
      metafield(namespace: $namespace, key: $key) {
        value
      }
    }
  }
"""

ADMIN_CUSTOMER_CART_METAFIELD_SET_MUTATION = """
  mutation customerCartMetafieldSet($input: CustomerInput!) {
    customerUpdate(input: $input) {
      customer {
        id
      }
      userErrors {
        message
      }
    }
  }
"""


def _first_user_error(payload: Optional[dict]) -> Optional[str]:
    errors = (payload or {}).get("userErrors") or []
    if not errors:
        return None
    return errors[0].get("message") or "Unknown admin API error."


class CartReferenceStore:
    """Server-side customer -> cart id reference"""

    def __init__(self, admin_client: Optional[PlatformGraphQLClient]):
        self._client = admin_client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def get(self, customer_id: str) -> Optional[str]:
        if not self._client:
            return None

        data = await self._client.execute(
            ADMIN_CUSTOMER_CART_METAFIELD_QUERY,
            {
                "id": customer_id,
                "namespace": CART_METAFIELD_NAMESPACE,
                "key": CART_METAFIELD_KEY,
            },
        )
        customer = data.get("customer") or {}
        metafield = customer.get("metafield") or {}
        value = (metafield.get("value") or "").strip()
        return value or None

    async def set(self, customer_id: str, cart_id: str) -> None:
        if not self._client:
            return

        data = await self._client.execute(
            ADMIN_CUSTOMER_CART_METAFIELD_SET_MUTATION,
            {
                "input": {
                    "id": customer_id,
                    "metafields": [
                        {
                            "namespace": CART_METAFIELD_NAMESPACE,
                            "key": CART_METAFIELD_KEY,
                            "type": "single_line_text_field",
                            "value": cart_id,
                        }
                    ],
                },
            },
        )
        error = _first_user_error(data.get("customerUpdate"))
        if error:
            raise PlatformAPIError(f"Failed to persist customer cart ID: {error}")
        logger.debug(f"Stored cart reference {cart_id} for customer {customer_id}")


class SiteCustomerVerifier:
    """Marks and checks customers that registered through this storefront"""

    def __init__(self, admin_client: Optional[PlatformGraphQLClient]):
        self._client = admin_client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def add_site_tag(self, customer_id: str) -> None:
        if not self._client:
            return

        data = await self._client.execute(
            ADMIN_TAGS_ADD_MUTATION,
            {"id": customer_id, "tags": [SITE_CUSTOMER_TAG]},
        )
        error = _first_user_error(data.get("tagsAdd"))
        if error:
            raise PlatformAPIError(f"Failed to tag customer: {error}")

    async def is_site_customer(self, customer_id: str) -> bool:
        if not self._client:
            return True

        data = await self._client.execute(ADMIN_CUSTOMER_TAGS_QUERY, {"id": customer_id})
        customer = data.get("customer") or {}
        return SITE_CUSTOMER_TAG in (customer.get("tags") or [])
