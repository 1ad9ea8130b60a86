"""Product catalog reads against the platform's storefront API"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from ..models.platform import PredictiveProduct, RemoteProductConnection, RemoteProductNode
from .platform_client import PlatformAPIError, PlatformGraphQLClient

logger = logging.getLogger(__name__)

PRODUCTS_PAGE_SIZE = 20
PREDICTIVE_SEARCH_LIMIT = 6
PREDICTIVE_SEARCH_MIN_LENGTH = 2


PRODUCT_FIELDS = """
  id
  title
  handle
  description
  featuredImage {
    url
  }
  variants(first: 1) {
    edges {
      node {
        id
        title
        priceV2 {
          amount
          currencyCode
        }
      }
    }
  }
  priceRange {
    minVariantPrice {
      amount
      currencyCode
    }
  }
"""

PRODUCTS_QUERY = f"""
  query GetProducts($cursor: String, $first: Int!) {{
    products(first: $first, after: $cursor) {{
      edges {{
        node {{
          {PRODUCT_FIELDS}
        }}
      }}
      pageInfo {{
        hasNextPage
        endCursor
      }}
    }}
  }}
"""

PRODUCT_BY_HANDLE_QUERY = f"""
  query GetProductByHandle($handle: String!) {{
    product(handle: $handle) {{
      {PRODUCT_FIELDS}
    }}
  }}
"""

PREDICTIVE_SEARCH_QUERY = """
  query PredictiveSearch($query: String!, $limit: Int!) {
    predictiveSearch(
      query: $query
      limit: $limit
      types: [PRODUCT]
      unavailableProducts: HIDE
    ) {
      products {
        id
        title
        handle
        featuredImage {
          url
          altText
        }
        priceRange {
          minVariantPrice {
            amount
            currencyCode
          }
        }
      }
    }
  }
"""


@dataclass
class ProductPage:
    """One page of the catalog"""
    products: list[RemoteProductNode]
    next_cursor: Optional[str] = None
    has_next_page: bool = False


class CatalogService:
    """Product listing, product detail and predictive search"""

    def __init__(self, client: PlatformGraphQLClient):
        self._client = client

    async def list_products(self, cursor: Optional[str] = None) -> ProductPage:
        """
        Fetch one page of products.

        Args:
            cursor: `end_cursor` of the previous page, or None for the first

        Raises:
            PlatformAPIError: on platform failure or a malformed response
        """
        data = await self._client.execute(
            PRODUCTS_QUERY,
            {"cursor": cursor, "first": PRODUCTS_PAGE_SIZE},
        )
        if not data.get("products"):
            raise PlatformAPIError("Invalid products response from platform")

        try:
            connection = RemoteProductConnection.model_validate(data["products"])
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected products response: {e.error_count()} errors") from e

        return ProductPage(
            products=[edge.node for edge in connection.edges],
            next_cursor=connection.page_info.end_cursor,
            has_next_page=connection.page_info.has_next_page,
        )

    async def get_product_by_handle(self, handle: str) -> Optional[RemoteProductNode]:
        """Product for a catalog handle, or None when there is none"""
        data = await self._client.execute(PRODUCT_BY_HANDLE_QUERY, {"handle": handle})
        raw = data.get("product")
        if raw is None:
            return None

        try:
            return RemoteProductNode.model_validate(raw)
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected product response: {e.error_count()} errors") from e

    async def predictive_search(self, query: str) -> list[PredictiveProduct]:
        """Suggestions for a partial query; short queries return nothing"""
        query = query.strip()
        if len(query) < PREDICTIVE_SEARCH_MIN_LENGTH:
            return []

        data = await self._client.execute(
            PREDICTIVE_SEARCH_QUERY,
            {"query": query, "limit": PREDICTIVE_SEARCH_LIMIT},
        )
        results = data.get("predictiveSearch") or {}
        try:
            return [PredictiveProduct.model_validate(p) for p in results.get("products") or []]
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected search response: {e.error_count()} errors") from e
