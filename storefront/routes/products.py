"""Product catalog routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_catalog_service
from ..services.cart_mapper import product_to_cart_item
from ..services.catalog_service import CatalogService
from ..services.platform_client import PlatformAPIError
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("")
async def list_products(
    cursor: Optional[str] = Query(None, description="End cursor of the previous page"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """List catalog products, one page at a time"""
    try:
        page = await catalog.list_products(cursor)
    except PlatformAPIError as e:
        logger.error(f"Failed to fetch products: {e}")
        return error_response("Failed to fetch products", 500)

    return {
        "success": True,
        "products": [product.model_dump(by_alias=True, mode="json") for product in page.products],
        "nextCursor": page.next_cursor,
        "hasNextPage": page.has_next_page,
    }


@router.get("/{handle}")
async def get_product(
    handle: str,
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Product details by handle.

    Also returns `cartItem`, the item to add for one unit of the product's
    first variant (null when the product has no variants).
    """
    handle = handle.strip()
    if not handle:
        return error_response("Product handle is required", 400)

    try:
        product = await catalog.get_product_by_handle(handle)
    except PlatformAPIError as e:
        logger.error(f"Product details error for {handle}: {e}")
        return error_response("Failed to fetch product details", 500)

    if not product:
        return error_response("Product not found", 404)

    item = product_to_cart_item(product)
    return {
        "success": True,
        "product": product.model_dump(by_alias=True, mode="json"),
        "cartItem": item.model_dump(by_alias=True, mode="json", exclude_none=True) if item else None,
    }
