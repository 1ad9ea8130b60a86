"""Predictive search route"""

import logging

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_catalog_service
from ..services.catalog_service import CatalogService
from ..services.platform_client import PlatformAPIError
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("/predictive")
async def predictive_search(
    q: str = Query("", description="Partial search query"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Product suggestions for a partial query (two characters minimum)"""
    try:
        products = await catalog.predictive_search(q)
    except PlatformAPIError as e:
        logger.error(f"Predictive search error: {e}")
        return error_response("Failed to fetch predictive search results", 500)

    return {
        "success": True,
        "products": [product.model_dump(by_alias=True, mode="json") for product in products],
    }
