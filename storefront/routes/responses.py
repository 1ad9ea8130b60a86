"""Response helpers shared by the storefront routes"""

import logging
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import ValidationError

from shared.cart.models import CartItem

logger = logging.getLogger(__name__)


def error_response(message: str, status_code: int, **extra: Any) -> JSONResponse:
    """`{success: false, message}` body with the given status"""
    return JSONResponse(
        {**extra, "success": False, "message": message},
        status_code=status_code,
    )


def parse_items(raw_items: list[Any], strict: bool = False) -> list[CartItem]:
    """
    Validate raw cart items from a request body.

    Unreadable items are skipped, or raise ValueError when `strict`.
    """
    items = []
    for raw in raw_items:
        try:
            items.append(CartItem.model_validate(raw))
        except ValidationError as e:
            if strict:
                raise ValueError("invalid cart item") from e
            logger.warning(f"Skipping unreadable cart item: {e.error_count()} errors")
    return items
