"""Checkout creation route"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from shared.cart.utils import is_valid_checkout_item, to_cart_lines

from ..core.session import CartSessionResolver
from ..dependencies import get_cart_service, get_session_resolver
from ..models.platform import RemoteCart
from ..models.requests import ItemsRequest
from ..services.cart_service import CartConsistencyError, CartUserError, RemoteCartService
from ..services.platform_client import PlatformAPIError
from .responses import error_response, parse_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])

INVALID_ITEM_MESSAGE = (
    "Cart contains an invalid item. Please remove it and add the product again."
)


def _checkout_summary(cart: RemoteCart) -> dict:
    cost = cart.cost
    return {
        "id": cart.id,
        "subtotalPrice": cost.subtotal_amount.model_dump(by_alias=True) if cost else None,
        "totalTax": cost.total_tax_amount.model_dump(by_alias=True) if cost and cost.total_tax_amount else None,
        "totalPrice": cost.total_amount.model_dump(by_alias=True) if cost else None,
        "lineItems": [line.model_dump(by_alias=True, mode="json") for line in cart.line_nodes],
    }


@router.post("")
async def create_checkout(
    body: ItemsRequest,
    request: Request,
    sessions: CartSessionResolver = Depends(get_session_resolver),
    carts: RemoteCartService = Depends(get_cart_service),
):
    """
    Create a platform checkout for the submitted items.

    Signed-in customers get the checkout bound to their account. The new
    cart id is written to the cart cookie.
    """
    if not body.items:
        return error_response("Cart is empty", 400)

    try:
        items = parse_items(body.items, strict=True)
    except ValueError:
        return error_response(INVALID_ITEM_MESSAGE, 400)

    if not all(is_valid_checkout_item(item) for item in items):
        return error_response(INVALID_ITEM_MESSAGE, 400)

    customer_access_token = request.cookies.get(sessions.settings.customer_token_cookie)

    try:
        cart = await carts.create_cart(
            customer_access_token=customer_access_token,
            lines=to_cart_lines(items),
        )
    except CartUserError as e:
        logger.error(f"Cart errors: {e}")
        return error_response(str(e), 400)
    except CartConsistencyError as e:
        logger.error(f"Checkout cart creation returned no cart: {e}")
        return error_response("Failed to create cart - no cart returned from platform", 500)
    except PlatformAPIError as e:
        logger.error(f"Checkout API Error: {e}")
        return error_response(str(e) or "Failed to process checkout", 500)

    response = JSONResponse({
        "success": True,
        "checkoutUrl": cart.checkout_url,
        "checkout": _checkout_summary(cart),
    })
    sessions.set_cart_cookie(response, cart.id)
    return response
