"""Persistent cart routes"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from shared.cart.utils import to_cart_lines

from ..core.session import CartSessionResolver
from ..dependencies import get_cart_service, get_session_resolver
from ..models.requests import ItemsRequest
from ..services.cart_mapper import to_cart_response
from ..services.cart_service import RemoteCartError, RemoteCartService
from ..services.platform_client import PlatformAPIError
from .responses import error_response, parse_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("")
async def get_cart(
    request: Request,
    sessions: CartSessionResolver = Depends(get_session_resolver),
    carts: RemoteCartService = Depends(get_cart_service),
):
    """Get (or create) the signed-in customer's cart"""
    context = await sessions.resolve_authenticated_context(request)
    if not context:
        return {"authenticated": False}

    try:
        preferred_cart_id = await sessions.resolve_preferred_cart_id(request, context.customer_id)
        cart = await carts.get_or_create_customer_cart(
            preferred_cart_id=preferred_cart_id,
            customer_access_token=context.customer_access_token,
        )
    except (RemoteCartError, PlatformAPIError) as e:
        logger.error(f"Failed to load persistent cart: {e}")
        return error_response("Failed to load cart.", 500, authenticated=True)

    response = JSONResponse({"authenticated": True, **to_cart_response(cart)})
    await sessions.persist_cart_reference(response, context.customer_id, cart.id)
    return response


@router.put("")
async def replace_cart(
    body: ItemsRequest,
    request: Request,
    sessions: CartSessionResolver = Depends(get_session_resolver),
    carts: RemoteCartService = Depends(get_cart_service),
):
    """Replace the signed-in customer's cart lines with the given items"""
    context = await sessions.resolve_authenticated_context(request)
    if not context:
        return error_response("Unauthorized", 401)

    lines = to_cart_lines(parse_items(body.items or []))

    try:
        preferred_cart_id = await sessions.resolve_preferred_cart_id(request, context.customer_id)
        cart = await carts.get_or_create_customer_cart(
            preferred_cart_id=preferred_cart_id,
            customer_access_token=context.customer_access_token,
            lines=lines,
        )
    except (RemoteCartError, PlatformAPIError) as e:
        logger.error(f"Failed to persist cart: {e}")
        return error_response("Failed to persist cart.", 500)

    response = JSONResponse({"success": True, **to_cart_response(cart)})
    await sessions.persist_cart_reference(response, context.customer_id, cart.id)
    return response
