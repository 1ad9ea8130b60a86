"""Storefront GraphQL API: catalog, carts and customer accounts"""

import os
from typing import Any, Optional

from fastapi import APIRouter, Header

from ..database import CartInputError, cart_db, customer_db, product_db
from .graphql import GraphQLRequest, dispatch, require_token, user_errors

router = APIRouter(prefix="/api/{version}", tags=["Storefront API"])


def _customer_id_for(buyer_identity: Optional[dict]) -> tuple[Optional[str], Optional[str]]:
    """Resolve a buyer identity to (customer id, error message)"""
    token = (buyer_identity or {}).get("customerAccessToken")
    if not token:
        return None, None
    customer = customer_db.get_by_token(token)
    if not customer:
        return None, "Customer access token is invalid."
    return customer.id, None


def _cart_payload(cart=None, errors: Optional[list[dict]] = None) -> dict:
    return {
        "cart": cart_db.to_graphql(cart) if cart else None,
        "userErrors": errors or [],
    }


def get_products(variables: dict) -> dict:
    products, has_next = product_db.list_products(
        after=variables.get("cursor"),
        first=variables.get("first") or 20,
    )
    return {
        "products": {
            "edges": [{"node": product_db.to_graphql(p)} for p in products],
            "pageInfo": {
                "hasNextPage": has_next,
                "endCursor": products[-1].id if products else None,
            },
        }
    }


def get_product_by_handle(variables: dict) -> dict:
    product = product_db.get_by_handle(variables.get("handle", ""))
    return {"product": product_db.to_graphql(product) if product else None}


def predictive_search(variables: dict) -> dict:
    products = product_db.search_products(
        variables.get("query", ""),
        limit=variables.get("limit") or 6,
    )
    return {"predictiveSearch": {"products": [product_db.to_search_result(p) for p in products]}}


def get_cart(variables: dict) -> dict:
    cart = cart_db.get_cart(variables.get("id", ""))
    return {"cart": cart_db.to_graphql(cart) if cart else None}


def cart_create(variables: dict) -> dict:
    cart_input = variables.get("input") or {}
    customer_id, error = _customer_id_for(cart_input.get("buyerIdentity"))
    if error:
        return {"cartCreate": _cart_payload(errors=user_errors(error, ["buyerIdentity"]))}

    try:
        cart = cart_db.create_cart(cart_input.get("lines"), buyer_customer_id=customer_id)
    except CartInputError as e:
        return {"cartCreate": _cart_payload(errors=user_errors(e.message, e.field))}
    return {"cartCreate": _cart_payload(cart)}


def cart_lines_add(variables: dict) -> dict:
    try:
        cart = cart_db.add_lines(variables.get("cartId", ""), variables.get("lines") or [])
    except CartInputError as e:
        return {"cartLinesAdd": _cart_payload(errors=user_errors(e.message, e.field))}
    if not cart:
        return {"cartLinesAdd": _cart_payload(errors=user_errors("The specified cart does not exist.", ["cartId"]))}
    return {"cartLinesAdd": _cart_payload(cart)}


def cart_lines_remove(variables: dict) -> dict:
    try:
        cart = cart_db.remove_lines(variables.get("cartId", ""), variables.get("lineIds") or [])
    except CartInputError as e:
        return {"cartLinesRemove": _cart_payload(errors=user_errors(e.message, e.field))}
    if not cart:
        return {"cartLinesRemove": _cart_payload(errors=user_errors("The specified cart does not exist.", ["cartId"]))}
    return {"cartLinesRemove": _cart_payload(cart)}


def cart_buyer_identity_update(variables: dict) -> dict:
    customer_id, error = _customer_id_for(variables.get("buyerIdentity"))
    if error or not customer_id:
        message = error or "A customer access token is required."
        return {"cartBuyerIdentityUpdate": _cart_payload(errors=user_errors(message, ["buyerIdentity"]))}

    cart = cart_db.set_buyer(variables.get("cartId", ""), customer_id)
    if not cart:
        return {"cartBuyerIdentityUpdate": _cart_payload(errors=user_errors("The specified cart does not exist.", ["cartId"]))}
    return {"cartBuyerIdentityUpdate": _cart_payload(cart)}


def customer_access_token_create(variables: dict) -> dict:
    credentials = variables.get("input") or {}
    token = customer_db.authenticate(credentials.get("email", ""), credentials.get("password", ""))
    if not token:
        return {
            "customerAccessTokenCreate": {
                "customerAccessToken": None,
                "customerUserErrors": [{
                    "code": "UNIDENTIFIED_CUSTOMER",
                    "field": ["input"],
                    "message": "Unidentified customer",
                }],
            }
        }
    return {
        "customerAccessTokenCreate": {
            "customerAccessToken": {
                "accessToken": token.token,
                "expiresAt": token.expires_at.isoformat() + "Z",
            },
            "customerUserErrors": [],
        }
    }


def customer_by_token(variables: dict) -> dict:
    customer = customer_db.get_by_token(variables.get("customerAccessToken", ""))
    if not customer:
        return {"customer": None}
    return {
        "customer": {
            "id": customer.id,
            "email": customer.email,
            "firstName": customer.first_name,
            "lastName": customer.last_name,
            "phone": customer.phone,
        }
    }


def customer_create(variables: dict) -> dict:
    customer_input = variables.get("input") or {}
    customer = customer_db.create_customer(
        email=customer_input.get("email", ""),
        password=customer_input.get("password", ""),
        first_name=customer_input.get("firstName"),
        last_name=customer_input.get("lastName"),
    )
    if not customer:
        return {
            "customerCreate": {
                "customer": None,
                "customerUserErrors": [{
                    "code": "TAKEN",
                    "field": ["input", "email"],
                    "message": "Email has already been taken",
                }],
            }
        }
    return {
        "customerCreate": {
            "customer": {
                "id": customer.id,
                "email": customer.email,
                "firstName": customer.first_name,
                "lastName": customer.last_name,
            },
            "customerUserErrors": [],
        }
    }


RESOLVERS = {
    "GetProducts": get_products,
    "GetProductByHandle": get_product_by_handle,
    "PredictiveSearch": predictive_search,
    "getCart": get_cart,
    "cartCreate": cart_create,
    "cartLinesAdd": cart_lines_add,
    "cartLinesRemove": cart_lines_remove,
    "cartBuyerIdentityUpdate": cart_buyer_identity_update,
    "customerAccessTokenCreate": customer_access_token_create,
    "CustomerByToken": customer_by_token,
    "customerCreate": customer_create,
}


@router.post("/graphql.json")
async def storefront_graphql(
    version: str,
    request: GraphQLRequest,
    storefront_private_token: Optional[str] = Header(None),
    x_storefront_access_token: Optional[str] = Header(None),
) -> dict[str, Any]:
    """Storefront API endpoint"""
    require_token(
        os.getenv("MOCK_STOREFRONT_TOKEN"),
        storefront_private_token or x_storefront_access_token,
    )
    return dispatch(request, RESOLVERS)
