"""Admin GraphQL API: customer tags and metafields"""

import os
from typing import Any, Optional

from fastapi import APIRouter, Header

from ..database import customer_db
from .graphql import GraphQLRequest, dispatch, require_token, user_errors

router = APIRouter(prefix="/admin/api/{version}", tags=["Admin API"])


def customer_tags(variables: dict) -> dict:
    customer = customer_db.get_customer(variables.get("id", ""))
    if not customer:
        return {"customer": None}
    return {"customer": {"id": customer.id, "tags": list(customer.tags)}}


def add_customer_tag(variables: dict) -> dict:
    customer = customer_db.add_tags(variables.get("id", ""), variables.get("tags") or [])
    if not customer:
        return {"tagsAdd": {"userErrors": user_errors("Customer does not exist", ["id"])}}
    return {"tagsAdd": {"userErrors": []}}


def customer_cart_metafield(variables: dict) -> dict:
    customer_id = variables.get("id", "")
    if not customer_db.get_customer(customer_id):
        return {"customer": None}

    value = customer_db.get_metafield(
        customer_id,
        variables.get("namespace", ""),
        variables.get("key", ""),
    )
    return {
        "customer": {
            "id": customer_id,
            "metafield": {"value": value} if value is not None else None,
        }
    }


def customer_cart_metafield_set(variables: dict) -> dict:
    customer_input = variables.get("input") or {}
    customer_id = customer_input.get("id", "")
    if not customer_db.get_customer(customer_id):
        return {"customerUpdate": {"customer": None, "userErrors": user_errors("Customer does not exist", ["id"])}}

    for metafield in customer_input.get("metafields") or []:
        customer_db.set_metafield(
            customer_id,
            metafield.get("namespace", ""),
            metafield.get("key", ""),
            str(metafield.get("value", "")),
        )
    return {"customerUpdate": {"customer": {"id": customer_id}, "userErrors": []}}


RESOLVERS = {
    "customerTags": customer_tags,
    "addCustomerTag": add_customer_tag,
    "customerCartMetafield": customer_cart_metafield,
    "customerCartMetafieldSet": customer_cart_metafield_set,
}


@router.post("/graphql.json")
async def admin_graphql(
    version: str,
    request: GraphQLRequest,
    x_admin_access_token: Optional[str] = Header(None),
) -> dict[str, Any]:
    """Admin API endpoint"""
    require_token(os.getenv("MOCK_ADMIN_TOKEN"), x_admin_access_token)
    return dispatch(request, RESOLVERS)
