"""Shared GraphQL request handling for the mock platform endpoints"""

import re
from typing import Any, Callable, Optional

from fastapi import HTTPException
from pydantic import BaseModel

OPERATION_PATTERN = re.compile(r"\b(query|mutation)\s+(\w+)")


class GraphQLRequest(BaseModel):
    """GraphQL POST body"""
    query: str
    variables: Optional[dict[str, Any]] = None


Resolver = Callable[[dict[str, Any]], dict[str, Any]]


def operation_name(query: str) -> Optional[str]:
    match = OPERATION_PATTERN.search(query)
    return match.group(2) if match else None


def dispatch(request: GraphQLRequest, resolvers: dict[str, Resolver]) -> dict[str, Any]:
    """Run the resolver registered for the document's operation name"""
    name = operation_name(request.query)
    resolver = resolvers.get(name) if name else None
    if resolver is None:
        return {"errors": [{"message": f"Unsupported operation: {name or 'anonymous'}"}]}
    return {"data": resolver(request.variables or {})}


def require_token(expected: Optional[str], provided: Optional[str]) -> None:
    """Reject requests without the configured access token"""
    if expected and provided != expected:
        raise HTTPException(status_code=401, detail="Invalid access token")


def user_errors(message: str, field: Optional[list[str]] = None) -> list[dict]:
    return [{"field": field, "message": message}]
