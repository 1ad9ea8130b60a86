"""Request bodies accepted by the storefront routes"""

from typing import Any, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ItemsRequest(BaseModel):
    """Body carrying cart items; items are validated one by one by the route"""
    items: Optional[list[Any]] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
