"""Catalog models for the mock platform"""

from pydantic import BaseModel, Field
from typing import Optional


class Product(BaseModel):
    """Product in the catalog"""
    id: str
    handle: str
    title: str
    description: str = ""


class ProductVariant(BaseModel):
    """Purchasable variant of a product"""
    id: str
    product_id: str
    title: str
    price: str
    currency: str = "USD"
    image_url: Optional[str] = None
    stock_quantity: int = Field(ge=0, default=100)
