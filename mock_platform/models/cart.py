"""Cart models for the mock platform"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CartLine(BaseModel):
    """Line in a platform cart"""
    id: str
    merchandise_id: str
    quantity: int = Field(gt=0)


class PlatformCart(BaseModel):
    """Platform-side cart"""
    id: str
    token: str
    lines: list[CartLine] = []
    buyer_customer_id: Optional[str] = None
    currency: str = "USD"
    created_at: datetime
    updated_at: datetime
