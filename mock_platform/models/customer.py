"""Customer models for the mock platform"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PlatformCustomer(BaseModel):
    """Customer account"""
    id: str
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    tags: list[str] = []
    metafields: dict[str, str] = {}


class AccessToken(BaseModel):
    """Customer access token"""
    token: str
    customer_id: str
    expires_at: datetime
