# Storefront Models

from .platform import (
    CartPayload,
    Customer,
    CustomerAccessToken,
    CustomerAccessTokenPayload,
    CustomerCreatePayload,
    PredictiveProduct,
    RemoteCart,
    RemoteCartCost,
    RemoteCartLine,
    RemoteMerchandise,
    RemoteProductConnection,
    RemoteProductNode,
    UserError,
)
from .requests import ItemsRequest, LoginRequest, RegisterRequest

__all__ = [
    "CartPayload",
    "Customer",
    "CustomerAccessToken",
    "CustomerAccessTokenPayload",
    "CustomerCreatePayload",
    "PredictiveProduct",
    "RemoteCart",
    "RemoteCartCost",
    "RemoteCartLine",
    "RemoteMerchandise",
    "RemoteProductConnection",
    "RemoteProductNode",
    "UserError",
    "ItemsRequest",
    "LoginRequest",
    "RegisterRequest",
]
