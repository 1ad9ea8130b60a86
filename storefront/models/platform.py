"""Commerce platform response schemas, validated at the adapter boundary"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from shared.cart.models import Money


class PlatformModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserError(PlatformModel):
    """User-facing error reported by a platform mutation"""
    message: str
    field: Optional[list[str]] = None
    code: Optional[str] = None


class RemoteImage(PlatformModel):
    url: str
    alt_text: Optional[str] = None


class RemoteProduct(PlatformModel):
    handle: str
    title: str
    id: Optional[str] = None


class RemoteMerchandise(PlatformModel):
    """Merchandise snapshot of a variant attached to a cart line"""
    id: str
    title: str
    price: Money = Field(alias="priceV2")
    image: Optional[RemoteImage] = None
    product: RemoteProduct


class RemoteCartLine(PlatformModel):
    id: str
    quantity: int
    # None when the variant or product was deleted upstream.
    merchandise: Optional[RemoteMerchandise] = None


class RemoteCartLineEdge(PlatformModel):
    node: RemoteCartLine


class RemoteCartLines(PlatformModel):
    edges: list[RemoteCartLineEdge] = []


class RemoteCartCost(PlatformModel):
    subtotal_amount: Money
    total_amount: Money
    total_tax_amount: Optional[Money] = None


class RemoteCart(PlatformModel):
    """Platform cart: id, checkout URL and line entries"""
    id: str
    checkout_url: str
    lines: RemoteCartLines = Field(default_factory=RemoteCartLines)
    cost: Optional[RemoteCartCost] = None

    @property
    def line_nodes(self) -> list[RemoteCartLine]:
        return [edge.node for edge in self.lines.edges]


class CartPayload(PlatformModel):
    """Payload shared by every cart mutation"""
    cart: Optional[RemoteCart] = None
    user_errors: list[UserError] = []


class Customer(PlatformModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class CustomerAccessToken(PlatformModel):
    access_token: str
    expires_at: str


class CustomerAccessTokenPayload(PlatformModel):
    customer_access_token: Optional[CustomerAccessToken] = None
    customer_user_errors: list[UserError] = []


class CustomerCreatePayload(PlatformModel):
    customer: Optional[Customer] = None
    customer_user_errors: list[UserError] = []


class RemoteVariant(PlatformModel):
    id: str
    title: str
    price: Money = Field(alias="priceV2")


class RemoteVariantEdge(PlatformModel):
    node: RemoteVariant


class RemoteVariantConnection(PlatformModel):
    edges: list[RemoteVariantEdge] = []


class RemotePriceRange(PlatformModel):
    min_variant_price: Money


class RemoteProductNode(PlatformModel):
    """Catalog product with its first variant"""
    id: str
    title: str
    handle: str
    description: str = ""
    featured_image: Optional[RemoteImage] = None
    variants: RemoteVariantConnection = Field(default_factory=RemoteVariantConnection)
    price_range: Optional[RemotePriceRange] = None

    @property
    def first_variant(self) -> Optional[RemoteVariant]:
        return self.variants.edges[0].node if self.variants.edges else None


class RemoteProductEdge(PlatformModel):
    node: RemoteProductNode


class RemotePageInfo(PlatformModel):
    has_next_page: bool = False
    end_cursor: Optional[str] = None


class RemoteProductConnection(PlatformModel):
    edges: list[RemoteProductEdge] = []
    page_info: RemotePageInfo = Field(default_factory=RemotePageInfo)


class PredictiveProduct(PlatformModel):
    """Search suggestion; carries no variants"""
    id: str
    title: str
    handle: str
    featured_image: Optional[RemoteImage] = None
    price_range: Optional[RemotePriceRange] = None
