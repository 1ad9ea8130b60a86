"""Cart storage for the mock platform"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models.cart import CartLine, PlatformCart
from .products import ProductDatabase


class CartInputError(Exception):
    """Invalid cart mutation input, reported to clients as a user error"""

    def __init__(self, message: str, field: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class CartDatabase:
    """In-memory cart storage"""

    TAX_RATE = Decimal("0.0875")  # 8.75% tax

    def __init__(self, products: ProductDatabase, checkout_base_url: str):
        self.products = products
        self.checkout_base_url = checkout_base_url.rstrip("/")
        self.carts: dict[str, PlatformCart] = {}

    def create_cart(
        self,
        lines: Optional[list[dict]] = None,
        buyer_customer_id: Optional[str] = None,
    ) -> PlatformCart:
        """Create a new cart, optionally seeded with lines"""
        now = datetime.utcnow()
        token = uuid.uuid4().hex
        cart = PlatformCart(
            id=f"gid://platform/Cart/{token}",
            token=token,
            buyer_customer_id=buyer_customer_id,
            created_at=now,
            updated_at=now,
        )
        if lines:
            self._append_lines(cart, lines)
        self.carts[cart.id] = cart
        return cart

    def get_cart(self, cart_id: str) -> Optional[PlatformCart]:
        """Get a cart by ID"""
        return self.carts.get(cart_id)

    def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart (simulates expiry upstream)"""
        if cart_id in self.carts:
            del self.carts[cart_id]
            return True
        return False

    def set_buyer(self, cart_id: str, customer_id: str) -> Optional[PlatformCart]:
        cart = self.get_cart(cart_id)
        if not cart:
            return None
        cart.buyer_customer_id = customer_id
        cart.updated_at = datetime.utcnow()
        return cart

    def add_lines(self, cart_id: str, lines: list[dict]) -> Optional[PlatformCart]:
        """Add lines; an existing line for the same variant is incremented"""
        cart = self.get_cart(cart_id)
        if not cart:
            return None
        self._append_lines(cart, lines)
        return cart

    def remove_lines(self, cart_id: str, line_ids: list[str]) -> Optional[PlatformCart]:
        cart = self.get_cart(cart_id)
        if not cart:
            return None

        known = {line.id for line in cart.lines}
        missing = [line_id for line_id in line_ids if line_id not in known]
        if missing:
            raise CartInputError(f"The line with id {missing[0]} does not exist.", ["lineIds"])

        cart.lines = [line for line in cart.lines if line.id not in set(line_ids)]
        cart.updated_at = datetime.utcnow()
        return cart

    def _append_lines(self, cart: PlatformCart, lines: list[dict]) -> None:
        # Validate everything before touching the cart.
        for line in lines:
            merchandise_id = line.get("merchandiseId")
            quantity = line.get("quantity", 1)
            if not merchandise_id or not self.products.get_variant(merchandise_id):
                raise CartInputError(
                    f"The merchandise with id {merchandise_id} does not exist.",
                    ["lines", "merchandiseId"],
                )
            if not isinstance(quantity, int) or quantity < 1:
                raise CartInputError("Quantity must be at least 1.", ["lines", "quantity"])

        for line in lines:
            existing = next(
                (current for current in cart.lines if current.merchandise_id == line["merchandiseId"]),
                None,
            )
            if existing:
                existing.quantity += line.get("quantity", 1)
            else:
                cart.lines.append(
                    CartLine(
                        id=f"gid://platform/CartLine/{uuid.uuid4().hex}",
                        merchandise_id=line["merchandiseId"],
                        quantity=line.get("quantity", 1),
                    )
                )
        cart.updated_at = datetime.utcnow()

    def to_graphql(self, cart: PlatformCart) -> dict:
        """Serialize a cart in the storefront API shape"""
        edges = []
        subtotal = Decimal("0")

        for line in cart.lines:
            variant = self.products.get_variant(line.merchandise_id)
            merchandise = None
            if variant:
                product = self.products.get_product(variant.product_id)
                subtotal += Decimal(variant.price) * line.quantity
                merchandise = {
                    "id": variant.id,
                    "title": variant.title,
                    "priceV2": {"amount": variant.price, "currencyCode": variant.currency},
                    "image": {"url": variant.image_url} if variant.image_url else None,
                    "product": {
                        "id": product.id if product else variant.product_id,
                        "title": product.title if product else "",
                        "handle": product.handle if product else "",
                    },
                }
            edges.append({
                "node": {"id": line.id, "quantity": line.quantity, "merchandise": merchandise}
            })

        tax = (subtotal * self.TAX_RATE).quantize(Decimal("0.01"))
        return {
            "id": cart.id,
            "checkoutUrl": f"{self.checkout_base_url}/checkouts/{cart.token}",
            "cost": {
                "subtotalAmount": {"amount": str(subtotal), "currencyCode": cart.currency},
                "totalAmount": {"amount": str(subtotal + tax), "currencyCode": cart.currency},
                "totalTaxAmount": {"amount": str(tax), "currencyCode": cart.currency},
            },
            "lines": {"edges": edges},
        }
