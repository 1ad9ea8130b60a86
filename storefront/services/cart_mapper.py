"""Translation from platform carts and products to application carts"""

from typing import Optional

from shared.cart.models import Cart, CartImage, CartItem
from shared.cart.utils import build_cart

from ..models.platform import RemoteCart, RemoteProductNode


def map_remote_cart_to_cart(remote_cart: RemoteCart) -> Cart:
    """Project platform lines to cart items, skipping lines whose merchandise is gone"""
    items = [
        CartItem(
            id=line.merchandise.id,
            variant_id=line.merchandise.id,
            product_id=line.merchandise.product.id,
            title=line.merchandise.product.title,
            variant_title=line.merchandise.title,
            handle=line.merchandise.product.handle,
            price=line.merchandise.price,
            featured_image=CartImage(url=line.merchandise.image.url) if line.merchandise.image else None,
            quantity=line.quantity,
        )
        for line in remote_cart.line_nodes
        if line.merchandise is not None
    ]
    # Platform totals are ignored; aggregates come from the items.
    return build_cart(items)


def to_cart_response(remote_cart: RemoteCart) -> dict:
    """JSON body fragment shared by the cart routes"""
    return {
        "cartId": remote_cart.id,
        "cart": map_remote_cart_to_cart(remote_cart).model_dump(
            by_alias=True, mode="json", exclude_none=True
        ),
        "checkoutUrl": remote_cart.checkout_url,
    }


def product_to_cart_item(product: RemoteProductNode) -> Optional[CartItem]:
    """Cart item for one unit of the product's first variant; None without variants"""
    variant = product.first_variant
    if variant is None:
        return None

    return CartItem(
        id=variant.id,
        variant_id=variant.id,
        product_id=product.id,
        title=product.title,
        variant_title=variant.title,
        handle=product.handle,
        price=variant.price,
        featured_image=CartImage(url=product.featured_image.url) if product.featured_image else None,
        quantity=1,
    )
