"""Mock catalog database"""

from decimal import Decimal
from typing import Optional

from ..models.product import Product, ProductVariant

# Mock catalog
PRODUCTS: dict[str, Product] = {
    "gid://platform/Product/101": Product(
        id="gid://platform/Product/101",
        handle="merino-crew-sweater",
        title="Merino Crew Sweater",
        description="Fine-gauge merino wool crew neck.",
    ),
    "gid://platform/Product/102": Product(
        id="gid://platform/Product/102",
        handle="canvas-tote",
        title="Canvas Tote",
        description="Heavyweight cotton canvas tote bag.",
    ),
    "gid://platform/Product/103": Product(
        id="gid://platform/Product/103",
        handle="ceramic-pour-over",
        title="Ceramic Pour-Over",
        description="Single-cup stoneware coffee dripper.",
    ),
}

VARIANTS: dict[str, ProductVariant] = {
    "gid://platform/ProductVariant/1001": ProductVariant(
        id="gid://platform/ProductVariant/1001",
        product_id="gid://platform/Product/101",
        title="Navy / M",
        price="89.00",
        image_url="https://cdn.example.com/merino-navy.jpg",
    ),
    "gid://platform/ProductVariant/1002": ProductVariant(
        id="gid://platform/ProductVariant/1002",
        product_id="gid://platform/Product/101",
        title="Oat / L",
        price="89.00",
        image_url="https://cdn.example.com/merino-oat.jpg",
    ),
    "gid://platform/ProductVariant/2001": ProductVariant(
        id="gid://platform/ProductVariant/2001",
        product_id="gid://platform/Product/102",
        title="Natural",
        price="24.50",
    ),
    "gid://platform/ProductVariant/3001": ProductVariant(
        id="gid://platform/ProductVariant/3001",
        product_id="gid://platform/Product/103",
        title="Default Title",
        price="42.00",
        image_url="https://cdn.example.com/pour-over.jpg",
    ),
}


class ProductDatabase:
    """In-memory catalog"""

    def __init__(self):
        self.products = dict(PRODUCTS)
        self.variants = dict(VARIANTS)

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        """Get a variant by ID"""
        return self.variants.get(variant_id)

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_by_handle(self, handle: str) -> Optional[Product]:
        return next((p for p in self.products.values() if p.handle == handle), None)

    def variants_for(self, product_id: str) -> list[ProductVariant]:
        return [v for v in self.variants.values() if v.product_id == product_id]

    def list_products(self, after: Optional[str] = None, first: int = 20) -> tuple[list[Product], bool]:
        """
        Page through products in catalog order.

        Returns:
            Tuple of (page, whether more products follow)
        """
        results = list(self.products.values())
        if after:
            ids = [p.id for p in results]
            start = ids.index(after) + 1 if after in ids else len(ids)
            results = results[start:]
        return results[:first], len(results) > first

    def search_products(self, query: str, limit: int = 6) -> list[Product]:
        """Products whose title or handle contains the query, hiding unavailable ones"""
        query_lower = query.lower()
        results = [
            p for p in self.products.values()
            if query_lower in p.title.lower() or query_lower in p.handle
        ]

        # Filter by stock
        results = [
            p for p in results
            if any(v.stock_quantity > 0 for v in self.variants_for(p.id))
        ]
        return results[:limit]

    def to_graphql(self, product: Product) -> dict:
        """Serialize a product in the storefront API shape (first variant only)"""
        variants = self.variants_for(product.id)
        first = variants[0] if variants else None
        min_price = min((Decimal(v.price) for v in variants), default=None)
        currency = first.currency if first else "USD"
        return {
            "id": product.id,
            "title": product.title,
            "handle": product.handle,
            "description": product.description,
            "featuredImage": {"url": first.image_url} if first and first.image_url else None,
            "variants": {
                "edges": [
                    {
                        "node": {
                            "id": first.id,
                            "title": first.title,
                            "priceV2": {"amount": first.price, "currencyCode": first.currency},
                        }
                    }
                ] if first else []
            },
            "priceRange": {
                "minVariantPrice": {"amount": str(min_price), "currencyCode": currency}
            } if min_price is not None else None,
        }

    def to_search_result(self, product: Product) -> dict:
        node = self.to_graphql(product)
        return {
            "id": node["id"],
            "title": node["title"],
            "handle": node["handle"],
            "featuredImage": node["featuredImage"],
            "priceRange": node["priceRange"],
        }

    def delete_variant(self, variant_id: str) -> bool:
        """Remove a variant; cart lines pointing at it lose their merchandise"""
        if variant_id in self.variants:
            del self.variants[variant_id]
            return True
        return False


# Singleton instance
product_db = ProductDatabase()
