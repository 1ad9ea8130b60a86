"""
Remote Cart Service

Cart operations against the commerce platform and the reconciliation used
by the cart routes: find-or-create the customer's cart, rebind it to the
customer, and replace its lines wholesale.
"""

import logging
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models.platform import CartPayload, RemoteCart, RemoteCartLine
from .platform_client import PlatformAPIError, PlatformGraphQLClient

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RemoteCartError(Exception):
    """Base exception for remote cart failures"""
    pass


class CartUserError(RemoteCartError):
    """The platform rejected a cart mutation with user errors"""
    pass


class CartConsistencyError(RemoteCartError):
    """The platform returned no cart or a cart of unexpected shape"""
    pass


CART_FIELDS = """
  id
  checkoutUrl
  cost {
    subtotalAmount {
      amount
      currencyCode
    }
    totalAmount {
      amount
      currencyCode
    }
    totalTaxAmount {
      amount
      currencyCode
    }
  }
  lines(first: 250) {
    edges {
      node {
        id
        quantity
        merchandise {
          ... on ProductVariant {
            id
            title
            priceV2 {
              amount
              currencyCode
            }
            image {
              url
            }
            product {
              id
              title
              handle
            }
          }
        }
      }
    }
  }
"""

GET_CART_QUERY = f"""
  query getCart($id: ID!) {{
    cart(id: $id) {{
      {CART_FIELDS}
    }}
  }}
"""

CART_CREATE_MUTATION = f"""
  mutation cartCreate($input: CartInput!) {{
    cartCreate(input: $input) {{
      cart {{
        {CART_FIELDS}
      }}
      userErrors {{
        field
        message
      }}
    }}
  }}
"""

CART_LINES_REMOVE_MUTATION = f"""
  mutation cartLinesRemove($cartId: ID!, $lineIds: [ID!]!) {{
    cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {{
      cart {{
        {CART_FIELDS}
      }}
      userErrors {{
        message
      }}
    }}
  }}
"""

CART_LINES_ADD_MUTATION = f"""
  mutation cartLinesAdd($cartId: ID!, $lines: [CartLineInput!]!) {{
    cartLinesAdd(cartId: $cartId, lines: $lines) {{
      cart {{
        {CART_FIELDS}
      }}
      userErrors {{
        message
      }}
    }}
  }}
"""

CART_BUYER_IDENTITY_UPDATE_MUTATION = f"""
  mutation cartBuyerIdentityUpdate($cartId: ID!, $buyerIdentity: CartBuyerIdentityInput!) {{
    cartBuyerIdentityUpdate(cartId: $cartId, buyerIdentity: $buyerIdentity) {{
      cart {{
        {CART_FIELDS}
      }}
      userErrors {{
        message
      }}
    }}
  }}
"""


def _parse(model: Type[ModelT], value: object, what: str) -> ModelT:
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise CartConsistencyError(
            f"Unexpected {what} response from platform: {e.error_count()} errors"
        ) from e


class RemoteCartService:
    """
    Cart adapter over the platform's storefront API.

    Every method propagates PlatformAPIError and RemoteCartError to the
    caller, who decides whether to heal, retry or surface.
    """

    def __init__(self, client: PlatformGraphQLClient):
        self._client = client

    async def _mutate(
        self,
        query: str,
        variables: dict,
        payload_key: str,
        failure_message: str,
    ) -> RemoteCart:
        data = await self._client.execute(query, variables)
        payload = _parse(CartPayload, data.get(payload_key), payload_key)

        if payload.user_errors:
            raise CartUserError(payload.user_errors[0].message or failure_message)
        if payload.cart is None:
            raise CartConsistencyError(f"{payload_key} returned no cart.")
        return payload.cart

    async def get_cart_by_id(self, cart_id: str) -> Optional[RemoteCart]:
        """Fetch a cart; None when it no longer exists upstream"""
        data = await self._client.execute(GET_CART_QUERY, {"id": cart_id})
        raw_cart = data.get("cart")
        if raw_cart is None:
            return None
        return _parse(RemoteCart, raw_cart, "cart")

    async def create_cart(
        self,
        customer_access_token: Optional[str] = None,
        lines: Optional[list[dict]] = None,
    ) -> RemoteCart:
        """Create a cart, bound to the customer when a token is given"""
        cart_input: dict = {}
        if lines is not None:
            cart_input["lines"] = lines
        if customer_access_token:
            cart_input["buyerIdentity"] = {"customerAccessToken": customer_access_token}

        cart = await self._mutate(
            CART_CREATE_MUTATION,
            {"input": cart_input},
            "cartCreate",
            "Failed to create cart.",
        )
        logger.info(f"Created cart {cart.id}")
        return cart

    async def bind_cart_to_customer(
        self,
        cart_id: str,
        customer_access_token: str,
    ) -> RemoteCart:
        """Associate the cart with the customer; safe to repeat"""
        return await self._mutate(
            CART_BUYER_IDENTITY_UPDATE_MUTATION,
            {
                "cartId": cart_id,
                "buyerIdentity": {"customerAccessToken": customer_access_token},
            },
            "cartBuyerIdentityUpdate",
            "Failed to update cart buyer identity.",
        )

    async def _add_lines(self, cart_id: str, lines: list[dict]) -> RemoteCart:
        return await self._mutate(
            CART_LINES_ADD_MUTATION,
            {"cartId": cart_id, "lines": lines},
            "cartLinesAdd",
            "Failed to add cart lines.",
        )

    async def _restore_lines(self, cart_id: str, previous: list[RemoteCartLine]) -> None:
        """Best-effort re-add of the lines removed before a failed add"""
        lines = [
            {"merchandiseId": line.merchandise.id, "quantity": line.quantity}
            for line in previous
            if line.merchandise is not None
        ]
        if not lines:
            return

        try:
            await self._add_lines(cart_id, lines)
            logger.warning(f"Restored previous lines on cart {cart_id} after failed replacement")
        except (RemoteCartError, PlatformAPIError) as e:
            logger.error(f"Failed to restore lines on cart {cart_id}; cart left emptied: {e}")

    async def replace_cart_lines(self, cart_id: str, lines: list[dict]) -> RemoteCart:
        """
        Replace all lines of a cart.

        Removes every current line, then adds `lines`. If the add fails the
        previous lines are re-added once before the error is raised; when
        that also fails the cart stays emptied.
        """
        current = await self.get_cart_by_id(cart_id)
        if current is None:
            raise CartConsistencyError("Cart no longer exists.")

        previous = current.line_nodes
        line_ids = [line.id for line in previous]

        if line_ids:
            await self._mutate(
                CART_LINES_REMOVE_MUTATION,
                {"cartId": cart_id, "lineIds": line_ids},
                "cartLinesRemove",
                "Failed to remove existing cart lines.",
            )

        if not lines:
            emptied = await self.get_cart_by_id(cart_id)
            if emptied is None:
                raise CartConsistencyError("Cart no longer exists after line removal.")
            return emptied

        try:
            return await self._add_lines(cart_id, lines)
        except (RemoteCartError, PlatformAPIError):
            if line_ids:
                await self._restore_lines(cart_id, previous)
            raise

    async def get_or_create_customer_cart(
        self,
        preferred_cart_id: Optional[str],
        customer_access_token: str,
        lines: Optional[list[dict]] = None,
    ) -> RemoteCart:
        """
        Find or create the customer's cart.

        Args:
            preferred_cart_id: Cart reference resolved for this request
            customer_access_token: Token of the authenticated customer
            lines: When given, replace the cart's lines with these

        Returns:
            The customer's cart after any line replacement
        """
        if not preferred_cart_id:
            return await self.create_cart(customer_access_token, lines)

        existing = await self.get_cart_by_id(preferred_cart_id)
        if existing is None:
            logger.info(f"Cart {preferred_cart_id} no longer exists, creating a new one")
            return await self.create_cart(customer_access_token, lines)

        await self.bind_cart_to_customer(existing.id, customer_access_token)
        if lines is None:
            return existing

        return await self.replace_cart_lines(existing.id, lines)
