"""Customer authentication against the platform's storefront API"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..models.platform import (
    Customer,
    CustomerAccessTokenPayload,
    CustomerCreatePayload,
)
from .platform_client import PlatformAPIError, PlatformGraphQLClient

logger = logging.getLogger(__name__)


CUSTOMER_ACCESS_TOKEN_CREATE_MUTATION = """
  mutation customerAccessTokenCreate($input: CustomerAccessTokenCreateInput!) {
    customerAccessTokenCreate(input: $input) {
      customerAccessToken {
        accessToken
        expiresAt
      }
      customerUserErrors {
        code
        field
        message
      }
    }
  }
"""

CUSTOMER_BY_TOKEN_QUERY = """
  query CustomerByToken($customerAccessToken: String!) {
    customer(customerAccessToken: $customerAccessToken) {
      id
      firstName
      lastName
      email
      phone
    }
  }
"""

CUSTOMER_CREATE_MUTATION = """
  mutation customerCreate($input: CustomerCreateInput!) {
    customerCreate(input: $input) {
      customer {
        id
        email
        firstName
        lastName
      }
      customerUserErrors {
        code
        field
        message
      }
    }
  }
"""


class CustomerAuthService:
    """Customer lookup, sign-in and registration"""

    def __init__(self, client: PlatformGraphQLClient):
        self._client = client

    async def get_customer_by_access_token(self, access_token: str) -> Optional[Customer]:
        """Customer owning the token, or None for unknown/expired tokens"""
        data = await self._client.execute(
            CUSTOMER_BY_TOKEN_QUERY,
            {"customerAccessToken": access_token},
        )
        raw = data.get("customer")
        if raw is None:
            return None

        try:
            return Customer.model_validate(raw)
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected customer response: {e.error_count()} errors") from e

    async def create_customer_access_token(
        self,
        email: str,
        password: str,
    ) -> CustomerAccessTokenPayload:
        data = await self._client.execute(
            CUSTOMER_ACCESS_TOKEN_CREATE_MUTATION,
            {"input": {"email": email, "password": password}},
        )
        try:
            return CustomerAccessTokenPayload.model_validate(data.get("customerAccessTokenCreate"))
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected access token response: {e.error_count()} errors") from e

    async def create_customer(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> CustomerCreatePayload:
        customer_input = {"email": email, "password": password}
        if first_name:
            customer_input["firstName"] = first_name
        if last_name:
            customer_input["lastName"] = last_name

        data = await self._client.execute(CUSTOMER_CREATE_MUTATION, {"input": customer_input})
        try:
            payload = CustomerCreatePayload.model_validate(data.get("customerCreate"))
        except ValidationError as e:
            raise PlatformAPIError(f"Unexpected customer create response: {e.error_count()} errors") from e

        if payload.customer:
            logger.info(f"Created customer {payload.customer.id}")
        return payload
