"""Customer accounts and access tokens for the mock platform"""

import secrets
from datetime import datetime, timedelta
from typing import Optional

from ..models.customer import AccessToken, PlatformCustomer


class CustomerDatabase:
    """In-memory customer storage"""

    TOKEN_TTL = timedelta(days=14)

    def __init__(self):
        self.customers: dict[str, PlatformCustomer] = {}
        self.tokens: dict[str, AccessToken] = {}
        self._next_id = 5001

    def create_customer(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Optional[PlatformCustomer]:
        """Create a customer; None when the email is taken"""
        if self.get_by_email(email):
            return None

        customer = PlatformCustomer(
            id=f"gid://platform/Customer/{self._next_id}",
            email=email.lower(),
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
        self._next_id += 1
        self.customers[customer.id] = customer
        return customer

    def get_customer(self, customer_id: str) -> Optional[PlatformCustomer]:
        return self.customers.get(customer_id)

    def get_by_email(self, email: str) -> Optional[PlatformCustomer]:
        email = email.lower()
        return next((c for c in self.customers.values() if c.email == email), None)

    def authenticate(self, email: str, password: str) -> Optional[AccessToken]:
        """Issue an access token for valid credentials"""
        customer = self.get_by_email(email)
        if not customer or customer.password != password:
            return None

        token = AccessToken(
            token=secrets.token_hex(16),
            customer_id=customer.id,
            expires_at=datetime.utcnow() + self.TOKEN_TTL,
        )
        self.tokens[token.token] = token
        return token

    def get_by_token(self, access_token: str) -> Optional[PlatformCustomer]:
        """Customer owning an unexpired token"""
        token = self.tokens.get(access_token)
        if not token or token.expires_at <= datetime.utcnow():
            return None
        return self.get_customer(token.customer_id)

    def add_tags(self, customer_id: str, tags: list[str]) -> Optional[PlatformCustomer]:
        customer = self.get_customer(customer_id)
        if not customer:
            return None
        for tag in tags:
            if tag not in customer.tags:
                customer.tags.append(tag)
        return customer

    def get_metafield(self, customer_id: str, namespace: str, key: str) -> Optional[str]:
        customer = self.get_customer(customer_id)
        if not customer:
            return None
        return customer.metafields.get(f"{namespace}.{key}")

    def set_metafield(
        self,
        customer_id: str,
        namespace: str,
        key: str,
        value: str,
    ) -> Optional[PlatformCustomer]:
        customer = self.get_customer(customer_id)
        if not customer:
            return None
        customer.metafields[f"{namespace}.{key}"] = value
        return customer
