"""
Tests for the remote cart service
"""

import pytest

from storefront.services.cart_service import (
    CART_BUYER_IDENTITY_UPDATE_MUTATION,
    CART_CREATE_MUTATION,
    CART_LINES_ADD_MUTATION,
    CART_LINES_REMOVE_MUTATION,
    GET_CART_QUERY,
    CartConsistencyError,
    CartUserError,
    RemoteCartService,
)
from storefront.services.platform_client import PlatformAPIError

from .conftest import SWEATER_ID, TOTE_ID, remote_cart_data

CART_ID = "gid://platform/Cart/abc"
TOKEN = "customer-token"


def _payload(cart=None, errors=()):
    return {"cart": cart, "userErrors": [{"message": m} for m in errors]}


class ScriptedClient:
    """Platform client answering each operation from a queue of responses"""

    def __init__(self, responses):
        self.responses = {query: list(queue) for query, queue in responses.items()}
        self.calls = []

    async def execute(self, query, variables=None):
        self.calls.append((query, variables))
        response = self.responses[query].pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def operations(self):
        names = {
            GET_CART_QUERY: "getCart",
            CART_CREATE_MUTATION: "cartCreate",
            CART_LINES_ADD_MUTATION: "cartLinesAdd",
            CART_LINES_REMOVE_MUTATION: "cartLinesRemove",
            CART_BUYER_IDENTITY_UPDATE_MUTATION: "cartBuyerIdentityUpdate",
        }
        return [names[query] for query, _ in self.calls]


class TestGetCart:
    """Tests for cart lookup."""

    @pytest.mark.asyncio
    async def test_found(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {
            "cart": remote_cart_data(lines=[("line-1", SWEATER_ID, 2)])
        }
        service = RemoteCartService(mock_graphql_client)

        cart = await service.get_cart_by_id(CART_ID)

        assert cart.id == CART_ID
        assert cart.line_nodes[0].merchandise.id == SWEATER_ID
        assert cart.line_nodes[0].quantity == 2

    @pytest.mark.asyncio
    async def test_not_found(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {"cart": None}
        service = RemoteCartService(mock_graphql_client)

        assert await service.get_cart_by_id(CART_ID) is None

    @pytest.mark.asyncio
    async def test_malformed_cart(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {"cart": {"id": CART_ID}}
        service = RemoteCartService(mock_graphql_client)

        with pytest.raises(CartConsistencyError):
            await service.get_cart_by_id(CART_ID)


class TestCreateCart:
    """Tests for cart creation."""

    @pytest.mark.asyncio
    async def test_variables(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {"cartCreate": _payload(remote_cart_data())}
        service = RemoteCartService(mock_graphql_client)
        lines = [{"merchandiseId": SWEATER_ID, "quantity": 1}]

        await service.create_cart(TOKEN, lines)

        variables = mock_graphql_client.execute.await_args.args[1]
        assert variables == {
            "input": {"lines": lines, "buyerIdentity": {"customerAccessToken": TOKEN}}
        }

    @pytest.mark.asyncio
    async def test_anonymous_has_no_buyer_identity(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {"cartCreate": _payload(remote_cart_data())}
        service = RemoteCartService(mock_graphql_client)

        await service.create_cart()

        assert mock_graphql_client.execute.await_args.args[1] == {"input": {}}

    @pytest.mark.asyncio
    async def test_user_errors(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {
            "cartCreate": _payload(errors=["The merchandise does not exist."])
        }
        service = RemoteCartService(mock_graphql_client)

        with pytest.raises(CartUserError, match="merchandise does not exist"):
            await service.create_cart(TOKEN, [])

    @pytest.mark.asyncio
    async def test_no_cart_returned(self, mock_graphql_client):
        mock_graphql_client.execute.return_value = {"cartCreate": _payload()}
        service = RemoteCartService(mock_graphql_client)

        with pytest.raises(CartConsistencyError):
            await service.create_cart(TOKEN)


class TestGetOrCreateCustomerCart:
    """Tests for find-or-create of the customer's cart."""

    @pytest.mark.asyncio
    async def test_no_preferred_cart_creates(self):
        client = ScriptedClient({CART_CREATE_MUTATION: [{"cartCreate": _payload(remote_cart_data())}]})
        service = RemoteCartService(client)

        cart = await service.get_or_create_customer_cart(None, TOKEN)

        assert cart.id == CART_ID
        assert client.operations() == ["cartCreate"]

    @pytest.mark.asyncio
    async def test_missing_cart_creates_new(self):
        new_cart = remote_cart_data(cart_id="gid://platform/Cart/new")
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": None}],
            CART_CREATE_MUTATION: [{"cartCreate": _payload(new_cart)}],
        })
        service = RemoteCartService(client)

        cart = await service.get_or_create_customer_cart("gid://platform/Cart/gone", TOKEN)

        assert cart.id == "gid://platform/Cart/new"
        assert client.operations() == ["getCart", "cartCreate"]

    @pytest.mark.asyncio
    async def test_existing_cart_rebound_and_returned(self):
        existing = remote_cart_data(lines=[("line-1", SWEATER_ID, 1)])
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": existing}],
            CART_BUYER_IDENTITY_UPDATE_MUTATION: [{"cartBuyerIdentityUpdate": _payload(existing)}],
        })
        service = RemoteCartService(client)

        cart = await service.get_or_create_customer_cart(CART_ID, TOKEN)

        assert cart.id == CART_ID
        assert client.operations() == ["getCart", "cartBuyerIdentityUpdate"]
        assert client.calls[1][1]["buyerIdentity"] == {"customerAccessToken": TOKEN}

    @pytest.mark.asyncio
    async def test_replace_lines(self):
        existing = remote_cart_data(lines=[("line-1", SWEATER_ID, 1)])
        emptied = remote_cart_data()
        replaced = remote_cart_data(lines=[("line-2", TOTE_ID, 2)])
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": existing}, {"cart": existing}],
            CART_BUYER_IDENTITY_UPDATE_MUTATION: [{"cartBuyerIdentityUpdate": _payload(existing)}],
            CART_LINES_REMOVE_MUTATION: [{"cartLinesRemove": _payload(emptied)}],
            CART_LINES_ADD_MUTATION: [{"cartLinesAdd": _payload(replaced)}],
        })
        service = RemoteCartService(client)

        cart = await service.get_or_create_customer_cart(
            CART_ID, TOKEN, lines=[{"merchandiseId": TOTE_ID, "quantity": 2}]
        )

        assert [(line.merchandise.id, line.quantity) for line in cart.line_nodes] == [(TOTE_ID, 2)]
        assert client.operations() == [
            "getCart",
            "cartBuyerIdentityUpdate",
            "getCart",
            "cartLinesRemove",
            "cartLinesAdd",
        ]
        assert client.calls[3][1]["lineIds"] == ["line-1"]

    @pytest.mark.asyncio
    async def test_replace_with_empty_list(self):
        existing = remote_cart_data(lines=[("line-1", SWEATER_ID, 1)])
        emptied = remote_cart_data()
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": existing}, {"cart": existing}, {"cart": emptied}],
            CART_BUYER_IDENTITY_UPDATE_MUTATION: [{"cartBuyerIdentityUpdate": _payload(existing)}],
            CART_LINES_REMOVE_MUTATION: [{"cartLinesRemove": _payload(emptied)}],
        })
        service = RemoteCartService(client)

        cart = await service.get_or_create_customer_cart(CART_ID, TOKEN, lines=[])

        assert cart.line_nodes == []
        assert "cartLinesAdd" not in client.operations()


class TestReplaceCartLines:
    """Tests for wholesale line replacement."""

    @pytest.mark.asyncio
    async def test_empty_cart_skips_remove(self):
        empty = remote_cart_data()
        replaced = remote_cart_data(lines=[("line-2", TOTE_ID, 1)])
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": empty}],
            CART_LINES_ADD_MUTATION: [{"cartLinesAdd": _payload(replaced)}],
        })
        service = RemoteCartService(client)

        await service.replace_cart_lines(CART_ID, [{"merchandiseId": TOTE_ID, "quantity": 1}])

        assert client.operations() == ["getCart", "cartLinesAdd"]

    @pytest.mark.asyncio
    async def test_missing_cart(self):
        client = ScriptedClient({GET_CART_QUERY: [{"cart": None}]})
        service = RemoteCartService(client)

        with pytest.raises(CartConsistencyError):
            await service.replace_cart_lines(CART_ID, [])

    @pytest.mark.asyncio
    async def test_failed_add_restores_previous_lines(self):
        existing = remote_cart_data(lines=[("line-1", SWEATER_ID, 3)])
        emptied = remote_cart_data()
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": existing}],
            CART_LINES_REMOVE_MUTATION: [{"cartLinesRemove": _payload(emptied)}],
            CART_LINES_ADD_MUTATION: [
                {"cartLinesAdd": _payload(errors=["The merchandise does not exist."])},
                {"cartLinesAdd": _payload(existing)},
            ],
        })
        service = RemoteCartService(client)

        with pytest.raises(CartUserError):
            await service.replace_cart_lines(CART_ID, [{"merchandiseId": "gid://platform/ProductVariant/9", "quantity": 1}])

        assert client.operations() == ["getCart", "cartLinesRemove", "cartLinesAdd", "cartLinesAdd"]
        assert client.calls[3][1]["lines"] == [{"merchandiseId": SWEATER_ID, "quantity": 3}]

    @pytest.mark.asyncio
    async def test_failed_restore_still_raises_original(self):
        existing = remote_cart_data(lines=[("line-1", SWEATER_ID, 1)])
        client = ScriptedClient({
            GET_CART_QUERY: [{"cart": existing}],
            CART_LINES_REMOVE_MUTATION: [{"cartLinesRemove": _payload(remote_cart_data())}],
            CART_LINES_ADD_MUTATION: [
                PlatformAPIError("Platform request failed: 502"),
                PlatformAPIError("Platform request failed: 502"),
            ],
        })
        service = RemoteCartService(client)

        with pytest.raises(PlatformAPIError, match="502"):
            await service.replace_cart_lines(CART_ID, [{"merchandiseId": TOTE_ID, "quantity": 1}])
