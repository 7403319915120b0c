"""gRPC facade: authentication, status mapping and delegation to the services."""

import grpc
import pytest

from storefront.core.errors import EmptyCart, Internal, NotFound, StorefrontError
from storefront.core.security import create_access_token
from storefront.rpc import codec
from storefront.rpc.servicers import AdminServicer, ShopServicer, status_for
from storefront.services.catalog_service.service import CatalogService


class RpcAborted(Exception):
    def __init__(self, code, details):
        super().__init__(details)
        self.code = code
        self.details = details


class FakeContext:
    def __init__(self, token=None):
        self.metadata = (("authorization", f"Bearer {token}"),) if token else ()

    def invocation_metadata(self):
        return self.metadata

    async def abort(self, code, details):
        raise RpcAborted(code, details)


def _context(user):
    return FakeContext(create_access_token(user.id))


@pytest.fixture
def shop(session_factory):
    return ShopServicer(session_factory)


@pytest.fixture
def admin(session_factory):
    return AdminServicer(session_factory)


class TestStatusMapping:
    @pytest.mark.parametrize(
        "error,code",
        [
            (NotFound(), grpc.StatusCode.NOT_FOUND),
            (EmptyCart(), grpc.StatusCode.FAILED_PRECONDITION),
            (Internal(), grpc.StatusCode.INTERNAL),
        ],
    )
    def test_error_to_status(self, error, code):
        assert status_for(error)[0] == code

    def test_internal_details_are_fixed(self):
        assert status_for(StorefrontError("connection refused on 10.0.0.3")) == (
            grpc.StatusCode.INTERNAL,
            "Internal server error",
        )


class TestShopService:
    async def test_missing_token(self, shop):
        with pytest.raises(RpcAborted) as exc_info:
            await shop.GetCartCount({}, FakeContext())

        assert exc_info.value.code == grpc.StatusCode.UNAUTHENTICATED

    async def test_raw_token_without_scheme(self, shop, make_user):
        user = await make_user()
        context = FakeContext()
        context.metadata = (("authorization", create_access_token(user.id)),)

        assert await shop.GetCartCount({}, context) == {"count": 0}

    async def test_cart_round_trip(self, shop, make_user, make_product):
        user = await make_user()
        product = await make_product(price=400, stock=5)
        context = _context(user)

        assert await shop.AddToCart({"product_id": product.id, "quantity": 2}, context) == {"success": True}
        assert await shop.GetCartCount({}, context) == {"count": 1}

        cart = await shop.GetCartItems({}, context)
        assert cart["total"] == 800
        assert cart["items"][0]["product"]["name"] == product.name

        await shop.RemoveFromCart({"product_id": product.id}, context)
        await shop.RemoveFromCart({"product_id": product.id}, context)
        assert await shop.GetCartCount({}, context) == {"count": 0}

    async def test_insufficient_stock(self, shop, make_user, make_product):
        user = await make_user()
        product = await make_product(stock=1)

        with pytest.raises(RpcAborted) as exc_info:
            await shop.AddToCart({"product_id": product.id, "quantity": 3}, _context(user))

        assert exc_info.value.code == grpc.StatusCode.FAILED_PRECONDITION
        assert exc_info.value.details == "Insufficient stock"

    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_update_quantity_must_be_positive(self, shop, make_user, make_product, quantity):
        user = await make_user()
        product = await make_product()
        context = _context(user)
        await shop.AddToCart({"product_id": product.id, "quantity": 1}, context)

        with pytest.raises(RpcAborted) as exc_info:
            await shop.UpdateCartQuantity({"product_id": product.id, "quantity": quantity}, context)

        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT
        assert await shop.GetCartCount({}, context) == {"count": 1}

    async def test_malformed_request(self, shop, make_user):
        user = await make_user()

        with pytest.raises(RpcAborted) as exc_info:
            await shop.AddToCart({"product_id": "abc"}, _context(user))

        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT

    async def test_products_in_currency(self, shop, currencies, make_user, make_product):
        user = await make_user()
        await make_product(price=1000, currency_code="EUR")

        response = await shop.GetProducts({"currency_code": "USD", "category_id": ""}, _context(user))

        assert [p["price"] for p in response["products"]] == [1100]

    async def test_search(self, shop, make_user, make_product):
        user = await make_user()
        await make_product(name="Garden chair")

        response = await shop.SearchProducts({"query": "chair"}, _context(user))

        assert [p["name"] for p in response["products"]] == ["Garden chair"]

    async def test_unexpected_errors_are_hidden(self, shop, make_user, monkeypatch):
        user = await make_user()

        async def boom(db):
            raise RuntimeError("password=hunter2")

        monkeypatch.setattr(CatalogService, "list_categories", staticmethod(boom))

        with pytest.raises(RpcAborted) as exc_info:
            await shop.GetCategories({}, _context(user))

        assert exc_info.value.code == grpc.StatusCode.INTERNAL
        assert exc_info.value.details == "Internal server error"


class TestAdminService:
    async def test_non_admin_is_denied(self, admin, make_user):
        user = await make_user()

        with pytest.raises(RpcAborted) as exc_info:
            await admin.CreateCategory({"name": "Garden"}, _context(user))

        assert exc_info.value.code == grpc.StatusCode.PERMISSION_DENIED

    async def test_product_lifecycle(self, admin, make_user):
        user = await make_user(is_admin=True)
        context = _context(user)

        category = await admin.CreateCategory({"name": "Garden"}, context)
        product = await admin.CreateProduct(
            {"name": "Rake", "price": 1500, "stock": 2, "category_id": category["id"]}, context
        )
        updated = await admin.UpdateProduct({"id": product["id"], "stock": 7}, context)

        assert updated["stock"] == 7
        assert updated["category"]["name"] == "Garden"

        assert await admin.DeleteProduct({"id": product["id"]}, context) == {"success": True}
        with pytest.raises(RpcAborted) as exc_info:
            await admin.DeleteProduct({"id": product["id"]}, context)
        assert exc_info.value.code == grpc.StatusCode.NOT_FOUND

    async def test_orders_and_stats(self, admin, make_user, make_product, make_order):
        user = await make_user(is_admin=True)
        product = await make_product()
        order = await make_order(user, [(product, 2, 250)])
        context = _context(user)

        changed = await admin.UpdateOrderStatus({"order_id": order.id, "status": "delivered"}, context)
        assert changed["status"] == "delivered"

        page = await admin.GetOrders({"status": "delivered"}, context)
        assert page["total_count"] == 1

        stats = await admin.GetSalesStats(
            {"start_date": "2000-01-01T00:00:00Z", "end_date": "2100-01-01T00:00:00Z"}, context
        )
        assert stats["total_sales"] == 500

    async def test_reversed_stats_range(self, admin, make_user):
        user = await make_user(is_admin=True)

        with pytest.raises(RpcAborted) as exc_info:
            await admin.GetSalesStats(
                {"start_date": "2026-03-02T00:00:00Z", "end_date": "2026-03-01T00:00:00Z"}, _context(user)
            )

        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT


class TestCodec:
    def test_empty_payload_is_an_empty_message(self):
        assert codec.decode(b"") == {}

    def test_non_object_payload_is_rejected(self):
        with pytest.raises(ValueError):
            codec.decode(b"[1, 2]")

    def test_protobuf_payload_is_rejected(self):
        # field 1 varint 150, as a protobuf client would send it
        with pytest.raises(ValueError, match="not protobuf"):
            codec.decode(b"\x08\x96\x01")

    def test_encode_is_compact_json(self):
        assert codec.encode({"product_id": 3, "quantity": 2}) == b'{"product_id":3,"quantity":2}'
