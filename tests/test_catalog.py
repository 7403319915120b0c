"""Catalog listing, currency conversion, suggestions and back-office writes."""

import pytest
from sqlalchemy.exc import OperationalError

from storefront.core.errors import NotFound
from storefront.services.catalog_service.pricing import convert_price
from storefront.services.catalog_service.schemas import ProductUpdate
from storefront.services.catalog_service.service import CatalogService

from .conftest import auth_headers

RATES = {"EUR": 1.0, "USD": 1.1, "GBP": 0.85}


class TestConvertPrice:
    def test_same_currency_is_untouched(self):
        assert convert_price(1999, "EUR", "EUR", RATES) == 1999

    def test_base_to_other(self):
        assert convert_price(1000, "EUR", "USD", RATES) == 1100

    def test_goes_through_the_base_currency(self):
        # 1100 USD -> 1000 EUR -> 850 GBP
        assert convert_price(1100, "USD", "GBP", RATES) == 850

    def test_rounds_half_up(self):
        assert convert_price(5, "EUR", "X", {"EUR": 1.0, "X": 0.5}) == 3
        assert convert_price(3, "EUR", "X", {"EUR": 1.0, "X": 0.5}) == 2

    @pytest.mark.parametrize("source,target", [(None, "USD"), ("EUR", None), ("EUR", "JPY"), ("JPY", "EUR")])
    def test_unknown_currency_keeps_price(self, source, target):
        assert convert_price(1000, source, target, RATES) == 1000


class TestListProducts:
    async def test_prices_in_requested_currency(self, db, currencies, make_product):
        await make_product(price=1000, currency_code="EUR")

        [product] = await CatalogService.list_products(db, currency_code="USD")

        assert product.price == 1100
        assert product.currency_code == "USD"

    async def test_defaults_to_base_currency(self, db, currencies, make_product):
        await make_product(price=1100, currency_code="USD")

        [product] = await CatalogService.list_products(db)

        assert product.price == 1000
        assert product.currency_code == "EUR"

    async def test_product_without_currency_is_in_base(self, db, currencies, make_product):
        await make_product(price=1000)

        [product] = await CatalogService.list_products(db, currency_code="USD")

        assert product.price == 1100

    async def test_listing_does_not_touch_stored_price(self, db, currencies, make_product):
        stored = await make_product(price=1000, currency_code="EUR")

        await CatalogService.list_products(db, currency_code="USD")

        assert (await CatalogService.get_product(db, stored.id)).price == 1000

    async def test_category_filter_and_ordering(self, db, make_category, make_product):
        books = await make_category("Books")
        toys = await make_category("Toys")
        older = await make_product(category=books)
        newer = await make_product(category=books)
        await make_product(category=toys)

        products = await CatalogService.list_products(db, category_id=books.id)

        assert [p.id for p in products] == [newer.id, older.id]
        assert products[0].category.name == "Books"


class TestSearch:
    async def test_short_query_returns_nothing(self, db, make_product):
        await make_product(name="Kettle")

        assert await CatalogService.search_products(db, "Ke") == []

    async def test_matches_name_or_description(self, db, make_product):
        await make_product(name="Electric Kettle")
        await make_product(name="Teapot", description="Pairs well with a kettle")
        await make_product(name="Toaster")

        names = [p.name for p in await CatalogService.search_products(db, "KETTLE")]

        assert sorted(names) == ["Electric Kettle", "Teapot"]

    async def test_at_most_five_suggestions(self, db, make_product):
        for i in range(7):
            await make_product(name=f"Mug {i}")

        assert len(await CatalogService.search_products(db, "mug")) == 5


class TestCatalogWrites:
    async def test_update_unknown_product(self, db):
        with pytest.raises(NotFound):
            await CatalogService.update_product(db, 404, ProductUpdate(price=1))

    async def test_partial_update(self, db, make_product):
        product = await make_product(name="Lamp", price=2000, stock=3)

        updated = await CatalogService.update_product(db, product.id, ProductUpdate(stock=9))

        assert updated.stock == 9
        assert updated.price == 2000
        assert updated.name == "Lamp"


class TestCatalogApi:
    async def test_database_errors_are_hidden(self, client, make_user, monkeypatch):
        async def db_down(db):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(CatalogService, "list_categories", staticmethod(db_down))

        response = await client.get("/catalog/categories", headers=auth_headers(await make_user()))

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    async def test_requires_authentication(self, client):
        response = await client.get("/catalog/products")

        assert response.status_code == 401

    async def test_browse(self, client, currencies, make_user, make_product):
        user = await make_user()
        await make_product(name="Desk", price=10000, currency_code="EUR")

        response = await client.get("/catalog/products", params={"currency": "USD"}, headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()[0]["price"] == 11000

        response = await client.get("/catalog/currencies/base", headers=auth_headers(user))
        assert response.json()["code"] == "EUR"

    async def test_unknown_product_is_404(self, client, make_user):
        user = await make_user()

        response = await client.get("/catalog/products/12345", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json() == {"detail": "Product not found"}

    async def test_admin_product_lifecycle(self, client, make_user):
        admin = await make_user(is_admin=True)
        headers = auth_headers(admin)

        response = await client.post("/admin/categories", json={"name": "Garden"}, headers=headers)
        assert response.status_code == 201
        category_id = response.json()["id"]

        response = await client.post(
            "/admin/products",
            json={"name": "Hose", "price": 2500, "stock": 4, "category_id": category_id},
            headers=headers,
        )
        assert response.status_code == 201
        product = response.json()
        assert product["category"]["name"] == "Garden"

        response = await client.patch(f"/admin/products/{product['id']}", json={"price": 2000}, headers=headers)
        assert response.json()["price"] == 2000

        response = await client.delete(f"/admin/products/{product['id']}", headers=headers)
        assert response.status_code == 204

        response = await client.get(f"/catalog/products/{product['id']}", headers=headers)
        assert response.status_code == 404

    async def test_negative_price_is_rejected(self, client, make_user):
        admin = await make_user(is_admin=True)

        response = await client.post(
            "/admin/products", json={"name": "Broken", "price": -1}, headers=auth_headers(admin)
        )

        assert response.status_code == 422

    async def test_non_admin_is_forbidden(self, client, make_user):
        user = await make_user()

        response = await client.post("/admin/categories", json={"name": "Garden"}, headers=auth_headers(user))

        assert response.status_code == 403
