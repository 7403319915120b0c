import itertools
import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("OTLP_ENDPOINT", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from storefront.core.database import create_tables, get_db
from storefront.core.security import create_access_token
from storefront.main import app
from storefront.services.auth_service.models import User
from storefront.services.catalog_service.models import Category, Currency, Product
from storefront.services.order_service.models import Order, OrderItem
from storefront.services.profile_service.models import Address, UserProfile

_ids = itertools.count(1)

BILLING = {
    "address_line1": "Calle Mayor 1",
    "city": "Madrid",
    "state": "Madrid",
    "postal_code": "28013",
    "country": "ES",
}


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make(is_admin=False, billing_address=None, is_active=True):
        user = User(
            email=f"user{next(_ids)}@storefront.io",
            hashed_password="not-a-real-hash",
            is_admin=is_admin,
            is_active=is_active,
        )
        db.add(user)
        await db.flush()
        db.add(UserProfile(id=user.id, billing_address=dict(billing_address or {})))
        await db.commit()
        return user
    return _make


@pytest.fixture
def make_category(db):
    async def _make(name="Category", description=None):
        category = Category(name=name, description=description)
        db.add(category)
        await db.commit()
        return category
    return _make


@pytest.fixture
def make_product(db):
    async def _make(name=None, price=1000, stock=10, category=None, currency_code=None, description=None):
        product = Product(
            name=name or f"Product {next(_ids)}",
            description=description,
            price=price,
            stock=stock,
            category_id=category.id if category else None,
            currency_code=currency_code,
        )
        db.add(product)
        await db.commit()
        return product
    return _make


@pytest.fixture
def make_address(db):
    async def _make(user, type="shipping", is_default=True, **overrides):
        fields = dict(
            name="Home",
            address_line1="Gran Via 10",
            city="Madrid",
            postal_code="28013",
            country="ES",
        )
        fields.update(overrides)
        address = Address(user_id=user.id, type=type, is_default=is_default, **fields)
        db.add(address)
        await db.commit()
        return address
    return _make


@pytest_asyncio.fixture
async def currencies(db):
    db.add_all([
        Currency(code="EUR", name="Euro", symbol="€", rate=1.0, is_base=True),
        Currency(code="USD", name="US Dollar", symbol="$", rate=1.1, is_base=False),
    ])
    await db.commit()


def auth_headers(user):
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_order(db):
    """Insert an order with its items directly; lines are (product, quantity, unit price)."""
    async def _make(user, lines, status="pending", created_at=None):
        # Explicit None would bypass the column defaults
        stamp = {"created_at": created_at} if created_at else {}
        order = Order(
            user_id=user.id,
            status=status,
            total_amount=sum(quantity * price for _, quantity, price in lines),
            **stamp,
        )
        db.add(order)
        await db.flush()
        db.add_all([
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                price_at_time=price,
                **stamp,
            )
            for product, quantity, price in lines
        ])
        await db.commit()
        return order
    return _make
