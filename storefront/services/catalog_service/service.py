from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core import config
from storefront.core.errors import NotFound

from .models import Category, Product
from .pricing import convert_price
from .repository import CategoryRepository, CurrencyRepository, ProductRepository
from .schemas import (
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

logger = structlog.get_logger(__name__)

SUGGESTION_MIN_LENGTH = 3
SUGGESTION_LIMIT = 5


class CatalogService:

    @staticmethod
    async def list_products(
        db: AsyncSession,
        category_id: Optional[int] = None,
        currency_code: Optional[str] = None,
    ) -> List[ProductResponse]:
        """List products newest first with prices expressed in ``currency_code``.

        The target defaults to the base currency. Products without a currency
        are priced in the base currency.
        """
        currencies = await CurrencyRepository.list_currencies(db)
        rates = {c.code: c.rate for c in currencies}
        base_code = next((c.code for c in currencies if c.is_base), config.DEFAULT_CURRENCY)
        target = currency_code or base_code

        products = await ProductRepository.list_products(db, category_id)
        listing = []
        for product in products:
            source = product.currency_code or base_code
            listing.append(
                ProductResponse.model_validate(product).model_copy(
                    update={
                        "price": convert_price(product.price, source, target, rates),
                        "currency_code": target if target in rates else source,
                    }
                )
            )
        logger.info("products listed", count=len(listing), currency=target, category_id=category_id)
        return listing

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    @staticmethod
    async def search_products(db: AsyncSession, query: str):
        query = (query or "").strip()
        if len(query) < SUGGESTION_MIN_LENGTH:
            return []
        return await ProductRepository.search_products(db, query, SUGGESTION_LIMIT)

    @staticmethod
    async def list_categories(db: AsyncSession):
        return await CategoryRepository.list_categories(db)

    @staticmethod
    async def list_currencies(db: AsyncSession):
        return await CurrencyRepository.list_currencies(db)

    @staticmethod
    async def get_base_currency(db: AsyncSession):
        currency = await CurrencyRepository.get_base_currency(db)
        if currency is None:
            raise NotFound("Base currency not configured")
        return currency

    # --- back-office writes ---

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        product = await ProductRepository.create_product(db, Product(**data.model_dump()))
        logger.info("product created", product_id=product.id)
        return await CatalogService.get_product(db, product.id)

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        product = await CatalogService.get_product(db, product_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        await ProductRepository.update_product(db, product)
        logger.info("product updated", product_id=product_id, fields=sorted(data.model_fields_set))
        return await CatalogService.get_product(db, product_id)

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        await CatalogService.get_product(db, product_id)
        await ProductRepository.delete_product(db, product_id)
        logger.info("product deleted", product_id=product_id)

    @staticmethod
    async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
        category = await CategoryRepository.save_category(db, Category(**data.model_dump()))
        logger.info("category created", category_id=category.id)
        return category

    @staticmethod
    async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
        category = await CategoryRepository.get_category(db, category_id)
        if category is None:
            raise NotFound("Category not found")
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        return await CategoryRepository.save_category(db, category)

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: int) -> None:
        if await CategoryRepository.get_category(db, category_id) is None:
            raise NotFound("Category not found")
        await CategoryRepository.delete_category(db, category_id)
        logger.info("category deleted", category_id=category_id)
