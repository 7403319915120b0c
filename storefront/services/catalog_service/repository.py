from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Category, Currency, Product


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, category_id: Optional[int] = None):
        stmt = select(Product)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        result = await db.execute(
            stmt.order_by(Product.created_at.desc(), Product.id.desc())
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(
            select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def search_products(db: AsyncSession, query: str, limit: int):
        pattern = f"%{query}%"
        result = await db.execute(
            select(Product)
            .where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
            .order_by(Product.name)
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        await db.execute(delete(Product).where(Product.id == product_id))
        await db.commit()

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(Product))
        return result.scalar_one()


class CategoryRepository:

    @staticmethod
    async def list_categories(db: AsyncSession):
        result = await db.execute(select(Category).order_by(Category.name))
        return result.scalars().all()

    @staticmethod
    async def get_category(db: AsyncSession, category_id: int) -> Optional[Category]:
        result = await db.execute(select(Category).where(Category.id == category_id))
        return result.scalars().first()

    @staticmethod
    async def save_category(db: AsyncSession, category: Category) -> Category:
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: int) -> None:
        await db.execute(delete(Category).where(Category.id == category_id))
        await db.commit()


class CurrencyRepository:

    @staticmethod
    async def list_currencies(db: AsyncSession):
        result = await db.execute(select(Currency).order_by(Currency.is_base.desc(), Currency.code))
        return result.scalars().all()

    @staticmethod
    async def get_base_currency(db: AsyncSession) -> Optional[Currency]:
        result = await db.execute(select(Currency).where(Currency.is_base.is_(True)))
        return result.scalars().first()
