from datetime import datetime
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.services.catalog_service.models import Category, Product
from storefront.services.order_service.models import Order, OrderItem, OrderStatus

from .reporting import ItemRow, SaleRow

# Orders that count as sales
COMPLETED_STATUS = OrderStatus.DELIVERED.value


class ReportRepository:

    @staticmethod
    async def completed_sales(db: AsyncSession, start_date: datetime, end_date: datetime) -> List[SaleRow]:
        result = await db.execute(
            select(Order.created_at, Order.total_amount)
            .where(Order.status == COMPLETED_STATUS)
            .where(Order.created_at >= start_date)
            .where(Order.created_at <= end_date)
            .order_by(Order.created_at)
        )
        return [SaleRow(*row) for row in result.all()]

    @staticmethod
    async def product_item_rows(db: AsyncSession, start_date: datetime, end_date: datetime) -> List[ItemRow]:
        result = await db.execute(
            select(OrderItem.product_id, OrderItem.quantity, OrderItem.price_at_time)
            .where(OrderItem.product_id.is_not(None))
            .where(OrderItem.created_at >= start_date)
            .where(OrderItem.created_at <= end_date)
            .order_by(OrderItem.id)
        )
        return [ItemRow(*row) for row in result.all()]

    @staticmethod
    async def category_item_rows(db: AsyncSession, start_date: datetime, end_date: datetime) -> List[ItemRow]:
        # category -> products -> order_items, date range applied on the order_items leaf
        result = await db.execute(
            select(Category.id, OrderItem.quantity, OrderItem.price_at_time)
            .join(Product, Product.category_id == Category.id)
            .join(OrderItem, OrderItem.product_id == Product.id)
            .where(OrderItem.created_at >= start_date)
            .where(OrderItem.created_at <= end_date)
            .order_by(OrderItem.id)
        )
        return [ItemRow(*row) for row in result.all()]

    @staticmethod
    async def products_by_id(db: AsyncSession, product_ids: Sequence[int]) -> dict:
        if not product_ids:
            return {}
        result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
        return {product.id: product for product in result.scalars().all()}

    @staticmethod
    async def categories_by_id(db: AsyncSession, category_ids: Sequence[int]) -> dict:
        if not category_ids:
            return {}
        result = await db.execute(select(Category).where(Category.id.in_(category_ids)))
        return {category.id: category for category in result.scalars().all()}

    @staticmethod
    async def completed_totals(db: AsyncSession):
        result = await db.execute(
            select(func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0))
            .where(Order.status == COMPLETED_STATUS)
        )
        return result.one()
