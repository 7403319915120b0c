from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import utcnow
from storefront.core.errors import InsufficientStock
from storefront.services.cart_service.models import CartItem
from storefront.services.catalog_service.models import Product

from .models import Order, OrderItem, OrderStatus, OrderTracking
from .schemas import OrderLine


class OrderRepository:

    @staticmethod
    async def create_order(
        db: AsyncSession,
        user_id: int,
        shipping_address_id: int,
        billing_address_id: int,
        lines: Sequence[OrderLine],
    ) -> int:
        """Create an order from cart lines in a single transaction.

        Decrements stock (rejecting overdraft), inserts the order and its
        items with their price snapshot, and deletes the matching cart rows.
        Nothing is persisted unless every step succeeds.
        """
        try:
            for line in lines:
                result = await db.execute(
                    update(Product)
                    .where(Product.id == line.product_id)
                    .where(Product.stock >= line.quantity)
                    .values(stock=Product.stock - line.quantity)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise InsufficientStock(line.product_id)

            order = Order(
                user_id=user_id,
                status=OrderStatus.PENDING.value,
                total_amount=sum(line.quantity * line.price for line in lines),
                shipping_address_id=shipping_address_id,
                billing_address_id=billing_address_id,
            )
            db.add(order)
            await db.flush()

            db.add_all([
                OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price_at_time=line.price,
                )
                for line in lines
            ])

            await db.execute(
                delete(CartItem)
                .where(CartItem.user_id == user_id)
                .where(CartItem.product_id.in_([line.product_id for line in lines]))
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return order.id

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(
            select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_user_orders(db: AsyncSession, user_id: int):
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        filters = []
        if status:
            filters.append(Order.status == status)
        if start_date:
            filters.append(Order.created_at >= start_date)
        if end_date:
            filters.append(Order.created_at <= end_date)

        count_stmt = select(func.count()).select_from(Order)
        stmt = select(Order)
        if filters:
            count_stmt = count_stmt.where(*filters)
            stmt = stmt.where(*filters)

        total = await db.execute(count_stmt)
        result = await db.execute(
            stmt
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all(), total.scalar_one()

    @staticmethod
    async def update_status(db: AsyncSession, order: Order, status: str) -> Order:
        order.status = status
        order.updated_at = utcnow()
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def upsert_tracking(db: AsyncSession, order: Order, fields: dict) -> Order:
        tracking = order.tracking
        if tracking is None:
            tracking = OrderTracking(order_id=order.id)
            db.add(tracking)
        for field, value in fields.items():
            setattr(tracking, field, value)
        order.updated_at = utcnow()
        await db.commit()
        return await OrderRepository.get_order(db, order.id)
