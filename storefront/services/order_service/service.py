from datetime import datetime
from typing import Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import InvalidArgument, NotFound
from storefront.core.observability import storefront_orders_created_total

from .models import Order, OrderStatus
from .repository import OrderRepository
from .schemas import OrderLine, OrderPage, OrderResponse, OrderTrackingUpdate

logger = structlog.get_logger(__name__)


class OrderService:

    @staticmethod
    async def create_order(
        db: AsyncSession,
        user_id: int,
        shipping_address_id: int,
        billing_address_id: int,
        lines: Sequence[OrderLine],
    ) -> Order:
        if not lines:
            raise InvalidArgument("An order needs at least one item")

        order_id = await OrderRepository.create_order(
            db, user_id, shipping_address_id, billing_address_id, lines
        )
        storefront_orders_created_total.inc()
        logger.info("order created", order_id=order_id, user_id=user_id, lines=len(lines))
        return await OrderRepository.get_order(db, order_id)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise NotFound("Order not found")
        return order

    @staticmethod
    async def list_user_orders(db: AsyncSession, user_id: int):
        return await OrderRepository.list_user_orders(db, user_id)

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        status: Optional[OrderStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> OrderPage:
        if limit <= 0 or offset < 0:
            raise InvalidArgument("limit must be positive and offset non-negative")
        orders, total_count = await OrderRepository.list_orders(
            db,
            status.value if status else None,
            start_date,
            end_date,
            limit,
            offset,
        )
        return OrderPage(
            orders=[OrderResponse.model_validate(order) for order in orders],
            total_count=total_count,
        )

    @staticmethod
    async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
        # Forward-only progression is expected but not enforced here
        order = await OrderService.get_order(db, order_id)
        previous = order.status
        order = await OrderRepository.update_status(db, order, status.value)
        logger.info("order status updated", order_id=order_id, previous=previous, status=status.value)
        return order

    @staticmethod
    async def update_tracking(db: AsyncSession, order_id: int, data: OrderTrackingUpdate) -> Order:
        order = await OrderService.get_order(db, order_id)
        order = await OrderRepository.upsert_tracking(db, order, data.model_dump(exclude_unset=True))
        logger.info("order tracking updated", order_id=order_id)
        return order
