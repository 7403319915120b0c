from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.errors import NotFound
from storefront.core.security.dependencies import get_current_user, require_admin
from storefront.services.auth_service.models import User

from .models import OrderStatus
from .schemas import OrderPage, OrderResponse, OrderStatusUpdate, OrderTrackingUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[OrderResponse])
async def list_my_orders(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await OrderService.list_user_orders(db, user.id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_my_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.get_order(db, order_id)
    if order.user_id != user.id:
        raise NotFound("Order not found")
    return order


# --- back-office ---

@admin_router.get("", response_model=OrderPage)
async def list_orders(
    status: Optional[OrderStatus] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    limit: int = Query(default=10, gt=0, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db, status, start_date, end_date, limit, offset)


@admin_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: int, payload: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    return await OrderService.update_order_status(db, order_id, payload.status)


@admin_router.put("/{order_id}/tracking", response_model=OrderResponse)
async def update_tracking(order_id: int, payload: OrderTrackingUpdate, db: AsyncSession = Depends(get_db)):
    return await OrderService.update_tracking(db, order_id, payload)
