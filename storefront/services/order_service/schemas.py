from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import OrderStatus


class OrderLine(BaseModel):
    """One cart line handed to the order procedure: product, quantity, unit price."""
    product_id: int
    quantity: int = Field(gt=0)
    price: int = Field(ge=0)


class OrderProduct(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: int
    image_url: Optional[str]

    class Config:
        from_attributes = True


class OrderItemResponse(BaseModel):
    id: int
    product_id: Optional[int]
    product: Optional[OrderProduct]
    quantity: int
    price_at_time: int

    class Config:
        from_attributes = True


class OrderTrackingResponse(BaseModel):
    tracking_number: Optional[str]
    carrier: Optional[str]
    status: Optional[str]
    location: Optional[str]

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: int
    shipping_address_id: Optional[int]
    billing_address_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse] = []
    tracking: Optional[OrderTrackingResponse] = None

    class Config:
        from_attributes = True


class OrderPage(BaseModel):
    orders: List[OrderResponse]
    total_count: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderTrackingUpdate(BaseModel):
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
