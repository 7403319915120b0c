from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class DailySales(BaseModel):
    date: date
    sales: int
    orders: int


class ProductSummary(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: int
    image_url: Optional[str]

    class Config:
        from_attributes = True


class CategorySummary(BaseModel):
    id: int
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True


class TopProduct(BaseModel):
    product: ProductSummary
    quantity_sold: int
    total_sales: int


class TopCategory(BaseModel):
    category: CategorySummary
    products_sold: int
    total_sales: int


class SalesStats(BaseModel):
    total_sales: int
    total_orders: int
    average_order_value: float
    daily_sales: List[DailySales]
    top_products: List[TopProduct]
    top_categories: List[TopCategory]


class DashboardStats(BaseModel):
    total_products: int
    total_users: int
    total_orders: int
    total_sales: int
