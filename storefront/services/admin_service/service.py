from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import InvalidArgument
from storefront.services.auth_service.repository import UserRepository
from storefront.services.catalog_service.repository import ProductRepository

from . import reporting
from .repository import ReportRepository
from .schemas import (
    CategorySummary,
    DailySales,
    DashboardStats,
    ProductSummary,
    SalesStats,
    TopCategory,
    TopProduct,
)

logger = structlog.get_logger(__name__)


class AdminService:

    @staticmethod
    async def get_sales_stats(db: AsyncSession, start_date: datetime, end_date: datetime) -> SalesStats:
        if start_date > end_date:
            raise InvalidArgument("start_date must not be after end_date")

        sales = await ReportRepository.completed_sales(db, start_date, end_date)
        total_sales, total_orders, average = reporting.summarize_sales(sales)

        top_products = reporting.rank_by_quantity(
            await ReportRepository.product_item_rows(db, start_date, end_date)
        )
        products = await ReportRepository.products_by_id(db, [row["key"] for row in top_products])

        top_categories = reporting.rank_by_quantity(
            await ReportRepository.category_item_rows(db, start_date, end_date)
        )
        categories = await ReportRepository.categories_by_id(db, [row["key"] for row in top_categories])

        logger.info(
            "sales stats computed",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            total_orders=total_orders,
        )
        return SalesStats(
            total_sales=total_sales,
            total_orders=total_orders,
            average_order_value=average,
            daily_sales=[DailySales(**day) for day in reporting.daily_sales(sales)],
            top_products=[
                TopProduct(
                    product=ProductSummary.model_validate(products[row["key"]]),
                    quantity_sold=row["quantity"],
                    total_sales=row["sales"],
                )
                for row in top_products
                if row["key"] in products
            ],
            top_categories=[
                TopCategory(
                    category=CategorySummary.model_validate(categories[row["key"]]),
                    products_sold=row["quantity"],
                    total_sales=row["sales"],
                )
                for row in top_categories
                if row["key"] in categories
            ],
        )

    @staticmethod
    async def get_dashboard(db: AsyncSession) -> DashboardStats:
        total_orders, total_sales = await ReportRepository.completed_totals(db)
        return DashboardStats(
            total_products=await ProductRepository.count(db),
            total_users=await UserRepository.count(db),
            total_orders=total_orders,
            total_sales=total_sales,
        )
