from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.security.dependencies import require_admin

from .schemas import DashboardStats, SalesStats
from .service import AdminService

router = APIRouter(prefix="/admin/stats", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/sales", response_model=SalesStats)
async def get_sales_stats(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await AdminService.get_sales_stats(db, start_date, end_date)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(db: AsyncSession = Depends(get_db)):
    return await AdminService.get_dashboard(db)
