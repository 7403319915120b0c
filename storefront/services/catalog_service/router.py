from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.security.dependencies import get_current_user, require_admin

from .schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CurrencyResponse,
    ProductCreate,
    ProductResponse,
    ProductSuggestion,
    ProductUpdate,
)
from .service import CatalogService

router = APIRouter(prefix="/catalog", tags=["Catalog"], dependencies=[Depends(get_current_user)])
admin_router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/products", response_model=List[ProductResponse])
async def list_products(
    category_id: Optional[int] = Query(default=None),
    currency: Optional[str] = Query(default=None, min_length=3, max_length=3),
    db: AsyncSession = Depends(get_db),
):
    return await CatalogService.list_products(db, category_id, currency)


@router.get("/products/search", response_model=List[ProductSuggestion])
async def search_products(q: str = Query(default=""), db: AsyncSession = Depends(get_db)):
    return await CatalogService.search_products(db, q)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await CatalogService.get_product(db, product_id)


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await CatalogService.list_categories(db)


@router.get("/currencies", response_model=List[CurrencyResponse])
async def list_currencies(db: AsyncSession = Depends(get_db)):
    return await CatalogService.list_currencies(db)


@router.get("/currencies/base", response_model=CurrencyResponse)
async def get_base_currency(db: AsyncSession = Depends(get_db)):
    return await CatalogService.get_base_currency(db)


# --- back-office ---

@admin_router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.create_product(db, payload)


@admin_router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(product_id: int, payload: ProductUpdate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.update_product(db, product_id, payload)


@admin_router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await CatalogService.delete_product(db, product_id)


@admin_router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.create_category(db, payload)


@admin_router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: int, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await CatalogService.update_category(db, category_id, payload)


@admin_router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await CatalogService.delete_category(db, category_id)
