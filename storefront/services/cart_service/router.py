from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.security import get_current_user, limiter
from storefront.services.auth_service.models import User

from .schemas import CartCountResponse, CartItemAdd, CartQuantityUpdate, CartResponse
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def get_cart(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await CartService.get_cart(db, user.id)


@router.get("/count", response_model=CartCountResponse)
async def get_cart_count(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return CartCountResponse(count=await CartService.get_count(db, user.id))


@router.post("/items", response_model=CartResponse)
@limiter.limit("60/minute")
async def add_to_cart(
    request: Request,
    payload: CartItemAdd,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.add_to_cart(db, user.id, payload.product_id, payload.quantity)
    return await CartService.get_cart(db, user.id)


@router.patch("/items/{product_id}", response_model=CartResponse)
async def update_quantity(
    product_id: int,
    payload: CartQuantityUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.update_quantity(db, user.id, product_id, payload.quantity)
    return await CartService.get_cart(db, user.id)


@router.delete("/items/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_cart(
    product_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CartService.remove_from_cart(db, user.id, product_id)
