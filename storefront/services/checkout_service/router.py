from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core import config
from storefront.core.database import get_db
from storefront.core.security import get_current_user, limiter
from storefront.services.auth_service.models import User

from .schemas import CheckoutRequest, CheckoutResult
from .service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResult)
@limiter.limit(config.CHECKOUT_RATE_LIMIT)
async def checkout(
    request: Request,                            # slowapi needs this to build the rate-limit key
    payload: Optional[CheckoutRequest] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if payload is None:
        return await CheckoutService.checkout(db, user)
    return await CheckoutService.resume(db, user, payload)
