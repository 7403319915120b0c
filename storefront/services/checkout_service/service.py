from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.observability import storefront_checkout_duration_seconds, storefront_checkout_total
from storefront.services.auth_service.models import User
from storefront.services.order_service.schemas import OrderResponse
from storefront.services.profile_service.schemas import AddressCreate, ProfileUpdate
from storefront.services.profile_service.service import AddressService, ProfileService

from .pipeline import CheckoutSuspended
from .schemas import CheckoutRequest, CheckoutResult, CheckoutStatus
from .steps import build_checkout_pipeline

logger = structlog.get_logger(__name__)


class CheckoutService:

    @staticmethod
    async def checkout(db: AsyncSession, user: Optional[User]) -> CheckoutResult:
        """Run the checkout pipeline once.

        Returns ``completed`` with the new order, or a ``needs_*`` status when
        an address is missing (no order is created in that case). Errors
        propagate as storefront errors.
        """
        ctx = {"db": db, "user": user}
        pipeline = build_checkout_pipeline()

        with storefront_checkout_duration_seconds.time():
            try:
                await pipeline.execute(ctx)
            except CheckoutSuspended as suspended:
                storefront_checkout_total.labels(status=suspended.status).inc()
                return CheckoutResult(status=CheckoutStatus(suspended.status))
            except Exception:
                storefront_checkout_total.labels(status="failed").inc()
                raise

        storefront_checkout_total.labels(status=CheckoutStatus.COMPLETED.value).inc()
        order = ctx["order"]
        logger.info("checkout completed", user_id=user.id, order_id=order.id, total=order.total_amount)
        return CheckoutResult(status=CheckoutStatus.COMPLETED, order=OrderResponse.model_validate(order))

    @staticmethod
    async def resume(db: AsyncSession, user: User, payload: CheckoutRequest) -> CheckoutResult:
        """Store whatever the caller supplied, then restart checkout from the first step."""
        if payload.shipping_address is not None:
            await AddressService.add_address(
                db,
                user.id,
                AddressCreate(type="shipping", is_default=True, **payload.shipping_address.model_dump()),
            )
        if payload.billing_address is not None:
            await ProfileService.update_profile(
                db, user.id, ProfileUpdate(billing_address=payload.billing_address)
            )
        return await CheckoutService.checkout(db, user)
