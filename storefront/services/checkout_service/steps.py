from sqlalchemy.exc import SQLAlchemyError

from storefront.core.errors import CheckoutFailed, EmptyCart, InsufficientStock, StorefrontError, Unauthenticated
from storefront.services.cart_service.repository import CartRepository
from storefront.services.order_service.schemas import OrderLine
from storefront.services.order_service.service import OrderService
from storefront.services.profile_service.models import POSTAL_FIELDS, REQUIRED_POSTAL_FIELDS, Address
from storefront.services.profile_service.repository import AddressRepository, ProfileRepository

from .pipeline import CheckoutPipeline, CheckoutSuspended
from .schemas import CheckoutStatus


# --- STEPS ---

async def resolve_user(ctx: dict):
    if ctx.get("user") is None:
        raise Unauthenticated()
    ctx["user_id"] = ctx["user"].id


async def resolve_shipping_address(ctx: dict):
    db, user_id = ctx["db"], ctx["user_id"]
    address = await AddressRepository.get_default_address(db, user_id, "shipping")
    if address is None:
        raise CheckoutSuspended(CheckoutStatus.NEEDS_SHIPPING_ADDRESS.value)
    ctx["shipping_address_id"] = address.id


async def resolve_billing_snapshot(ctx: dict):
    db, user_id = ctx["db"], ctx["user_id"]
    profile = await ProfileRepository.get_profile(db, user_id)
    billing = (profile.billing_address if profile else None) or {}
    if not all(billing.get(field) for field in REQUIRED_POSTAL_FIELDS):
        raise CheckoutSuspended(CheckoutStatus.NEEDS_BILLING_ADDRESS.value)
    ctx["billing_snapshot"] = billing


async def snapshot_cart(ctx: dict):
    db, user_id = ctx["db"], ctx["user_id"]
    items = await CartRepository.get_items(db, user_id)
    if not items:
        raise EmptyCart()

    for item in items:
        # Advisory: the order procedure re-checks stock inside its transaction
        if item.quantity > item.product.stock:
            raise InsufficientStock(item.product_id)

    ctx["lines"] = [
        OrderLine(product_id=item.product_id, quantity=item.quantity, price=item.product.price)
        for item in items
    ]


async def materialize_billing_address(ctx: dict):
    # A fresh billing row per checkout; earlier ones are kept as history
    db, user_id, billing = ctx["db"], ctx["user_id"], ctx["billing_snapshot"]
    fields = {field: billing.get(field) for field in POSTAL_FIELDS if billing.get(field) is not None}
    address = await AddressRepository.create_address(
        db,
        Address(
            user_id=user_id,
            type="billing",
            name=billing["address_line1"],
            is_default=False,
            **fields,
        ),
    )
    await AddressRepository.set_default(db, user_id, "billing", address.id)
    ctx["billing_address_id"] = address.id


async def create_order(ctx: dict):
    # Stock decrement, order insert and cart drain share one transaction
    try:
        order = await OrderService.create_order(
            ctx["db"],
            ctx["user_id"],
            ctx["shipping_address_id"],
            ctx["billing_address_id"],
            ctx["lines"],
        )
    except (StorefrontError, SQLAlchemyError) as e:
        raise CheckoutFailed() from e
    ctx["order"] = order


# --- BUILDER FACTORY ---

def build_checkout_pipeline() -> CheckoutPipeline:
    pipeline = CheckoutPipeline()
    pipeline.add_step("resolve_user", resolve_user)
    pipeline.add_step("resolve_shipping_address", resolve_shipping_address)
    pipeline.add_step("resolve_billing_snapshot", resolve_billing_snapshot)
    pipeline.add_step("snapshot_cart", snapshot_cart)
    pipeline.add_step("materialize_billing_address", materialize_billing_address)
    pipeline.add_step("create_order", create_order)
    return pipeline
