import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import InsufficientStock, InvalidArgument, NotFound
from storefront.core.observability import storefront_cart_mutations_total
from storefront.services.catalog_service.repository import ProductRepository

from .repository import CartRepository
from .schemas import CartItemResponse, CartResponse

logger = structlog.get_logger(__name__)


class CartService:
    """Per-user cart. Stock checks here are advisory; checkout re-validates."""

    @staticmethod
    async def get_cart(db: AsyncSession, user_id: int) -> CartResponse:
        items = await CartRepository.get_items(db, user_id)
        total = sum(item.quantity * item.product.price for item in items)
        return CartResponse(
            items=[CartItemResponse.model_validate(item) for item in items],
            total=total,
        )

    @staticmethod
    async def get_count(db: AsyncSession, user_id: int) -> int:
        return await CartRepository.count_items(db, user_id)

    @staticmethod
    async def _product_with_stock(db: AsyncSession, product_id: int, quantity: int):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if product is None:
            raise NotFound("Product not found")
        if product.stock < quantity:
            raise InsufficientStock(product_id)
        return product

    @staticmethod
    async def add_to_cart(db: AsyncSession, user_id: int, product_id: int, quantity: int = 1):
        """Put ``quantity`` of a product in the cart, replacing any previous quantity."""
        if quantity <= 0:
            raise InvalidArgument("Quantity must be greater than 0")

        await CartService._product_with_stock(db, product_id, quantity)
        item = await CartRepository.upsert_item(db, user_id, product_id, quantity)

        storefront_cart_mutations_total.labels(operation="add").inc()
        logger.info("item added to cart", user_id=user_id, product_id=product_id, quantity=quantity)
        return item

    @staticmethod
    async def update_quantity(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            await CartService.remove_from_cart(db, user_id, product_id)
            return

        await CartService._product_with_stock(db, product_id, quantity)
        updated = await CartRepository.update_quantity(db, user_id, product_id, quantity)
        if not updated:
            raise NotFound("Cart item not found")

        storefront_cart_mutations_total.labels(operation="update").inc()
        logger.info("cart quantity updated", user_id=user_id, product_id=product_id, quantity=quantity)

    @staticmethod
    async def remove_from_cart(db: AsyncSession, user_id: int, product_id: int) -> None:
        # Idempotent: deleting a missing line is not an error
        await CartRepository.remove_item(db, user_id, product_id)
        storefront_cart_mutations_total.labels(operation="remove").inc()
        logger.info("item removed from cart", user_id=user_id, product_id=product_id)
