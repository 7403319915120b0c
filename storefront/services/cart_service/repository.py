from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CartItem


class CartRepository:

    @staticmethod
    async def get_items(db: AsyncSession, user_id: int):
        result = await db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at, CartItem.product_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    @staticmethod
    async def get_item(db: AsyncSession, user_id: int, product_id: int) -> Optional[CartItem]:
        result = await db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .where(CartItem.product_id == product_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def count_items(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
        )
        return result.scalar_one()

    @staticmethod
    async def upsert_item(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> CartItem:
        existing_item = await CartRepository.get_item(db, user_id, product_id)

        if existing_item:
            existing_item.quantity = quantity
            item = existing_item
        else:
            item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
            db.add(item)

        await db.commit()
        return item

    @staticmethod
    async def update_quantity(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> int:
        result = await db.execute(
            update(CartItem)
            .where(CartItem.user_id == user_id)
            .where(CartItem.product_id == product_id)
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: int, product_id: int) -> None:
        stmt = delete(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id
        )
        await db.execute(stmt)
        await db.commit()
