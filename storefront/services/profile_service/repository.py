from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Address, UserProfile


class ProfileRepository:

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> Optional[UserProfile]:
        result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def save_profile(db: AsyncSession, profile: UserProfile) -> UserProfile:
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
        return profile


class AddressRepository:

    @staticmethod
    async def get_address(db: AsyncSession, address_id: int) -> Optional[Address]:
        # populate_existing: set_default rewrites flags without touching the identity map
        result = await db.execute(
            select(Address)
            .where(Address.id == address_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_addresses(db: AsyncSession, user_id: int, address_type: Optional[str] = None):
        stmt = select(Address).where(Address.user_id == user_id)
        if address_type:
            stmt = stmt.where(Address.type == address_type)
        stmt = stmt.order_by(
            Address.is_default.desc(), Address.created_at.desc(), Address.id.desc()
        ).execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def get_default_address(db: AsyncSession, user_id: int, address_type: str) -> Optional[Address]:
        result = await db.execute(
            select(Address)
            .where(Address.user_id == user_id)
            .where(Address.type == address_type)
            .where(Address.is_default.is_(True))
            .order_by(Address.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def create_address(db: AsyncSession, address: Address) -> Address:
        db.add(address)
        await db.commit()
        await db.refresh(address)
        return address

    @staticmethod
    async def set_default(db: AsyncSession, user_id: int, address_type: str, address_id: int) -> None:
        """Flip the default flag for every address of this type in one statement."""
        stmt = (
            update(Address)
            .where(Address.user_id == user_id)
            .where(Address.type == address_type)
            .values(is_default=(Address.id == address_id))
            .execution_options(synchronize_session=False)
        )
        await db.execute(stmt)
        await db.commit()

    @staticmethod
    async def delete_address(db: AsyncSession, address_id: int) -> None:
        await db.execute(delete(Address).where(Address.id == address_id))
        await db.commit()
