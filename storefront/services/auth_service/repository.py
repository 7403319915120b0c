from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.services.profile_service.models import UserProfile

from .models import User


class UserRepository:

    @staticmethod
    async def create_with_profile(db: AsyncSession, user: User) -> User:
        """Insert the account and its empty profile in one transaction."""
        db.add(user)
        await db.flush()
        db.add(UserProfile(id=user.id, billing_address={}))
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(User))
        return result.scalar_one()
