from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import NotFound

from .models import Address, UserProfile
from .repository import AddressRepository, ProfileRepository
from .schemas import AddressCreate, ProfileUpdate

logger = structlog.get_logger(__name__)


class ProfileService:

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> UserProfile:
        profile = await ProfileRepository.get_profile(db, user_id)
        if profile is None:
            raise NotFound("Profile not found")
        return profile

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: int, data: ProfileUpdate) -> UserProfile:
        """Merge-patch: only fields present in the payload are written."""
        profile = await ProfileService.get_profile(db, user_id)

        changes = data.model_dump(exclude_unset=True)
        billing = changes.pop("billing_address", None)

        for field, value in changes.items():
            setattr(profile, field, value)

        if billing is not None:
            merged = dict(profile.billing_address or {})
            merged.update(billing)
            # Reassign so the JSON column is flagged dirty
            profile.billing_address = merged

        profile = await ProfileRepository.save_profile(db, profile)
        logger.info("profile updated", user_id=user_id, fields=sorted(data.model_fields_set))
        return profile


class AddressService:

    @staticmethod
    async def list_addresses(db: AsyncSession, user_id: int, address_type: Optional[str] = None):
        return await AddressRepository.list_addresses(db, user_id, address_type)

    @staticmethod
    async def get_default_address(db: AsyncSession, user_id: int, address_type: str) -> Optional[Address]:
        return await AddressRepository.get_default_address(db, user_id, address_type)

    @staticmethod
    async def add_address(db: AsyncSession, user_id: int, data: AddressCreate) -> Address:
        fields = data.model_dump(exclude={"is_default"})
        address = await AddressRepository.create_address(
            db, Address(user_id=user_id, is_default=False, **fields)
        )
        if data.is_default:
            await AddressRepository.set_default(db, user_id, address.type, address.id)
            address = await AddressRepository.get_address(db, address.id)
        logger.info("address added", user_id=user_id, address_id=address.id, type=address.type)
        return address

    @staticmethod
    async def _owned_address(db: AsyncSession, user_id: int, address_id: int) -> Address:
        address = await AddressRepository.get_address(db, address_id)
        if address is None or address.user_id != user_id:
            raise NotFound("Address not found")
        return address

    @staticmethod
    async def set_default_address(db: AsyncSession, user_id: int, address_id: int) -> Address:
        address = await AddressService._owned_address(db, user_id, address_id)
        await AddressRepository.set_default(db, user_id, address.type, address.id)
        logger.info("default address set", user_id=user_id, address_id=address_id, type=address.type)
        return await AddressRepository.get_address(db, address_id)

    @staticmethod
    async def delete_address(db: AsyncSession, user_id: int, address_id: int) -> None:
        # Deleting the default is allowed; the next checkout re-prompts for an address
        await AddressService._owned_address(db, user_id, address_id)
        await AddressRepository.delete_address(db, address_id)
        logger.info("address deleted", user_id=user_id, address_id=address_id)
