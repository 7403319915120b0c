from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.security.dependencies import get_current_user
from storefront.services.auth_service.models import User

from .schemas import AddressCreate, AddressResponse, AddressType, ProfileResponse, ProfileUpdate
from .service import AddressService, ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await ProfileService.get_profile(db, user.id)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProfileService.update_profile(db, user.id, payload)


@router.get("/addresses", response_model=List[AddressResponse])
async def list_addresses(
    type: Optional[AddressType] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AddressService.list_addresses(db, user.id, type)


@router.post("/addresses", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def add_address(
    payload: AddressCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AddressService.add_address(db, user.id, payload)


@router.post("/addresses/{address_id}/default", response_model=AddressResponse)
async def set_default_address(
    address_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AddressService.set_default_address(db, user.id, address_id)


@router.delete("/addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AddressService.delete_address(db, user.id, address_id)
