from typing import List

from pydantic import BaseModel, Field

from storefront.services.catalog_service.schemas import ProductResponse


class CartItemAdd(BaseModel):
    product_id: int
    quantity: int = Field(default=1)


class CartQuantityUpdate(BaseModel):
    quantity: int


class CartItemResponse(BaseModel):
    product_id: int
    quantity: int
    product: ProductResponse

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    items: List[CartItemResponse] = []
    total: int = 0


class CartCountResponse(BaseModel):
    count: int
