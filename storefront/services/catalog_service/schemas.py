from typing import Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True


class CurrencyResponse(BaseModel):
    code: str
    name: str
    symbol: str
    rate: float
    is_base: bool

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: int = Field(ge=0)
    image_url: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    category_id: Optional[int] = None
    currency_code: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    currency_code: Optional[str] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: int
    image_url: Optional[str]
    stock: int
    category_id: Optional[int]
    currency_code: Optional[str]
    category: Optional[CategoryResponse] = None

    class Config:
        from_attributes = True


class ProductSuggestion(BaseModel):
    id: int
    name: str
    description: Optional[str]

    class Config:
        from_attributes = True
