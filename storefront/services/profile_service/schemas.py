from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

AddressType = Literal["shipping", "billing"]
PaymentMode = Literal["prepaid", "postpaid"]


class BillingAddress(BaseModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class ProfileUpdate(BaseModel):
    tax_id: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    phone_prefix: Optional[str] = None
    payment_mode: Optional[PaymentMode] = None
    billing_address: Optional[BillingAddress] = None

    @field_validator("payment_mode")
    @classmethod
    def payment_mode_not_null(cls, value):
        # May be omitted, but the column has no NULL state
        if value is None:
            raise ValueError("payment_mode cannot be null")
        return value


class ProfileResponse(BaseModel):
    id: int
    tax_id: Optional[str]
    company_name: Optional[str]
    phone: Optional[str]
    phone_prefix: Optional[str]
    payment_mode: str
    billing_address: dict

    class Config:
        from_attributes = True


class AddressCreate(BaseModel):
    type: AddressType = "shipping"
    name: str = Field(min_length=1)
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str = Field(default="ES", min_length=2, max_length=2)
    is_default: bool = False


class AddressResponse(BaseModel):
    id: int
    user_id: int
    type: str
    name: str
    address_line1: str
    address_line2: Optional[str]
    city: str
    state: Optional[str]
    postal_code: str
    country: str
    is_default: bool

    class Config:
        from_attributes = True
