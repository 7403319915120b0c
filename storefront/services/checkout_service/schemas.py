import enum
from typing import Optional

from pydantic import BaseModel

from storefront.services.order_service.schemas import OrderResponse
from storefront.services.profile_service.schemas import BillingAddress


class CheckoutStatus(str, enum.Enum):
    COMPLETED = "completed"
    NEEDS_SHIPPING_ADDRESS = "needs_shipping_address"
    NEEDS_BILLING_ADDRESS = "needs_billing_address"


class ShippingAddressInput(BaseModel):
    name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str = "ES"


class CheckoutRequest(BaseModel):
    """Data the caller supplies when re-entering a suspended checkout."""
    shipping_address: Optional[ShippingAddressInput] = None
    billing_address: Optional[BillingAddress] = None


class CheckoutResult(BaseModel):
    status: CheckoutStatus
    order: Optional[OrderResponse] = None
