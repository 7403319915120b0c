"""Importing this module registers every table with ``Base.metadata``."""
from storefront.services.auth_service.models import User  # noqa: F401
from storefront.services.profile_service.models import Address, UserProfile  # noqa: F401
from storefront.services.catalog_service.models import Category, Currency, Product  # noqa: F401
from storefront.services.cart_service.models import CartItem  # noqa: F401
from storefront.services.order_service.models import Order, OrderItem, OrderTracking  # noqa: F401
