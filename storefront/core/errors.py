"""
Error taxonomy shared by the HTTP API and the gRPC facade.

Every error carries a fixed, human-readable message that is safe to show to
callers. Raw backend text never travels in these messages; the original
exception is chained with ``raise ... from`` and only shows up in logs.
"""
from typing import Optional


class StorefrontError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class Unauthenticated(StorefrontError):
    status_code = 401
    message = "Authentication required"


class PermissionDenied(StorefrontError):
    status_code = 403
    message = "Admin access required"


class InvalidArgument(StorefrontError):
    status_code = 400
    message = "Invalid argument"


class NotFound(StorefrontError):
    status_code = 404
    message = "Not found"


class Conflict(StorefrontError):
    status_code = 409
    message = "Already exists"


class FailedPrecondition(StorefrontError):
    status_code = 409
    message = "Failed precondition"


class InsufficientStock(FailedPrecondition):
    message = "Insufficient stock"

    def __init__(self, product_id: Optional[int] = None, message: Optional[str] = None):
        self.product_id = product_id
        super().__init__(message)


class EmptyCart(FailedPrecondition):
    message = "Cart is empty"


class CheckoutFailed(StorefrontError):
    status_code = 409
    message = "Checkout could not be completed"


class Internal(StorefrontError):
    pass
