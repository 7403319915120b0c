"""
gRPC facade over the storefront services.

Each RPC opens its own session from the injected session factory, resolves
the caller from the ``authorization`` metadata and delegates to the same
service classes the HTTP API uses. Storefront errors become gRPC status
codes; anything unexpected is logged and reported as INTERNAL with a fixed
message.
"""
import functools
from datetime import datetime
from typing import Optional

import grpc
import structlog
from pydantic import BaseModel, ValidationError

from storefront.core.errors import (
    Conflict,
    FailedPrecondition,
    Internal,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    StorefrontError,
    Unauthenticated,
)
from storefront.core.security.dependencies import authenticate_token, ensure_admin
from storefront.services.admin_service.service import AdminService
from storefront.services.cart_service.service import CartService
from storefront.services.catalog_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CurrencyResponse,
    ProductCreate,
    ProductResponse,
    ProductSuggestion,
    ProductUpdate,
)
from storefront.services.catalog_service.service import CatalogService
from storefront.services.order_service.models import OrderStatus
from storefront.services.order_service.schemas import OrderResponse
from storefront.services.order_service.service import OrderService

logger = structlog.get_logger(__name__)

STATUS_CODES = (
    (Unauthenticated, grpc.StatusCode.UNAUTHENTICATED),
    (PermissionDenied, grpc.StatusCode.PERMISSION_DENIED),
    (InvalidArgument, grpc.StatusCode.INVALID_ARGUMENT),
    (NotFound, grpc.StatusCode.NOT_FOUND),
    (Conflict, grpc.StatusCode.ALREADY_EXISTS),
    (FailedPrecondition, grpc.StatusCode.FAILED_PRECONDITION),
)

INTERNAL_DETAILS = Internal.message


def status_for(exc: StorefrontError):
    for error_class, code in STATUS_CODES:
        if isinstance(exc, error_class):
            return code, exc.message
    return grpc.StatusCode.INTERNAL, INTERNAL_DETAILS


def bearer_token(context) -> Optional[str]:
    for key, value in context.invocation_metadata() or ():
        if key.lower() == "authorization":
            value = value.decode() if isinstance(value, bytes) else value
            if value.lower().startswith("bearer "):
                return value.split(" ", 1)[1].strip()
            return value.strip()
    return None


def _clean(request: dict) -> dict:
    # Unset proto-style fields arrive as empty strings
    return {key: value for key, value in (request or {}).items() if value not in ("", None)}


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json")


def rpc_method(admin: bool = False):
    def decorator(handler):
        @functools.wraps(handler)
        async def wrapper(self, request, context):
            method = handler.__name__
            try:
                async with self.session_factory() as db:
                    user = await authenticate_token(db, bearer_token(context))
                    if admin:
                        ensure_admin(user)
                    response = await handler(self, db, user, _clean(request))
            except StorefrontError as exc:
                code, details = status_for(exc)
                logger.warning("rpc rejected", method=method, code=code.name, error=type(exc).__name__)
                await context.abort(code, details)
            except ValidationError:
                logger.warning("rpc rejected", method=method, code="INVALID_ARGUMENT")
                await context.abort(grpc.StatusCode.INVALID_ARGUMENT, "Invalid request")
            except Exception:
                logger.exception("rpc failed", method=method)
                code, details = status_for(Internal())
                await context.abort(code, details)
            logger.info("rpc completed", method=method, user_id=user.id)
            return response
        return wrapper
    return decorator


# --- request messages ---

class ProductFilter(BaseModel):
    category_id: Optional[int] = None
    currency_code: Optional[str] = None


class SearchRequest(BaseModel):
    query: str = ""


class CartLineRequest(BaseModel):
    product_id: int
    quantity: int = 1


class IdRequest(BaseModel):
    id: int


class OrdersQuery(BaseModel):
    status: Optional[OrderStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = 10
    offset: int = 0


class OrderStatusRequest(BaseModel):
    order_id: int
    status: OrderStatus


class StatsQuery(BaseModel):
    start_date: datetime
    end_date: datetime


class _Servicer:
    SERVICE_NAME = ""
    METHODS = ()

    def __init__(self, session_factory):
        self.session_factory = session_factory


class ShopServicer(_Servicer):
    SERVICE_NAME = "shop.ShopService"
    METHODS = (
        "GetProducts",
        "GetCurrencies",
        "GetCategories",
        "SearchProducts",
        "GetCartItems",
        "GetCartCount",
        "AddToCart",
        "UpdateCartQuantity",
        "RemoveFromCart",
    )

    @rpc_method()
    async def GetProducts(self, db, user, request):
        query = ProductFilter.model_validate(request)
        products = await CatalogService.list_products(db, query.category_id, query.currency_code)
        return {"products": [_dump(product) for product in products]}

    @rpc_method()
    async def GetCurrencies(self, db, user, request):
        currencies = await CatalogService.list_currencies(db)
        return {"currencies": [_dump(CurrencyResponse.model_validate(c)) for c in currencies]}

    @rpc_method()
    async def GetCategories(self, db, user, request):
        categories = await CatalogService.list_categories(db)
        return {"categories": [_dump(CategoryResponse.model_validate(c)) for c in categories]}

    @rpc_method()
    async def SearchProducts(self, db, user, request):
        query = SearchRequest.model_validate(request)
        products = await CatalogService.search_products(db, query.query)
        return {"products": [_dump(ProductSuggestion.model_validate(p)) for p in products]}

    @rpc_method()
    async def GetCartItems(self, db, user, request):
        return _dump(await CartService.get_cart(db, user.id))

    @rpc_method()
    async def GetCartCount(self, db, user, request):
        return {"count": await CartService.get_count(db, user.id)}

    @rpc_method()
    async def AddToCart(self, db, user, request):
        line = CartLineRequest.model_validate(request)
        await CartService.add_to_cart(db, user.id, line.product_id, line.quantity)
        return {"success": True}

    @rpc_method()
    async def UpdateCartQuantity(self, db, user, request):
        line = CartLineRequest.model_validate(request)
        # Removal has its own RPC; a non-positive quantity here is a caller error
        if line.quantity <= 0:
            raise InvalidArgument("Quantity must be greater than 0")
        await CartService.update_quantity(db, user.id, line.product_id, line.quantity)
        return {"success": True}

    @rpc_method()
    async def RemoveFromCart(self, db, user, request):
        line = CartLineRequest.model_validate(request)
        await CartService.remove_from_cart(db, user.id, line.product_id)
        return {"success": True}


class AdminServicer(_Servicer):
    SERVICE_NAME = "shop.AdminService"
    METHODS = (
        "CreateProduct",
        "UpdateProduct",
        "DeleteProduct",
        "CreateCategory",
        "UpdateCategory",
        "DeleteCategory",
        "GetOrders",
        "UpdateOrderStatus",
        "GetSalesStats",
    )

    @rpc_method(admin=True)
    async def CreateProduct(self, db, user, request):
        product = await CatalogService.create_product(db, ProductCreate.model_validate(request))
        return _dump(ProductResponse.model_validate(product))

    @rpc_method(admin=True)
    async def UpdateProduct(self, db, user, request):
        product_id = IdRequest.model_validate(request).id
        changes = ProductUpdate.model_validate({k: v for k, v in request.items() if k != "id"})
        product = await CatalogService.update_product(db, product_id, changes)
        return _dump(ProductResponse.model_validate(product))

    @rpc_method(admin=True)
    async def DeleteProduct(self, db, user, request):
        await CatalogService.delete_product(db, IdRequest.model_validate(request).id)
        return {"success": True}

    @rpc_method(admin=True)
    async def CreateCategory(self, db, user, request):
        category = await CatalogService.create_category(db, CategoryCreate.model_validate(request))
        return _dump(CategoryResponse.model_validate(category))

    @rpc_method(admin=True)
    async def UpdateCategory(self, db, user, request):
        category_id = IdRequest.model_validate(request).id
        changes = CategoryUpdate.model_validate({k: v for k, v in request.items() if k != "id"})
        category = await CatalogService.update_category(db, category_id, changes)
        return _dump(CategoryResponse.model_validate(category))

    @rpc_method(admin=True)
    async def DeleteCategory(self, db, user, request):
        await CatalogService.delete_category(db, IdRequest.model_validate(request).id)
        return {"success": True}

    @rpc_method(admin=True)
    async def GetOrders(self, db, user, request):
        query = OrdersQuery.model_validate(request)
        page = await OrderService.list_orders(
            db, query.status, query.start_date, query.end_date, query.limit, query.offset
        )
        return _dump(page)

    @rpc_method(admin=True)
    async def UpdateOrderStatus(self, db, user, request):
        change = OrderStatusRequest.model_validate(request)
        order = await OrderService.update_order_status(db, change.order_id, change.status)
        return _dump(OrderResponse.model_validate(order))

    @rpc_method(admin=True)
    async def GetSalesStats(self, db, user, request):
        query = StatsQuery.model_validate(request)
        return _dump(await AdminService.get_sales_stats(db, query.start_date, query.end_date))
