import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.database import create_tables
from storefront.core.errors import Internal, StorefrontError
from storefront.core.observability import setup_observability
from storefront.core.security import limiter

# IMPORTANT: import models so they register with Base
from storefront import models  # noqa: F401

from storefront.services.auth_service.router import router as auth_router
from storefront.services.profile_service.router import router as profile_router
from storefront.services.catalog_service.router import router as catalog_router
from storefront.services.catalog_service.router import admin_router as catalog_admin_router
from storefront.services.cart_service.router import router as cart_router
from storefront.services.checkout_service.router import router as checkout_router
from storefront.services.order_service.router import router as order_router
from storefront.services.order_service.router import admin_router as order_admin_router
from storefront.services.admin_service.router import router as stats_router

logger = structlog.get_logger(__name__)

app = FastAPI(title="Storefront", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app)

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500 or exc.__cause__ is not None:
        logger.error("request failed", path=request.url.path, error=type(exc).__name__,
                     cause=repr(exc.__cause__) if exc.__cause__ else None)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Backend details stay in the logs
    logger.error("database error", path=request.url.path, error=repr(exc))
    error = Internal()
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


@app.on_event("startup")
async def startup_event():
    await create_tables()


app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(profile_router)
app.include_router(order_router)
app.include_router(catalog_admin_router)
app.include_router(order_admin_router)
app.include_router(stats_router)
