# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.errors import AppError, OrderCreationFailed
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import user as _user_models  # noqa: F401
from app.models import address as _address_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401
from app.models import category as _category_models  # noqa: F401
from app.models import discount as _discount_models  # noqa: F401


# Routers
from app.routers.auth import router as auth_router
from app.routers.addresses import router as addresses_router
from app.routers.users import router as users_router
from app.routers.products import router as products_router
from app.routers.categories import router as categories_router
from app.routers.discounts import router as discounts_router
from app.routers.orders import router as orders_router
from app.routers.admin_orders import router as admin_orders_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error envelope ---


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": code},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map domain errors to their status code and stable error code."""
    if isinstance(exc, OrderCreationFailed):
        logger.error(f"{request.method} {request.url.path} failed: {exc.cause!r}")
    return _error_response(exc.status_code, exc.message, exc.code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    codes = {
        400: "validation_error",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
    }
    return _error_response(
        exc.status_code,
        str(exc.detail),
        codes.get(exc.status_code, "http_error"),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and params become 400 validation_error."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error_response(400, f"Invalid request: {details}", "validation_error")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "Internal server error", "internal_error")


app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(addresses_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)
app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(categories_router, prefix=settings.API_PREFIX)
app.include_router(discounts_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(admin_orders_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "storefront-api"}
