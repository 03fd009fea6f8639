# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import FastAPI, HTTPException, Request

from storefront.core.config import get_settings
from storefront.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import storage as _storage_models  # noqa: F401

# Routers
from storefront.routers.admin import router as admin_router
from storefront.routers.cart import router as cart_router
from storefront.routers.catalog import router as catalog_router
from storefront.routers.checkout import router as checkout_router
from storefront.routers.ratings import router as ratings_router
from storefront.routers.recent_products import router as recent_products_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify the client-state DB and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("🔄 Startup: Connecting to client-state database...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
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


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Error body: {"detail": ..., "notifications": [...]}.

    Notifications raised earlier in the request (e.g. "Your cart is empty")
    are drained into the body so the client can still show them.
    """
    notifier = getattr(request.state, "notifier", None)
    notifications = notifier.drain() if notifier is not None else []
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "notifications": jsonable_encoder(notifications),
        },
        headers=getattr(exc, "headers", None),
    )


# Versioned API prefix, e.g. /api/v1
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(recent_products_router, prefix=settings.API_V1_STR)
app.include_router(ratings_router, prefix=settings.API_V1_STR)
app.include_router(catalog_router, prefix=settings.API_V1_STR)
app.include_router(checkout_router, prefix=settings.API_V1_STR)
app.include_router(admin_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "sdms-storefront"}
