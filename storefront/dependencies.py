# storefront/dependencies.py
"""
Per-request wiring of client-state services.

Every browser/device sends its client id in the `X-Client-Id` header.
All persisted state (cart, recent products, ratings, admin session) lives
in that client's local storage namespace.
"""
import re
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request, status
from sqlmodel import Session
from supabase import Client

from storefront.core.config import get_settings
from storefront.core.local_storage import LocalStorage
from storefront.core.notifications import Notifier
from storefront.core.supabase_client import get_supabase
from storefront.core.ttl_cache import TtlCache
from storefront.database import get_session
from storefront.repositories.admin_repo import AdminRepository
from storefront.repositories.catalog_repo import CatalogRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.storage_repo import StorageRepository
from storefront.schemas.admin import AdminSession
from storefront.schemas.catalog import Category, PromoBanner
from storefront.services.admin_service import AdminSessionService
from storefront.services.cart_service import CartService
from storefront.services.catalog_service import CatalogService
from storefront.services.checkout_service import CheckoutService
from storefront.services.rating_service import RatingService

settings = get_settings()

CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")

storage_repo = StorageRepository()
catalog_repo = CatalogRepository()
order_repo = OrderRepository()
admin_repo = AdminRepository()


def get_client_id(x_client_id: str = Header(...)) -> str:
    """
    Resolve the client namespace from the `X-Client-Id` header.

    Raises:
        HTTPException(400): if the id is not 8-64 url-safe characters.
    """
    if not CLIENT_ID_PATTERN.match(x_client_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Client-Id header",
        )
    return x_client_id


def get_local_storage(
    client_id: str = Depends(get_client_id),
    session: Session = Depends(get_session),
) -> LocalStorage:
    return LocalStorage(
        session=session,
        namespace=client_id,
        repo=storage_repo,
        quota_bytes=settings.LOCAL_STORAGE_QUOTA_BYTES,
    )


def get_notifier(request: Request) -> Notifier:
    """
    One Notifier per request, also kept on `request.state` so error
    responses can carry the notifications raised before the failure.
    """
    notifier = Notifier()
    request.state.notifier = notifier
    return notifier


@lru_cache
def get_categories_cache() -> TtlCache[list[Category]]:
    return TtlCache(settings.CATALOG_CACHE_TTL_SECONDS)


@lru_cache
def get_banners_cache() -> TtlCache[list[PromoBanner]]:
    return TtlCache(settings.CATALOG_CACHE_TTL_SECONDS)


def get_cart_service(
    storage: LocalStorage = Depends(get_local_storage),
    notifier: Notifier = Depends(get_notifier),
) -> CartService:
    return CartService(storage, notifier, recent_limit=settings.RECENT_PRODUCTS_LIMIT)


def get_rating_service(storage: LocalStorage = Depends(get_local_storage)) -> RatingService:
    return RatingService(storage)


def get_catalog_service(
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
    categories_cache: TtlCache[list[Category]] = Depends(get_categories_cache),
    banners_cache: TtlCache[list[PromoBanner]] = Depends(get_banners_cache),
) -> CatalogService:
    return CatalogService(catalog_repo, client, notifier, categories_cache, banners_cache)


def get_checkout_service(
    client: Client = Depends(get_supabase),
    cart: CartService = Depends(get_cart_service),
    notifier: Notifier = Depends(get_notifier),
) -> CheckoutService:
    return CheckoutService(
        order_repo,
        client,
        cart,
        notifier,
        whatsapp_number=settings.WHATSAPP_NUMBER,
        currency=settings.CURRENCY,
    )


def get_admin_service(
    storage: LocalStorage = Depends(get_local_storage),
    client: Client = Depends(get_supabase),
    notifier: Notifier = Depends(get_notifier),
) -> AdminSessionService:
    return AdminSessionService(
        storage,
        admin_repo,
        client,
        notifier,
        session_ttl=timedelta(hours=settings.ADMIN_SESSION_TTL_HOURS),
    )


def require_admin(service: AdminSessionService = Depends(get_admin_service)) -> AdminSession:
    """
    Enforce a live admin session for this client and refresh its activity.

    Raises:
        HTTPException(401): if there is no session or it expired.
    """
    session = service.touch()
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required",
        )
    return session
