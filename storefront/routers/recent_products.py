# storefront/routers/recent_products.py
from fastapi import APIRouter, Depends

from storefront.dependencies import get_cart_service
from storefront.schemas.cart import RecentProductsRead
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/recent-products", tags=["Recent Products"])


@router.get("", response_model=RecentProductsRead)
def get_recent_products(service: CartService = Depends(get_cart_service)):
    """
    Recently purchased products, newest first (at most 10).
    """
    return RecentProductsRead(
        items=service.recent_products,
        notifications=service.notifier.drain(),
    )


@router.delete("", response_model=RecentProductsRead)
def clear_recent_products(service: CartService = Depends(get_cart_service)):
    """
    Clear the recently purchased history.
    """
    service.clear_recent_products()
    return RecentProductsRead(
        items=service.recent_products,
        notifications=service.notifier.drain(),
    )
