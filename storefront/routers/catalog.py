# storefront/routers/catalog.py
from fastapi import APIRouter, Depends, Query

from storefront.core.config import get_settings
from storefront.dependencies import get_catalog_service, get_rating_service
from storefront.schemas.catalog import CategoryList, FeaturedProductPage, PromoBannerList
from storefront.services.catalog_service import CatalogService
from storefront.services.rating_service import RatingService

settings = get_settings()

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/categories", response_model=CategoryList)
def list_categories(service: CatalogService = Depends(get_catalog_service)):
    """
    Active categories (cached for a few minutes).
    """
    items = service.list_categories()
    return CategoryList(items=items, notifications=service.notifier.drain())


@router.get("/promo-banners", response_model=PromoBannerList)
def list_promo_banners(service: CatalogService = Depends(get_catalog_service)):
    items = service.list_promo_banners()
    return PromoBannerList(items=items, notifications=service.notifier.drain())


@router.get("/featured-products", response_model=FeaturedProductPage)
def list_featured_products(
    limit: int = Query(default=settings.FEATURED_PAGE_SIZE, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    service: CatalogService = Depends(get_catalog_service),
    ratings: RatingService = Depends(get_rating_service),
):
    """
    One page of featured products, each with a simulated rating.

    Requires `X-Client-Id`: ratings are stored per client.
    """
    items, has_more = service.list_featured_products(ratings, limit=limit, offset=offset)
    return FeaturedProductPage(
        items=items,
        has_more=has_more,
        notifications=service.notifier.drain(),
    )
