# storefront/services/catalog_service.py
import logging
from typing import Any, Callable, TypeVar

from supabase import Client

from storefront.core.notifications import Notifier
from storefront.core.ttl_cache import TtlCache
from storefront.repositories.catalog_repo import CatalogRepository
from storefront.schemas.catalog import Category, FeaturedProduct, PromoBanner
from storefront.services.rating_service import RatingService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Shown when a product has no simulated rating (should not happen)
FALLBACK_RATING = 4.0
FALLBACK_REVIEWS = 50


class CatalogService:
    """
    Storefront catalog reads from Supabase.

    Responsibilities:
      - serve categories and promo banners from a TTL cache
      - page through featured products and attach simulated ratings
      - on backend failure: notify, then fall back to stale cache or []
    """

    def __init__(
        self,
        repo: CatalogRepository,
        client: Client,
        notifier: Notifier,
        categories_cache: TtlCache[list[Category]],
        banners_cache: TtlCache[list[PromoBanner]],
    ):
        self.repo = repo
        self.client = client
        self.notifier = notifier
        self.categories_cache = categories_cache
        self.banners_cache = banners_cache

    # ---- internal helpers ----

    def _cached(
        self,
        cache: TtlCache[list[T]],
        fetch: Callable[[], list[T]],
        what: str,
    ) -> list[T]:
        fresh = cache.get_fresh()
        if fresh is not None:
            return fresh

        cache.loading = True
        try:
            items = fetch()
        except Exception as e:
            logger.error(f"Error fetching {what}: {e}")
            self.notifier.error(f"Failed to load {what}")
            return cache.get() or []
        finally:
            cache.loading = False

        cache.set(items)
        return items

    @staticmethod
    def _to_featured(row: dict[str, Any]) -> FeaturedProduct:
        return FeaturedProduct.model_validate(
            {
                **row,
                "description": row.get("short_description") or "",
                "images": row.get("images") or [],
                "view_count": row.get("view_count") or 0,
                "is_preorder": bool(row.get("is_preorder")),
                "category": row.get("categories"),
            }
        )

    # ---- public operations ----

    def list_categories(self) -> list[Category]:
        return self._cached(
            self.categories_cache,
            lambda: [
                Category.model_validate(row)
                for row in self.repo.list_active_categories(self.client)
            ],
            "categories",
        )

    def list_promo_banners(self) -> list[PromoBanner]:
        return self._cached(
            self.banners_cache,
            lambda: [
                PromoBanner.model_validate(row)
                for row in self.repo.list_promo_banners(self.client)
            ],
            "promo banners",
        )

    def list_featured_products(
        self,
        ratings: RatingService,
        limit: int,
        offset: int = 0,
    ) -> tuple[list[FeaturedProduct], bool]:
        """
        Return one page of featured products and whether more may follow.
        """
        try:
            rows = self.repo.list_featured_products(self.client, limit=limit, offset=offset)
            products = [self._to_featured(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching featured products: {e}")
            self.notifier.error("Failed to load featured products")
            return [], False

        rating_map = ratings.generate_product_ratings(products)
        for product in products:
            rating = rating_map.get(product.id)
            product.rating = rating.rating if rating else FALLBACK_RATING
            product.reviews_count = rating.reviews_count if rating else FALLBACK_REVIEWS

        return products, len(products) == limit
