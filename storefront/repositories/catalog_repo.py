# storefront/repositories/catalog_repo.py
from typing import Any

from supabase import Client

FEATURED_PRODUCT_COLUMNS = (
    "id, name, price, original_price, short_description, "
    "images, stock_quantity, slug, view_count, "
    "is_preorder, condition, categories(name, slug)"
)


class CatalogRepository:
    """
    Read access to catalog tables in Supabase.

    - Pure queries; rows are returned as plain dicts.
    - Supabase/PostgREST errors propagate to the service.
    """

    def list_active_categories(self, client: Client) -> list[dict[str, Any]]:
        resp = (
            client.table("categories")
            .select("id, name, slug, description, image_url")
            .eq("is_active", True)
            .order("name")
            .execute()
        )
        return resp.data or []

    def list_promo_banners(self, client: Client) -> list[dict[str, Any]]:
        resp = (
            client.table("promo_banners")
            .select("*")
            .order("sort_order")
            .order("created_at", desc=True)
            .execute()
        )
        return resp.data or []

    def list_featured_products(
        self,
        client: Client,
        limit: int,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        resp = (
            client.table("products")
            .select(FEATURED_PRODUCT_COLUMNS)
            .eq("is_active", True)
            .eq("is_featured", True)
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return resp.data or []
