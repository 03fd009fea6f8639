# storefront/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client

from storefront.core.config import get_settings

settings = get_settings()


@lru_cache
def supabase_public() -> Client:
    """
    Create a Supabase client with the anon/public key.

    Use cases:
      - reading the public catalog (categories, banners, products)
      - guest checkout inserts (customers, orders, order_items)
      - admin sign-in through Supabase Auth

    Note: This client still respects RLS.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def get_supabase() -> Client:
    """
    FastAPI dependency returning the public client.
    Tests override it with a fake.
    """
    return supabase_public()
