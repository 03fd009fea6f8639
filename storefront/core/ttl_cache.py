# storefront/core/ttl_cache.py
import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class TtlCache(Generic[T]):
    """
    Single-value cache with a time-to-live.

    Used for catalog data (categories, promo banners) that changes rarely
    but is read on every page. Instances are handed out through FastAPI
    dependencies, so tests can swap in a fresh cache or a fake clock.

    `loading` lets a caller mark an in-flight refresh; it is advisory only.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: T | None = None
        self._stored_at: float | None = None
        self.loading = False

    def get(self) -> T | None:
        """Return the cached value, stale or not (None if never set)."""
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        self._value = None
        self._stored_at = None

    def is_stale(self, ttl: float | None = None) -> bool:
        """
        True when nothing is cached or the value is older than `ttl`
        (defaults to the TTL given at construction).
        """
        if self._stored_at is None:
            return True
        limit = self.ttl_seconds if ttl is None else ttl
        return self._clock() - self._stored_at >= limit

    def get_fresh(self) -> T | None:
        """Return the cached value only while it is not stale."""
        if self.is_stale():
            return None
        return self._value
