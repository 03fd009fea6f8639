# storefront/services/cart_service.py
from datetime import datetime, timezone
from typing import Callable, Iterable

from pydantic import TypeAdapter

from storefront.core.local_storage import LocalStorage, StorageSchema
from storefront.core.notifications import Notifier
from storefront.schemas.cart import (
    CartItem,
    CartItemCreate,
    CartSummary,
    LegacyRecentProduct,
    RecentProduct,
)

CART_ITEMS = StorageSchema(
    key="sdms_cart_items",
    adapter=TypeAdapter(list[CartItem]),
    default_factory=list,
)

RECENT_PRODUCTS = StorageSchema(
    key="sdms_recent_products",
    adapter=TypeAdapter(list[RecentProduct]),
    default_factory=list,
)

# Written by an older purchase helper; folded into RECENT_PRODUCTS on load.
LEGACY_RECENT_PRODUCTS_KEY = "recentlyPurchased"
LEGACY_RECENT_PRODUCTS = TypeAdapter(list[LegacyRecentProduct])

DEFAULT_RECENT_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CartService:
    """
    Cart store and recent-products tracker for one client.

    Responsibilities:
      - keep the cart lines unique by product id, quantity >= 1
      - derive total / item_count from the current lines
      - persist a full snapshot after every mutation
      - keep a capped, deduplicated "recently purchased" list
      - raise a notification describing each user-visible action

    State is hydrated lazily from LocalStorage on first access.
    Persistence failures are contained by LocalStorage and never undo
    the in-memory change.
    """

    def __init__(
        self,
        storage: LocalStorage,
        notifier: Notifier,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self.notifier = notifier
        self.recent_limit = recent_limit
        self._clock = clock
        self._items: list[CartItem] | None = None
        self._recent: list[RecentProduct] | None = None

    # ---- internal helpers ----

    def _cart(self) -> list[CartItem]:
        if self._items is None:
            self._items = self.storage.load(CART_ITEMS)
        return self._items

    def _recent_list(self) -> list[RecentProduct]:
        if self._recent is None:
            self.storage.migrate(
                LEGACY_RECENT_PRODUCTS_KEY, RECENT_PRODUCTS, self._parse_legacy_recent
            )
            self._recent = self.storage.load(RECENT_PRODUCTS)
        return self._recent

    def _parse_legacy_recent(self, raw: str) -> list[RecentProduct]:
        # The old writer prepended without deduplicating; keep the newest.
        recent: list[RecentProduct] = []
        seen: set[str] = set()
        for entry in LEGACY_RECENT_PRODUCTS.validate_json(raw):
            if entry.id in seen:
                continue
            seen.add(entry.id)
            recent.append(entry.to_recent_product())
        return recent[: self.recent_limit]

    def _find(self, product_id: str) -> CartItem | None:
        for item in self._cart():
            if item.id == product_id:
                return item
        return None

    def _persist_cart(self) -> None:
        self.storage.save(CART_ITEMS, self._cart())

    def _persist_recent(self) -> None:
        self.storage.save(RECENT_PRODUCTS, self._recent_list())

    # ---- read-only views ----

    @property
    def items(self) -> list[CartItem]:
        return [item.model_copy() for item in self._cart()]

    @property
    def recent_products(self) -> list[RecentProduct]:
        return [p.model_copy() for p in self._recent_list()]

    @property
    def total(self) -> float:
        return sum(item.price * item.quantity for item in self._cart())

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._cart())

    def summary(self) -> CartSummary:
        return CartSummary(
            items=self.items,
            total=self.total,
            item_count=self.item_count,
            notifications=self.notifier.drain(),
        )

    # ---- cart operations ----

    def add_to_cart(self, payload: CartItemCreate) -> None:
        """
        Add one unit of a product.

        Existing line => quantity + 1, otherwise a new line with quantity 1.
        """
        existing = self._find(payload.id)
        if existing:
            existing.quantity += 1
            self.notifier.notify("Cart Updated", f"{payload.name} quantity increased")
        else:
            self._cart().append(
                CartItem(
                    id=payload.id,
                    name=payload.name,
                    price=payload.price,
                    images=list(payload.images),
                    quantity=1,
                )
            )
            self.notifier.notify(
                "Added to Cart", f"{payload.name} has been added to your cart"
            )
        self._persist_cart()

    def remove_item(self, product_id: str) -> None:
        """
        Remove a line if present. Unknown ids are ignored silently.
        """
        item = self._find(product_id)
        if item is None:
            return
        self._items = [it for it in self._cart() if it.id != product_id]
        self.notifier.notify(
            "Item Removed", f"{item.name} has been removed from your cart"
        )
        self._persist_cart()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """
        Set a line's quantity. Zero or negative delegates to remove_item.
        """
        if quantity <= 0:
            self.remove_item(product_id)
            return

        item = self._find(product_id)
        if item is None:
            return
        item.quantity = quantity
        self.notifier.notify("Cart Updated", f"{item.name} quantity set to {quantity}")
        self._persist_cart()

    def clear_cart(self) -> None:
        self._items = []
        self.notifier.notify("Cart Cleared", "All items have been removed from your cart")
        self._persist_cart()

    # ---- recent products ----

    def add_to_recent_products(self, items: Iterable[CartItem]) -> None:
        """
        Record purchased items at the front of the recent list.

        Ids already in the list are dropped (the existing entry keeps its
        position and timestamp); the list is then capped at recent_limit.
        """
        current = self._recent_list()
        seen = {p.id for p in current}
        purchased_at = self._clock()

        fresh: list[RecentProduct] = []
        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            fresh.append(
                RecentProduct(
                    id=item.id,
                    name=item.name,
                    price=item.price,
                    images=list(item.images),
                    purchased_at=purchased_at,
                )
            )

        self._recent = (fresh + current)[: self.recent_limit]
        self._persist_recent()

    def clear_recent_products(self) -> None:
        self._recent = []
        self.notifier.notify(
            "Recent Products Cleared", "Your recent products have been cleared"
        )
        self._persist_recent()
