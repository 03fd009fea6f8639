import json
import random
from datetime import datetime, timedelta, timezone

from storefront.core.local_storage import LocalStorage
from storefront.core.notifications import Notifier
from storefront.models.storage import StorageEntry
from storefront.schemas.cart import CartItem, CartItemCreate
from storefront.services.cart_service import CartService

PHONE = CartItemCreate(id="p1", name="Phone", price=500000, images=[])
LAPTOP = CartItemCreate(id="p2", name="Laptop", price=2500000, images=["l.png"])


def _cart(storage, notifier=None, **kwargs):
    return CartService(storage, notifier or Notifier(), **kwargs)


def _titles(notifier):
    return [n.title for n in notifier.drain()]


def test_add_same_product_twice_increments_quantity(storage, notifier):
    cart = _cart(storage, notifier)

    cart.add_to_cart(PHONE)
    assert [(i.id, i.quantity) for i in cart.items] == [("p1", 1)]
    assert cart.total == 500000

    cart.add_to_cart(PHONE)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.total == 1000000
    assert cart.item_count == 2

    cart.update_quantity("p1", 0)
    assert cart.items == []
    assert _titles(notifier) == ["Added to Cart", "Cart Updated", "Item Removed"]


def test_update_quantity_to_zero_or_negative_removes(storage):
    for quantity in (0, -3):
        cart = _cart(storage)
        cart.clear_cart()
        cart.add_to_cart(PHONE)
        cart.add_to_cart(LAPTOP)

        cart.update_quantity("p1", quantity)

        assert [i.id for i in cart.items] == ["p2"]


def test_update_quantity_has_no_upper_bound(storage):
    cart = _cart(storage)
    cart.add_to_cart(LAPTOP)

    cart.update_quantity("p2", 250)

    assert cart.item_count == 250
    assert cart.total == 250 * 2500000


def test_unknown_ids_are_ignored(storage, notifier):
    cart = _cart(storage, notifier)
    cart.add_to_cart(PHONE)
    notifier.drain()

    cart.remove_item("missing")
    cart.update_quantity("missing", 4)

    assert notifier.drain() == []
    assert cart.item_count == 1


def test_remove_notification_names_the_item(storage, notifier):
    cart = _cart(storage, notifier)
    cart.add_to_cart(LAPTOP)
    notifier.drain()

    cart.remove_item("p2")

    [note] = notifier.drain()
    assert note.title == "Item Removed"
    assert note.description == "Laptop has been removed from your cart"


def test_clear_cart_resets_totals(storage, notifier):
    cart = _cart(storage, notifier)
    cart.add_to_cart(PHONE)
    cart.add_to_cart(LAPTOP)

    cart.clear_cart()

    assert cart.items == []
    assert cart.total == 0
    assert cart.item_count == 0
    assert _titles(notifier)[-1] == "Cart Cleared"


def test_totals_follow_items_for_random_operation_sequences(storage):
    rng = random.Random(1234)
    catalog = [
        CartItemCreate(id=f"p{n}", name=f"Product {n}", price=rng.randint(0, 900) * 1000)
        for n in range(6)
    ]
    cart = _cart(storage)

    for _ in range(300):
        product = rng.choice(catalog)
        op = rng.choice(["add", "remove", "update"])
        if op == "add":
            cart.add_to_cart(product)
        elif op == "remove":
            cart.remove_item(product.id)
        else:
            cart.update_quantity(product.id, rng.randint(-2, 5))

        items = cart.items
        assert cart.total == sum(i.price * i.quantity for i in items)
        assert cart.item_count == sum(i.quantity for i in items)
        assert all(i.quantity >= 1 for i in items)
        assert len({i.id for i in items}) == len(items)


def test_cart_is_persisted_and_hydrated(session):
    storage = LocalStorage(session=session, namespace="device-0001")
    cart = _cart(storage)
    cart.add_to_cart(PHONE)
    cart.add_to_cart(PHONE)
    cart.add_to_cart(LAPTOP)

    reloaded = _cart(LocalStorage(session=session, namespace="device-0001"))

    assert [(i.id, i.quantity) for i in reloaded.items] == [("p1", 2), ("p2", 1)]
    assert reloaded.total == 2 * 500000 + 2500000


def test_persistence_failure_does_not_block_cart(session):
    storage = LocalStorage(session=session, namespace="tiny-quota", quota_bytes=10)
    cart = _cart(storage)

    cart.add_to_cart(PHONE)

    assert cart.item_count == 1
    assert _cart(LocalStorage(session=session, namespace="tiny-quota")).items == []


def test_items_view_is_a_copy(storage):
    cart = _cart(storage)
    cart.add_to_cart(PHONE)

    cart.items[0].quantity = 99

    assert cart.item_count == 1


# ---- recent products ----


def _purchased(n):
    return CartItem(id=f"r{n}", name=f"Item {n}", price=n * 100, quantity=1)


def test_recent_products_capped_newest_first(storage):
    cart = _cart(storage)
    for n in range(10):
        cart.add_to_recent_products([_purchased(n)])
    assert [p.id for p in cart.recent_products] == [f"r{n}" for n in reversed(range(10))]

    cart.add_to_recent_products(
        [CartItem(id="new1", name="New", price=1, quantity=1)]
    )

    ids = [p.id for p in cart.recent_products]
    assert len(ids) == 10
    assert ids[0] == "new1"
    assert "r0" not in ids


def test_recent_products_existing_entry_wins(storage):
    clock_times = iter(
        [
            datetime(2025, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 1, 2, tzinfo=timezone.utc),
        ]
    )
    cart = _cart(storage, clock=lambda: next(clock_times))
    cart.add_to_recent_products([_purchased(1), _purchased(2)])

    cart.add_to_recent_products([_purchased(3), _purchased(1)])

    recent = cart.recent_products
    assert [p.id for p in recent] == ["r3", "r1", "r2"]
    assert recent[1].purchased_at == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_recent_products_collapses_duplicates_within_batch(storage):
    cart = _cart(storage)

    cart.add_to_recent_products([_purchased(1), _purchased(1), _purchased(2)])

    assert [p.id for p in cart.recent_products] == ["r1", "r2"]


def test_recent_products_large_batch_is_truncated(storage):
    cart = _cart(storage)

    cart.add_to_recent_products([_purchased(n) for n in range(25)])

    assert len(cart.recent_products) == 10
    assert cart.recent_products[0].id == "r0"


def test_recent_products_survive_reload(session):
    stamp = datetime(2025, 3, 4, 5, 6, tzinfo=timezone.utc)
    storage = LocalStorage(session=session, namespace="device-0002")
    _cart(storage, clock=lambda: stamp).add_to_recent_products([_purchased(7)])

    [product] = _cart(LocalStorage(session=session, namespace="device-0002")).recent_products

    assert product.id == "r7"
    assert product.purchased_at == stamp


def test_clear_recent_products_notifies(storage, notifier):
    cart = _cart(storage, notifier)
    cart.add_to_recent_products([_purchased(1)])

    cart.clear_recent_products()

    assert cart.recent_products == []
    assert _titles(notifier) == ["Recent Products Cleared"]
    assert _cart(storage).recent_products == []


def _seed_legacy(session, namespace, entries):
    session.add(
        StorageEntry(namespace=namespace, key="recentlyPurchased", value=json.dumps(entries))
    )
    session.commit()


def test_legacy_recent_products_with_camel_case_timestamp(session):
    bought = datetime.now(timezone.utc) - timedelta(days=3)
    _seed_legacy(
        session,
        "device-0003",
        [
            {
                "id": "old1",
                "name": "Old speaker",
                "price": 120000,
                "images": ["speaker.png"],
                "purchasedAt": bought.isoformat(),
            }
        ],
    )

    [product] = _cart(LocalStorage(session=session, namespace="device-0003")).recent_products

    assert (product.id, product.images, product.purchased_at) == ("old1", ["speaker.png"], bought)
    assert session.get(StorageEntry, ("device-0003", "recentlyPurchased")) is None
    assert session.get(StorageEntry, ("device-0003", "sdms_recent_products")) is not None


def test_legacy_cart_lines_are_stamped_when_migrated(session):
    _seed_legacy(
        session,
        "device-0004",
        [
            {"id": "old1", "name": "Speaker", "price": 120000, "quantity": 2, "images": None},
            {"id": "old2", "name": "Cable", "price": 5000, "quantity": 1, "images": []},
            {"id": "old1", "name": "Speaker", "price": 120000, "quantity": 1, "images": []},
        ],
    )

    before = datetime.now(timezone.utc)
    recent = _cart(LocalStorage(session=session, namespace="device-0004")).recent_products

    assert [p.id for p in recent] == ["old1", "old2"]
    assert recent[0].images == []
    assert all(p.purchased_at >= before for p in recent)
    assert session.get(StorageEntry, ("device-0004", "recentlyPurchased")) is None


def test_recent_products_independent_of_cart(storage):
    cart = _cart(storage)
    cart.add_to_cart(PHONE)
    cart.add_to_recent_products(cart.items)

    cart.clear_cart()

    assert [p.id for p in cart.recent_products] == ["p1"]
