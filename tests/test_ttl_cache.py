from storefront.core.ttl_cache import TtlCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_empty_cache_is_stale():
    cache = TtlCache(60, clock=FakeClock())

    assert cache.get() is None
    assert cache.is_stale()
    assert cache.get_fresh() is None


def test_value_goes_stale_after_ttl():
    clock = FakeClock()
    cache = TtlCache(60, clock=clock)
    cache.set(["phones"])

    clock.now += 59
    assert not cache.is_stale()
    assert cache.get_fresh() == ["phones"]

    clock.now += 1
    assert cache.is_stale()
    assert cache.get_fresh() is None
    assert cache.get() == ["phones"]


def test_is_stale_accepts_override_ttl():
    clock = FakeClock()
    cache = TtlCache(300, clock=clock)
    cache.set("x")
    clock.now += 10

    assert cache.is_stale(ttl=5)
    assert not cache.is_stale()


def test_invalidate_drops_value():
    cache = TtlCache(60, clock=FakeClock())
    cache.set("x")

    cache.invalidate()

    assert cache.get() is None
    assert cache.is_stale()


def test_instances_do_not_share_state():
    a = TtlCache(60, clock=FakeClock())
    b = TtlCache(60, clock=FakeClock())

    a.set("only a")

    assert b.get() is None
