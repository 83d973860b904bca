from hangar.cache import TTLCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_get_returns_value_until_expiry() -> None:
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=clock)

    cache.set('flickr:a6-eqa', [{'id': '1'}])
    assert cache.get('flickr:a6-eqa') == [{'id': '1'}]

    clock.now += 61
    assert cache.get('flickr:a6-eqa') is None
    assert cache.stats['entries'] == 0


def test_empty_values_are_cached() -> None:
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=FakeClock())
    cache.set('flickr:n1', [])

    assert cache.get('flickr:n1', 'missing') == []
    assert cache.contains('flickr:n1')
    assert not cache.contains('flickr:n2')


def test_per_entry_ttl_override() -> None:
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.set('short', 1, ttl_seconds=5)
    cache.set('long', 2)

    clock.now += 10
    assert cache.get('short') is None
    assert cache.get('long') == 2


def test_invalidate_and_clear() -> None:
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=FakeClock())
    cache.set('a', 1)
    cache.set('b', 2)

    assert cache.invalidate('a') is True
    assert cache.invalidate('a') is False
    assert cache.get('a') is None

    cache.clear()
    assert cache.stats['entries'] == 0


def test_evicts_oldest_when_over_capacity() -> None:
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=600, max_entries=3, clock=clock)
    for key in ['a', 'b', 'c', 'd']:
        cache.set(key, key)
        clock.now += 1

    assert cache.get('a') is None
    assert cache.get('d') == 'd'
    assert cache.stats['entries'] == 3


def test_stats_track_hits_and_misses() -> None:
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=FakeClock())
    cache.set('a', 1)
    cache.get('a')
    cache.get('b')

    stats = cache.stats
    assert stats['hits'] == 1
    assert stats['misses'] == 1
    assert stats['hit_rate'] == 0.5


def test_zero_ttl_expires_immediately() -> None:
    cache = TTLCache(ttl_seconds=0, max_entries=10, clock=FakeClock())
    cache.set('flickr:a6-eqa', [])

    assert cache.ttl_seconds == 0
    assert not cache.contains('flickr:a6-eqa')
