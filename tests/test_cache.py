"""Tests for the explicit query cache."""

from purenft.services.cache import QueryCache


def test_key_ignores_predicate_order_and_value_type():
    assert QueryCache.key("nfts", {"a": 1, "b": "x"}) == QueryCache.key("nfts", {"b": "x", "a": "1"})
    assert QueryCache.key("nfts") == QueryCache.key("nfts", {})


def test_get_or_fetch_calls_once_unless_fresh():
    cache = QueryCache()
    calls = []

    def fetch():
        calls.append(1)
        return len(calls)

    key = QueryCache.key("nfts", {"id": 1})
    assert cache.get_or_fetch(key, fetch) == 1
    assert cache.get_or_fetch(key, fetch) == 1
    assert cache.get_or_fetch(key, fetch, fresh=True) == 2
    assert cache.get_or_fetch(key, fetch) == 2


def test_invalidate_by_predicate():
    cache = QueryCache()
    item = QueryCache.key("nfts", {"id": "1"}, single=True)
    other = QueryCache.key("nfts", {"id": "2"}, single=True)
    listing = QueryCache.key("nfts", columns="*")
    balance = QueryCache.key("profiles", {"user_id": "u"}, columns="balance")
    for key in (item, other, listing, balance):
        cache.get_or_fetch(key, lambda: [])

    assert cache.invalidate("nfts", {"id": 1}) == 1
    assert item not in cache and other in cache and listing in cache

    assert cache.invalidate("nfts", {}) == 1
    assert listing not in cache and other in cache

    assert cache.invalidate("profiles") == 1
    assert len(cache) == 1


def test_cached_store_reads_once_and_writes_through(store, client):
    store.select("nfts")
    store.select("nfts")
    assert client.count("select", "nfts") == 1

    store.insert("transactions", [{"type": "withdraw", "amount": "1", "status": "pending"}])
    assert client.count("insert", "transactions") == 1

    # Writes do not invalidate – the caller decides
    store.select("nfts")
    assert client.count("select", "nfts") == 1

    store.invalidate("nfts")
    store.select("nfts")
    assert client.count("select", "nfts") == 2
