"""
Tests for the persistent CacheStore and its key helpers.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from txlens_api.cache import (
    SUMMARY_PREFIX,
    TRANSACTIONS_PREFIX,
    CacheStore,
    summary_cache_key,
    transaction_details_cache_key,
    transactions_cache_key,
)


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_missing_key_returns_none(cache):
    assert cache.get("transactions_nobody") is None


def test_entries_survive_a_new_store_instance(tmp_path):
    path = tmp_path / "nested" / "cache.json"
    CacheStore(path).set("transactions_abc", [{"signature": "s1"}])
    reopened = CacheStore(path)
    assert reopened.get("transactions_abc") == [{"signature": "s1"}]


def test_empty_list_is_a_cache_hit(cache):
    cache.set("transactions_quiet", [])
    assert cache.get("transactions_quiet") == []


def test_oldest_write_is_evicted_when_full(tmp_path):
    store = CacheStore(tmp_path / "cache.json", max_entries=2)
    store.set("a", 1)
    store.set("b", 2)
    store.set("c", 3)
    assert store.get("a") is None
    assert store.get("b") == 2
    assert store.get("c") == 3


def test_rewriting_a_key_makes_it_newest(tmp_path):
    store = CacheStore(tmp_path / "cache.json", max_entries=2)
    store.set("a", 1)
    store.set("b", 2)
    store.set("a", 10)
    store.set("c", 3)
    assert store.get("b") is None
    assert store.get("a") == 10


def test_ttl_applies_per_key_class(tmp_path):
    clock = FakeClock()
    store = CacheStore(
        tmp_path / "cache.json",
        ttl_by_prefix={TRANSACTIONS_PREFIX: None, SUMMARY_PREFIX: 10},
        clock=clock,
    )
    store.set("transactions_abc", ["tx"])
    store.set("aisummary_[]", "summary")
    clock.now += 11
    assert store.get("transactions_abc") == ["tx"]
    assert store.get("aisummary_[]") is None


def test_longest_prefix_wins(tmp_path):
    clock = FakeClock()
    store = CacheStore(
        tmp_path / "cache.json",
        ttl_by_prefix={"transaction_": 5, "transactions_": None},
        clock=clock,
    )
    store.set("transactions_abc", ["tx"])
    store.set("transaction_sig", ["tx"])
    clock.now += 6
    assert store.get("transactions_abc") == ["tx"]
    assert store.get("transaction_sig") is None


def test_unserializable_value_is_rejected(cache):
    with pytest.raises(TypeError):
        cache.set("transactions_bad", {1, 2})
    assert cache.get("transactions_bad") is None
    assert not cache.path.exists()


def test_cache_keys_are_deterministic():
    assert transactions_cache_key("addr") == "transactions_addr"
    assert transaction_details_cache_key(["s1", "s2"]) == "transaction_s1,s2"
    payload = [{"signature": "abc", "timestamp": 1}]
    assert summary_cache_key(payload) == summary_cache_key([{"signature": "abc", "timestamp": 1}])
    assert summary_cache_key(payload) == 'aisummary_[{"signature":"abc","timestamp":1}]'


def test_summary_key_changes_with_order_or_content():
    first = {"signature": "a", "timestamp": 1}
    second = {"signature": "b", "timestamp": 2}
    assert summary_cache_key([first, second]) != summary_cache_key([second, first])
    assert summary_cache_key([first]) != summary_cache_key([{**first, "timestamp": 3}])


def test_writes_from_worker_threads_all_persist(tmp_path):
    path = tmp_path / "cache.json"
    store = CacheStore(path)
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: store.set(f"transactions_{i}", [i]), range(40)))

    reopened = CacheStore(path)
    assert all(reopened.get(f"transactions_{i}") == [i] for i in range(40))
