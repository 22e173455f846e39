"""Persistent key/value cache for indexer responses and generated summaries.

Entries live in a single JSON document on disk so they survive restarts.
The store is bounded: once ``max_entries`` is reached the oldest write is
evicted. Each key class (ledger data vs. summaries) may carry its own TTL;
an expired entry reads as absent and is overwritten on the next ``set``.
``set`` rewrites the document, so async callers run it via ``asyncio.to_thread``;
writes are serialized by a lock.
"""

import json
import os
import threading
import time
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from .settings import settings

TRANSACTIONS_PREFIX = 'transactions_'
TRANSACTION_DETAILS_PREFIX = 'transaction_'
SUMMARY_PREFIX = 'aisummary_'


def transactions_cache_key(address: str) -> str:
    return f'{TRANSACTIONS_PREFIX}{address}'


def transaction_details_cache_key(signatures: Sequence[str]) -> str:
    return f'{TRANSACTION_DETAILS_PREFIX}{",".join(signatures)}'


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False)


def summary_cache_key(payload: Any) -> str:
    return f'{SUMMARY_PREFIX}{canonical_json(payload)}'


class CacheStore:
    def __init__(
        self,
        path: str | os.PathLike[str],
        max_entries: int | None = None,
        ttl_by_prefix: Mapping[str, int | None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.max_entries = max_entries
        # Longest prefix wins, so 'transactions_' is not shadowed by 'transaction_'.
        self._ttls = sorted((ttl_by_prefix or {}).items(), key=lambda item: len(item[0]), reverse=True)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, dict[str, Any]] = self._load()

    @classmethod
    def from_settings(cls) -> 'CacheStore':
        ledger_ttl = settings.txlens_ledger_cache_ttl_seconds
        return cls(
            settings.txlens_cache_path,
            max_entries=settings.txlens_cache_max_entries,
            ttl_by_prefix={
                TRANSACTIONS_PREFIX: ledger_ttl,
                TRANSACTION_DETAILS_PREFIX: ledger_ttl,
                SUMMARY_PREFIX: settings.txlens_summary_cache_ttl_seconds,
            },
        )

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        with self.path.open('r', encoding='utf-8') as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f'{self.path.name}.tmp')
        with tmp.open('w', encoding='utf-8') as fh:
            json.dump(self._entries, fh, ensure_ascii=False)
        os.replace(tmp, self.path)

    def _ttl_for(self, key: str) -> int | None:
        for prefix, ttl in self._ttls:
            if key.startswith(prefix):
                return ttl
        return None

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        ttl = self._ttl_for(key)
        if ttl is not None and self._clock() - entry['stored_at'] > ttl:
            return None
        return entry['value']

    def set(self, key: str, value: Any) -> None:
        # Serialize first so a bad value never reaches the in-memory map.
        json.dumps(value)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = {'value': value, 'stored_at': self._clock()}
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    del self._entries[next(iter(self._entries))]
            self._flush()
