"""
Pytest fixtures for txlens tests. Indexer traffic goes through httpx.MockTransport,
Bedrock through a recording fake, and the cache lives under tmp_path.
"""

from __future__ import annotations

import httpx
import pytest

from txlens_api.cache import CacheStore
from txlens_api.controller import TransactionExplorer

BASE_URL = "https://helius.test/v0"
API_KEY = "test-key"

# 44-char base58 pubkey and an 88-char signature
ADDRESS = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
SIGNATURE = "5" * 88

SAMPLE_TRANSACTIONS = [
    {"signature": "abc", "timestamp": 1700000000, "nativeTransfers": [{"amount": 5}]},
]


class FakeInvoker:
    """Stands in for invoke_bedrock and records each (system, prompt) call."""

    def __init__(self, text: str = "5 tokens transferred from A to B", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def __call__(self, system: str, prompt: str) -> str:
        self.calls.append((system, prompt))
        if self.error is not None:
            raise self.error
        return self.text


class FakeIndexer:
    """MockTransport handler: records requests and replays a canned response."""

    def __init__(self, status_code: int = 200, json_body=None, error: Exception | None = None):
        self.status_code = status_code
        self.json_body = SAMPLE_TRANSACTIONS if json_body is None else json_body
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.json_body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def cache(tmp_path):
    return CacheStore(tmp_path / "cache.json")


@pytest.fixture
def indexer():
    return FakeIndexer()


@pytest.fixture
def invoker():
    return FakeInvoker()


@pytest.fixture
def explorer(cache, indexer, invoker):
    return TransactionExplorer(
        cache,
        indexer.client(),
        invoke=invoker,
        base_url=BASE_URL,
        api_key=API_KEY,
    )
