import asyncio
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from .cache import CacheStore, transaction_details_cache_key, transactions_cache_key
from .schemas import FetchOutcome, TransactionRecord
from .settings import settings

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    pass


class ServiceError(FetchError):
    """The indexer answered with an explicit ``error`` field."""

    def __init__(self, payload: Any) -> None:
        super().__init__(f'Helius API error: {payload}')
        self.payload = payload


def build_client(timeout_s: float | None = None) -> httpx.AsyncClient:
    timeout = timeout_s if timeout_s is not None else settings.txlens_timeout_seconds
    return httpx.AsyncClient(timeout=timeout, headers={'Content-Type': 'application/json'})


def _records(data: Any) -> list[TransactionRecord]:
    if not isinstance(data, list):
        raise FetchError(f'Unexpected response format: {type(data).__name__}')
    return [TransactionRecord.model_validate(item) for item in data]


def _params(api_key: str | None, **extra: Any) -> dict[str, Any]:
    params = {k: v for k, v in extra.items() if v is not None}
    if api_key:
        params['api-key'] = api_key
    return params


async def _fetch_cached(
    client: httpx.AsyncClient,
    cache: CacheStore,
    key: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> FetchOutcome:
    cached = cache.get(key)
    if cached is not None:
        logger.debug('cache hit for %s', key)
        return FetchOutcome.from_records(_records(cached))

    try:
        response = await client.request(method, url, **kwargs)
        data = response.json()
        if isinstance(data, dict) and data.get('error'):
            raise ServiceError(data['error'])
        response.raise_for_status()
        records = _records(data)
    except ServiceError:
        raise
    except Exception as exc:
        logger.error('Helius request %s %s failed: %s', method, url, exc)
        return FetchOutcome.failed(str(exc))

    await asyncio.to_thread(cache.set, key, data)
    return FetchOutcome.from_records(records)


async def fetch_account_transactions(
    client: httpx.AsyncClient,
    address: str,
    cache: CacheStore,
    *,
    base_url: str | None = None,
    api_key: str | None = None,
    limit: int | None = None,
) -> FetchOutcome:
    base_url = (base_url or settings.helius_api_base_url).rstrip('/')
    segment = quote(address, safe='')
    return await _fetch_cached(
        client,
        cache,
        transactions_cache_key(address),
        'GET',
        f'{base_url}/addresses/{segment}/transactions',
        params=_params(
            api_key or settings.helius_api_key,
            limit=limit or settings.helius_transaction_limit,
        ),
    )


async def fetch_transaction_details(
    client: httpx.AsyncClient,
    signatures: Sequence[str],
    cache: CacheStore,
    *,
    base_url: str | None = None,
    api_key: str | None = None,
) -> FetchOutcome:
    if not signatures:
        raise ValueError('At least one transaction signature is required')
    base_url = (base_url or settings.helius_api_base_url).rstrip('/')
    return await _fetch_cached(
        client,
        cache,
        transaction_details_cache_key(signatures),
        'POST',
        f'{base_url}/transactions',
        params=_params(api_key or settings.helius_api_key),
        json={'transactions': list(signatures)},
    )
