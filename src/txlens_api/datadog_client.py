from datetime import UTC, datetime
from typing import Any

import httpx

from .schemas import ResolutionResult
from .settings import settings


def _intake_url() -> str:
    return f'https://http-intake.logs.{settings.dd_site}/api/v2/logs'


def _headers() -> dict[str, str]:
    return {'Content-Type': 'application/json', 'DD-API-KEY': settings.dd_api_key or ''}


def _intake_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.dd_timeout_seconds, transport=transport)


async def send_resolution_log(result: ResolutionResult, transport: httpx.AsyncBaseTransport | None = None) -> None:
    if not settings.dd_api_key or not settings.dd_send_logs:
        return

    payload = {
        'ddsource': 'python',
        'service': settings.dd_service,
        'ddtags': f'env:{settings.dd_env},version:{settings.dd_version}',
        'hostname': 'txlens-api',
        'timestamp': datetime.now(UTC).isoformat(),
        'message': 'resolution_completed',
        'identifier': result.identifier,
        'identifier_type': result.type,
        'fetch_status': result.fetch_status,
        'transaction_count': len(result.transactions),
        'trace': [step.model_dump() for step in result.trace],
    }

    async with _intake_client(transport) as client:
        resp = await client.post(_intake_url(), headers=_headers(), json=[payload])
        resp.raise_for_status()


def datadog_config_summary() -> dict[str, Any]:
    return {
        'dd_send_logs': settings.dd_send_logs,
        'dd_trace_enabled': settings.dd_trace_enabled,
        'dd_site': settings.dd_site,
        'dd_service': settings.dd_service,
        'dd_env': settings.dd_env,
        'dd_version': settings.dd_version,
        'dd_api_key_present': bool(settings.dd_api_key),
    }
