import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import StreamingResponse

from .cache import CacheStore
from .controller import TransactionExplorer
from .datadog_client import datadog_config_summary, send_resolution_log
from .helius_client import ServiceError, build_client
from .identifiers import InvalidIdentifierError
from .schemas import ExplorerState, ResolutionResult, ResolveRequest

logger = logging.getLogger(__name__)

app = FastAPI(title='txlens API', version='0.1.0')
_explorer: TransactionExplorer | None = None


def get_explorer() -> TransactionExplorer:
    global _explorer
    if _explorer is None:
        _explorer = TransactionExplorer(CacheStore.from_settings(), build_client())
    return _explorer


def _service_error_detail(exc: ServiceError) -> str:
    return f'Helius request failed: {exc.payload}'


async def _ship_log(result: ResolutionResult) -> None:
    try:
        await send_resolution_log(result)
    except Exception as exc:
        logger.warning('Datadog log shipping failed: %s', exc)


@app.get('/health')
def health() -> dict[str, str]:
    return {'status': 'ok'}


@app.get('/v1/diagnostics/datadog')
def datadog_diagnostics() -> dict[str, Any]:
    return datadog_config_summary()


@app.get('/v1/state', response_model=ExplorerState)
def current_state(explorer: TransactionExplorer = Depends(get_explorer)) -> ExplorerState:
    return explorer.state


@app.post('/v1/resolve', response_model=ResolutionResult)
async def resolve(
    payload: ResolveRequest, explorer: TransactionExplorer = Depends(get_explorer)
) -> ResolutionResult:
    try:
        result = await explorer.submit(payload.identifier)
    except InvalidIdentifierError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=_service_error_detail(exc)) from exc
    await _ship_log(result)
    return result


def _format_sse(event: str, data: dict) -> str:
    return f'event: {event}\ndata: {json.dumps(data, separators=(",", ":"))}\n\n'


@app.post('/v1/resolve/stream')
async def resolve_stream(
    payload: ResolveRequest, explorer: TransactionExplorer = Depends(get_explorer)
) -> StreamingResponse:
    request_id = str(uuid4())

    async def event_stream() -> AsyncGenerator[str, None]:
        queue: asyncio.Queue[tuple[str, dict] | None] = asyncio.Queue()

        def on_state(state: ExplorerState) -> None:
            queue.put_nowait((state.status, state.model_dump(mode='json')))

        async def worker() -> None:
            unsubscribe = explorer.subscribe(on_state)
            try:
                result = await explorer.submit(payload.identifier)
                await _ship_log(result)
                queue.put_nowait(('completed', {'response': result.model_dump(mode='json')}))
            except InvalidIdentifierError as exc:
                queue.put_nowait(('error', {'status_code': 400, 'detail': str(exc)}))
            except ServiceError as exc:
                queue.put_nowait(('error', {'status_code': 502, 'detail': _service_error_detail(exc)}))
            except Exception as exc:
                queue.put_nowait(('error', {'status_code': 500, 'detail': str(exc)}))
            finally:
                unsubscribe()
                queue.put_nowait(None)

        task = asyncio.create_task(worker())
        while True:
            item = await queue.get()
            if item is None:
                break
            event, data = item
            yield _format_sse(event, {'request_id': request_id, **data})
        await task

    return StreamingResponse(
        event_stream(),
        media_type='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no',
        },
    )
