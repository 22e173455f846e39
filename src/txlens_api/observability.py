from contextlib import contextmanager
import logging
import time
from typing import Any
from urllib.parse import urlparse

from .schemas import TraceStep
from .settings import settings

logger = logging.getLogger(__name__)


def _configure_tracer() -> Any:
    if not settings.dd_trace_enabled:
        return None
    try:
        from ddtrace import tracer
    except Exception:  # pragma: no cover
        logger.warning('DD_TRACE_ENABLED is set but ddtrace could not be loaded; spans disabled')
        return None
    agent_url = urlparse(settings.dd_trace_agent_url or '')
    if agent_url.scheme in {'http', 'https'} and agent_url.hostname:
        tracer.configure(
            hostname=agent_url.hostname,
            port=agent_url.port or 8126,
            https=(agent_url.scheme == 'https'),
        )
    elif agent_url.scheme == 'unix' and agent_url.path:
        tracer.configure(uds_path=agent_url.path)
    return tracer


tracer = _configure_tracer()


class TraceCollector:
    """Times each pipeline step for one submission and mirrors it to ddtrace."""

    def __init__(self, identifier: str | None = None) -> None:
        self.identifier = identifier
        self.steps: list[TraceStep] = []

    def _open_span(self, name: str, detail: str | None):
        if tracer is None:
            return None
        span = tracer.trace(f'txlens.{name}', service=settings.dd_service, resource=name)
        span.set_tag('env', settings.dd_env)
        span.set_tag('version', settings.dd_version)
        if self.identifier:
            span.set_tag('txlens.identifier', self.identifier)
        if detail:
            span.set_tag('detail', detail)
        return span

    @contextmanager
    def step(self, name: str, detail: str | None = None):
        started = time.perf_counter()
        span = self._open_span(name, detail)
        error: str | None = None
        try:
            yield
        except Exception as exc:
            error = str(exc)
            if span is not None:
                span.set_tag('error', 1)
                span.set_tag('error.msg', error)
            raise
        finally:
            step = TraceStep(
                step=name,
                duration_ms=int((time.perf_counter() - started) * 1000),
                ok=error is None,
                detail=detail if error is None else error,
            )
            self.steps.append(step)
            logger.debug('step %s ok=%s %dms (%s)', name, step.ok, step.duration_ms, step.detail)
            if span is not None:
                span.finish()

    def as_list(self) -> list[TraceStep]:
        return list(self.steps)
