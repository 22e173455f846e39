"""Resolution pipeline: classify, fetch, summarize, publish.

``TransactionExplorer`` owns the only mutable view state. Every submission is
numbered; a run that finishes after a newer submission started is returned
to its caller but never published, so the visible state always belongs to
the latest submission.
"""

import logging
from collections.abc import Callable

import httpx

from .bedrock_client import Invoker, invoke_bedrock, summarize_transactions
from .cache import CacheStore
from .helius_client import fetch_account_transactions, fetch_transaction_details
from .identifiers import AccountAddress, TransactionSignature, parse_identifier
from .observability import TraceCollector
from .schemas import ExplorerState, FetchOutcome, ResolutionResult

logger = logging.getLogger(__name__)

StateListener = Callable[[ExplorerState], None]


class TransactionExplorer:
    def __init__(
        self,
        cache: CacheStore,
        client: httpx.AsyncClient,
        invoke: Invoker = invoke_bedrock,
        base_url: str | None = None,
        api_key: str | None = None,
        limit: int | None = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self._invoke = invoke
        self._base_url = base_url
        self._api_key = api_key
        self._limit = limit
        self._sequence = 0
        self._state = ExplorerState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ExplorerState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: ExplorerState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _is_current(self, submission: int) -> bool:
        return submission == self._sequence

    async def _fetch(self, resolved: AccountAddress | TransactionSignature) -> FetchOutcome:
        if isinstance(resolved, AccountAddress):
            return await fetch_account_transactions(
                self.client,
                resolved.value,
                self.cache,
                base_url=self._base_url,
                api_key=self._api_key,
                limit=self._limit,
            )
        return await fetch_transaction_details(
            self.client,
            [resolved.value],
            self.cache,
            base_url=self._base_url,
            api_key=self._api_key,
        )

    async def submit(self, identifier: str) -> ResolutionResult:
        self._sequence += 1
        submission = self._sequence
        self._publish(ExplorerState(status='loading', submission=submission, identifier=identifier))
        trace = TraceCollector(identifier)

        try:
            with trace.step('classify'):
                resolved = parse_identifier(identifier)
            with trace.step('fetch', detail=resolved.type):
                outcome = await self._fetch(resolved)
            with trace.step('summarize', detail=f'records={len(outcome.records)}'):
                summary = await summarize_transactions(outcome.records, self.cache, self._invoke)
        except Exception as exc:
            if self._is_current(submission):
                self._publish(
                    ExplorerState(status='idle', submission=submission, identifier=identifier, error=str(exc))
                )
            raise

        result = ResolutionResult(
            identifier=resolved.value,
            type=resolved.type,
            primary=outcome.records[0] if outcome.records else None,
            transactions=outcome.records,
            fetch_status=outcome.status,
            fetch_error=outcome.reason,
            summary=summary,
            trace=trace.as_list(),
        )
        if self._is_current(submission):
            self._publish(
                ExplorerState(status='ready', submission=submission, identifier=resolved.value, result=result)
            )
        else:
            logger.info('Discarding result of superseded submission %d (latest is %d)', submission, self._sequence)
        return result
