from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IdentifierType = Literal['accountAddress', 'txHash']
FetchStatus = Literal['success', 'empty', 'failed']
ExplorerStatus = Literal['idle', 'loading', 'ready']


class ResolveRequest(BaseModel):
    identifier: str = Field(..., description='Solana account address or transaction signature')


class NativeTransfer(BaseModel):
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    amount: int | float
    from_user_account: str | None = Field(default=None, alias='fromUserAccount')
    to_user_account: str | None = Field(default=None, alias='toUserAccount')


class TransactionRecord(BaseModel):
    # Indexer fields beyond these are kept so summaries see the whole record.
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    signature: str
    description: str | None = None
    timestamp: int
    native_transfers: list[NativeTransfer] = Field(default_factory=list, alias='nativeTransfers')

    def payload(self) -> dict:
        return self.model_dump(mode='json', by_alias=True, exclude_unset=True)


class FetchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: FetchStatus
    records: list[TransactionRecord] = Field(default_factory=list)
    reason: str | None = None

    @classmethod
    def from_records(cls, records: list[TransactionRecord]) -> 'FetchOutcome':
        return cls(status='success' if records else 'empty', records=records)

    @classmethod
    def failed(cls, reason: str) -> 'FetchOutcome':
        return cls(status='failed', records=[], reason=reason)


class TraceStep(BaseModel):
    step: str
    duration_ms: int
    ok: bool
    detail: str | None = None


class ResolutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str
    type: IdentifierType
    primary: TransactionRecord | None = None
    transactions: list[TransactionRecord] = Field(default_factory=list)
    fetch_status: FetchStatus
    fetch_error: str | None = None
    summary: str
    trace: list[TraceStep] = Field(default_factory=list)


class ExplorerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ExplorerStatus = 'idle'
    submission: int = 0
    identifier: str | None = None
    result: ResolutionResult | None = None
    error: str | None = None
