from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# Base58 public keys encode to at most 44 characters; signatures run longer.
ADDRESS_MAX_LENGTH = 44


class InvalidIdentifierError(ValueError):
    pass


class AccountAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal['accountAddress'] = 'accountAddress'
    value: str


class TransactionSignature(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal['txHash'] = 'txHash'
    value: str


ResolvedIdentifier = Annotated[AccountAddress | TransactionSignature, Field(discriminator='type')]


def classify_identifier(raw: str) -> AccountAddress | TransactionSignature:
    """Classify by length alone; no base58 or checksum validation is done."""
    if len(raw) <= ADDRESS_MAX_LENGTH:
        return AccountAddress(value=raw)
    return TransactionSignature(value=raw)


def parse_identifier(raw: str) -> AccountAddress | TransactionSignature:
    value = (raw or '').strip()
    if not value:
        raise InvalidIdentifierError('Input a valid solana address or transaction hash')
    return classify_identifier(value)
