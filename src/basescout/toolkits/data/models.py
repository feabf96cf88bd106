"""Tool input and output records.

Input models validate tool arguments before any upstream call is made.
Output models fix the shape of what each tool returns; they are dumped with
``by_alias=True`` so that ``from_`` is reported as ``from``.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Number",
    "CursorValue",
    "AddressInput",
    "TransactionsInput",
    "TransactionHashInput",
    "TokenTransfersInput",
    "SearchInput",
    "LogsInput",
    "RouterActivityInput",
    "EtherBalance",
    "TokenBalance",
    "AccountSummary",
    "TransactionRecord",
    "TransactionPage",
    "DecodedCall",
    "TransactionLog",
    "TransactionDetails",
    "ContractMetadata",
    "ContractABI",
    "TokenRef",
    "TokenTransfer",
    "TokenTransferCursor",
    "TokenTransferPage",
    "SearchResult",
    "SearchResults",
    "LogRecord",
    "LogPage",
    "ActivityItem",
    "RouterActivityPage",
    "TokenMetadata",
]

Number = Union[int, float]
CursorValue = Union[str, int, float, bool]
TransactionStatus = Literal["success", "failed", "pending"]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Inputs
# =============================================================================

class AddressInput(BaseModel):
    address: str = Field(min_length=1)

    @field_validator("address")
    @classmethod
    def strip_address(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Address is required")
        return v


class TransactionsInput(AddressInput):
    direction: Optional[Literal["in", "out", "all"]] = None
    cursor: Optional[Dict[str, CursorValue]] = None


class TransactionHashInput(BaseModel):
    hash: str = Field(min_length=1)

    @field_validator("hash")
    @classmethod
    def strip_hash(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Transaction hash is required")
        return v


class TokenTransferCursor(_Record):
    block_number: int = Field(ge=0, validation_alias=AliasChoices("block_number", "blockNumber"))
    index: int = Field(ge=0)


class TokenTransfersInput(AddressInput):
    cursor: Optional[TokenTransferCursor] = None


class SearchInput(BaseModel):
    query: str = Field(min_length=2)


class LogsInput(BaseModel):
    address: Optional[str] = None
    topics: Optional[List[str]] = Field(default=None, max_length=4)
    from_block: Optional[int] = Field(default=None, ge=0)
    to_block: Optional[int] = Field(default=None, ge=0)
    page: Optional[int] = Field(default=None, gt=0)
    page_size: Optional[int] = Field(default=None, gt=0, le=100)
    transaction_hash: Optional[str] = None


class RouterActivityInput(BaseModel):
    router: str = Field(min_length=1)
    since_minutes: Optional[int] = Field(default=None, gt=0)
    page: Optional[int] = Field(default=None, gt=0)
    page_size: Optional[int] = Field(default=None, gt=0, le=100)


# =============================================================================
# Outputs
# =============================================================================

class EtherBalance(_Record):
    wei: str
    ether: str


class TokenBalance(_Record):
    address: Optional[str] = None
    symbol: Optional[str] = None
    name: Optional[str] = None
    balance: Optional[str] = None
    decimals: Optional[Number] = None
    usd_value: Optional[Number] = None


class AccountSummary(_Record):
    address: str
    balance: EtherBalance
    transaction_count: Number = 0
    nonce: Optional[Number] = None
    token_balances: List[TokenBalance] = Field(default_factory=list)


class TransactionRecord(_Record):
    hash: str
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    value: Optional[str] = None
    method: Optional[str] = None
    status: Optional[TransactionStatus] = None
    timestamp: Optional[Number] = None


class TransactionPage(_Record):
    address: str
    cursor: Optional[Dict[str, CursorValue]] = None
    next_cursor: Optional[Dict[str, CursorValue]] = None
    items: List[TransactionRecord] = Field(default_factory=list)


class DecodedCall(_Record):
    name: Optional[str] = None
    signature: Optional[str] = None
    params: Optional[List[Dict[str, Any]]] = None


class TransactionLog(_Record):
    index: Optional[Number] = None
    address: Optional[str] = None
    data: Optional[str] = None
    topics: Optional[List[str]] = None


class TransactionDetails(_Record):
    hash: str
    block_number: Optional[Number] = None
    timestamp: Optional[Number] = None
    status: Optional[TransactionStatus] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    value: Optional[str] = None
    fee: Optional[str] = None
    method: Optional[str] = None
    decoded_method: Optional[DecodedCall] = None
    logs: List[TransactionLog] = Field(default_factory=list)


class ContractMetadata(_Record):
    compiler: Optional[str] = None
    evm_version: Optional[str] = None
    verified_at: Optional[str] = None
    verified: bool = False


class ContractABI(_Record):
    address: str
    abi: Optional[List[Dict[str, Any]]] = None
    metadata: ContractMetadata


class TokenRef(_Record):
    address: Optional[str] = None
    symbol: Optional[str] = None
    name: Optional[str] = None
    decimals: Optional[Number] = None


class TokenTransfer(_Record):
    hash: str
    log_index: Optional[Number] = None
    block_number: Optional[Number] = None
    timestamp: Optional[Number] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    token: TokenRef = Field(default_factory=TokenRef)
    amount: Optional[str] = None
    type: Optional[str] = None


class TokenTransferPage(_Record):
    address: str
    cursor: Optional[TokenTransferCursor] = None
    next_cursor: Optional[TokenTransferCursor] = None
    items: List[TokenTransfer] = Field(default_factory=list)


class SearchResult(_Record):
    type: str = "unknown"
    name: Optional[str] = None
    hash: Optional[str] = None
    address: Optional[str] = None
    label: Optional[str] = None
    match: Optional[str] = None


class SearchResults(_Record):
    query: str
    items: List[SearchResult] = Field(default_factory=list)


class LogRecord(_Record):
    address: Optional[str] = None
    data: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    block_number: Optional[Number] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[Number] = None
    timestamp: Optional[Number] = None


class LogPage(_Record):
    page: int
    page_size: int
    next_page: Optional[int] = None
    items: List[LogRecord] = Field(default_factory=list)


class ActivityItem(_Record):
    hash: str = ""
    from_: Optional[str] = Field(default=None, alias="from")
    method: Optional[str] = None
    decoded: Optional[DecodedCall] = None
    timestamp: Optional[Number] = None
    value: Optional[str] = None


class RouterActivityPage(_Record):
    router: str
    page: int
    page_size: int
    since_minutes: Optional[int] = None
    items: List[ActivityItem] = Field(default_factory=list)


class TokenMetadata(_Record):
    address: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[Number] = None
    total_supply: Optional[str] = None
    holders: Optional[Number] = None
    type: Optional[str] = None
