from __future__ import annotations

"""Blockscout Explorer Toolkit
============================

An Agno-compatible toolkit exposing read-only Base network explorer data
(accounts, transactions, logs, tokens, contract ABIs and DEX router activity)
backed by a Blockscout REST API.

## Supported Data

**Accounts**
- Native balance (wei and ether), nonce, transaction count, token balances
- Transaction history with direction filter and keyset pagination
- Token transfers for a token contract or an address

**Transactions & Logs**
- Transaction details with status, decoded method and event logs
- Log queries by address, topics and block range

**Contracts & Tokens**
- Verified ABI with compiler metadata
- Token metadata (name, symbol, decimals, supply, holders)
- Free-text explorer search

**DEX Routers**
- Known router registry per network, with file overrides
- Recent router activity over a time window

## Configuration Example

```yaml
toolkits:
  - name: "BlockscoutToolkit"
    params:
      config_path: "./basescout.yaml"
    available_tools:
      - "get_account_summary"
      - "get_dex_router_activity"
```

## Environment Variables

- `BASE_NETWORK`: `base-mainnet` (default) or `base-sepolia`
- `BLOCKSCOUT_API_KEY`: Optional API key appended as `apikey`
- `CACHE_TTL_MS`, `CACHE_MAX`, `RATE_POINTS`, `RATE_DURATION_S`,
  `RETRY_ATTEMPTS`, `RETRY_MIN_MS`, `RETRY_MAX_MS`, `ROUTERS_CONFIG_PATH`

## Response Format Standards

**Success Response:**
```json
{"success": true, "data": {...}, "network": "base-mainnet", "fetched_at": 1700000000}
```

**Error Response:**
```json
{"success": false, "message": "...", "error_type": "validation_error|rate_limited|api_error|...", "tool": "..."}
```
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Literal, Mapping, Optional, Union

import httpx
from agno.tools import Toolkit
from loguru import logger

from basescout.cache import ResponseCache
from basescout.config import BasescoutConfig, load_config
from basescout.error_handler import ErrorHandler
from basescout.toolkits.base import BaseAPIToolkit
from basescout.toolkits.data.models import (
    AccountSummary,
    AddressInput,
    ContractABI,
    ContractMetadata,
    DecodedCall,
    EtherBalance,
    LogPage,
    LogRecord,
    LogsInput,
    RouterActivityInput,
    SearchInput,
    SearchResult,
    SearchResults,
    TokenBalance,
    TokenMetadata,
    TokenRef,
    TokenTransfer,
    TokenTransferCursor,
    TokenTransferPage,
    TokenTransfersInput,
    TransactionDetails,
    TransactionHashInput,
    TransactionLog,
    TransactionPage,
    TransactionRecord,
    TransactionsInput,
)
from basescout.toolkits.data.router_activity import DEFAULT_PAGE_SIZE, RouterActivityScanner
from basescout.toolkits.data.routers import (
    DEFAULT_ROUTERS,
    load_router_overrides,
    merge_routers,
    resolve_router,
    select_routers_for_network,
)
from basescout.toolkits.utils.conversions import (
    format_wei_to_ether,
    normalize_status,
    normalize_timestamp_seconds,
    parse_number,
)
from basescout.toolkits.utils.field_resolver import (
    FieldResolver,
    any_field,
    list_field,
    mapping_field,
    nested,
    number_field,
    string_field,
)
from basescout.toolkits.utils.pagination import extract_next_cursor, extract_next_page
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter

__all__ = ["BlockscoutToolkit"]

MAX_TOKEN_BALANCES = 20
MAX_SEARCH_RESULTS = 10
DEFAULT_LOG_PAGE_SIZE = 100

_API_ENDPOINTS = {
    "address": "/v2/addresses/{address}",
    "address_transactions": "/v2/addresses/{address}/transactions",
    "address_token_transfers": "/v2/addresses/{address}/token-transfers",
    "token_transfers": "/v2/tokens/{address}/transfers",
    "transaction": "/v2/transactions/{hash}",
    "transaction_logs": "/v2/transactions/{hash}/logs",
    "logs": "/v2/logs",
    "smart_contract": "/v2/smart-contracts/{address}",
    "token": "/v2/tokens/{address}",
    "search": "/v2/search",
}

# Shared field aliases
_ITEMS = FieldResolver(list_field("items"), list_field("result"), default=[])
_HASH = FieldResolver(any_field("hash"), any_field("tx_hash"), default="")
_FROM = FieldResolver(string_field("from"), nested("from", "hash"))
_TO = FieldResolver(string_field("to"), nested("to", "hash"))
_TIMESTAMP = FieldResolver(any_field("timestamp"), any_field("block_timestamp"), any_field("time"))

# Account summary
_ACCOUNT_ADDRESS = FieldResolver(string_field("hash"), string_field("address"))
_ACCOUNT_BALANCE = FieldResolver(any_field("balance"), any_field("coin_balance"), any_field("value"), default="0")
_TX_COUNT = FieldResolver(number_field("transactions_count"), number_field("tx_count"), number_field("transaction_count"))
_TOKEN_LIST = FieldResolver(list_field("items"), list_field("result"), list_field("data"), default=[])
_TOKEN_DETAILS = FieldResolver(
    mapping_field("token", non_empty=False),
    mapping_field("contract", non_empty=False),
    mapping_field("details", non_empty=False),
    default={},
)
_TOKEN_BALANCE = FieldResolver(any_field("balance"), any_field("value"), any_field("amount"))
_TOKEN_USD = FieldResolver(any_field("usd_value"), any_field("usdPrice"), any_field("usd"))
_TOKEN_ADDRESS = FieldResolver(string_field("address"), string_field("address_hash"))

# Transactions
_TX_METHOD = FieldResolver(string_field("method"), string_field("call_type"))
_TX_STATUS = FieldResolver(any_field("status"), any_field("tx_status"), any_field("result"))
_TX_DECODED = FieldResolver(mapping_field("decoded_input"), mapping_field("decoded"))
_TX_BLOCK = FieldResolver(number_field("block_number"), nested("block", "number", leaf=number_field))
_TX_FEE = FieldResolver(string_field("fee"), string_field("tx_fee"), nested("fee", "value"))
_TX_INPUT_METHOD = FieldResolver(string_field("method"), string_field("input_method"))
_DECODED_NAME = FieldResolver(string_field("name"), string_field("method_call"))
_DECODED_SIGNATURE = FieldResolver(string_field("signature"), string_field("selector"), string_field("method_id"))
_DECODED_PARAMS = FieldResolver(list_field("params"), list_field("arguments"), list_field("parameters"))
_TX_LOGS = FieldResolver(list_field("logs"), list_field("log_events"), default=[])
_LOG_INDEX = FieldResolver(number_field("index"), number_field("log_index"))
_LOG_ADDRESS = FieldResolver(string_field("address"), nested("address", "hash"))

# Contracts
_ABI = FieldResolver(any_field("abi"), any_field("result"), any_field("abi_json"))
_COMPILER = FieldResolver(string_field("compiler"), string_field("compiler_version"))
_EVM_VERSION = FieldResolver(string_field("evm"), string_field("evm_version"))
_VERIFIED_AT = FieldResolver(string_field("verified_at"), string_field("verification_date"))
_VERIFIED = FieldResolver(any_field("verified"), any_field("is_verified"))

# Token transfers
_TRANSFER_HASH = FieldResolver(any_field("tx_hash"), any_field("transaction_hash"), default="")
_TRANSFER_TOKEN = FieldResolver(
    mapping_field("token", non_empty=False),
    mapping_field("contract", non_empty=False),
    mapping_field("token_contract", non_empty=False),
    default={},
)
_TRANSFER_LOG_INDEX = FieldResolver(number_field("log_index"), number_field("index"))
_TRANSFER_DECIMALS = FieldResolver(any_field("decimals"), any_field("decimal"))
_TRANSFER_AMOUNT = FieldResolver(string_field("amount"), string_field("value"), nested("total", "value"))
_TRANSFER_TYPE = FieldResolver(string_field("type"), string_field("token_type"))
_NEXT_PAGE_OBJECT = FieldResolver(
    mapping_field("next_page_params", non_empty=False),
    mapping_field("next_page", non_empty=False),
    mapping_field("nextPage", non_empty=False),
)

# Search
_SEARCH_NAME = FieldResolver(string_field("name"), string_field("title"))
_SEARCH_HASH = FieldResolver(string_field("hash"), string_field("tx_hash"))
_SEARCH_ADDRESS = FieldResolver(string_field("address"), string_field("contract_address"), string_field("address_hash"))
_SEARCH_MATCH = FieldResolver(string_field("match"), string_field("matched_text"))

# Logs
_LOG_TOPICS = FieldResolver(list_field("topics"))
_LOG_TX_HASH = FieldResolver(string_field("transaction_hash"), string_field("tx_hash"))
_LOG_RECORD_INDEX = FieldResolver(number_field("log_index"), number_field("index"))

# Tokens
_TOKEN_NAME = FieldResolver(string_field("name"), string_field("token_name"))
_TOKEN_SYMBOL = FieldResolver(string_field("symbol"), string_field("token_symbol"))
_TOKEN_DECIMALS = FieldResolver(any_field("decimals"), any_field("token_decimals"))
_TOKEN_SUPPLY = FieldResolver(string_field("total_supply"), string_field("supply"))
_TOKEN_HOLDERS = FieldResolver(any_field("holders"), any_field("holder_count"), any_field("holders_count"))
_TOKEN_TYPE = FieldResolver(string_field("type"), string_field("token_type"))


def _mappings(values: Any) -> List[Mapping[str, Any]]:
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, Mapping)]


def _string_list(values: Any) -> List[str]:
    return [value for value in values if isinstance(value, str)] if isinstance(values, list) else []


class BlockscoutToolkit(Toolkit, BaseAPIToolkit):
    """Base network explorer toolkit backed by Blockscout.

    Every tool validates its arguments, goes through the shared request
    pipeline (cache, rate limit, retry, shape validation) and returns a
    standardized response. Tools never raise: failures come back as
    ``{"success": False, ...}`` with an ``error_type``.
    """

    _toolkit_category = "blockchain"
    _toolkit_type = "explorer"

    def __init__(
        self,
        config: Optional[BasescoutConfig] = None,
        config_path: Optional[Union[str, Path]] = None,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now_ms: Optional[Callable[[], float]] = None,
        error_handler: Optional[ErrorHandler] = None,
        name: str = "blockscout_toolkit",
        **kwargs: Any,
    ):
        """Initialize the toolkit.

        Args:
            config: Ready configuration. Loaded with ``load_config`` when omitted.
            config_path: Optional YAML file used when ``config`` is omitted
            cache: Shared response cache, built from config when omitted
            rate_limiter: Shared rate limiter, built from config when omitted
            transport: httpx transport override (tests use ``httpx.MockTransport``)
            sleep: Backoff sleep override
            now_ms: Wall clock in epoch milliseconds for the router scanner
            error_handler: Error handler override
            name: Toolkit name
            **kwargs: Passed to ``agno.tools.Toolkit``

        Raises:
            ConfigurationError: If configuration or router overrides are invalid
        """
        config = config or load_config(config_path)
        self._network = config.explorer.network

        self._init_standard_configuration(
            config,
            cache=cache,
            rate_limiter=rate_limiter,
            transport=transport,
            sleep=sleep,
            error_handler=error_handler,
        )

        scanner_kwargs = {"now_ms": now_ms} if now_ms is not None else {}
        self._scanner = RouterActivityScanner(self._http_client, **scanner_kwargs)

        overrides = load_router_overrides(config.routers_config_path) if config.routers_config_path else None
        self._routers = merge_routers(DEFAULT_ROUTERS, overrides)

        available_tools = [
            self.get_account_summary,
            self.get_transactions,
            self.get_transaction_by_hash,
            self.get_contract_abi,
            self.get_token_transfers,
            self.search,
            self.get_logs,
            self.get_dex_router_activity,
            self.resolve_token,
            self.list_routers,
        ]

        self._tool_registry = {tool.__name__: tool for tool in available_tools}

        super().__init__(name=name, tools=available_tools, **kwargs)

        logger.debug(
            f"Initialized BlockscoutToolkit on {self._network} "
            f"({self._http_client.base_url}) with {len(self._routers)} known routers"
        )

    @property
    def network(self) -> str:
        return self._network

    @property
    def tool_names(self) -> List[str]:
        return list(self._tool_registry)

    def get_tool(self, tool_name: str) -> Callable[..., Awaitable[Dict[str, Any]]]:
        """Bound tool coroutine by name.

        Raises:
            KeyError: If no tool has that name
        """
        try:
            return self._tool_registry[tool_name]
        except KeyError:
            raise KeyError(f"Unknown tool '{tool_name}'. Available: {self.tool_names}") from None

    def _success(self, record, message: str, **additional_fields: Any) -> Dict[str, Any]:
        return self.response_builder.success_response(
            data=record.model_dump(by_alias=True),
            message=message,
            network=self._network,
            **additional_fields,
        )

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_account_summary(self, address: str) -> Dict[str, Any]:
        """Get native balance, nonce, transaction count and top token balances for an address.

        Args:
            address: Account address (0x-prefixed)

        Returns:
            dict: Account summary

        **Success Response:**
        ```json
        {
            "success": true,
            "data": {
                "address": "0xabc...",
                "balance": {"wei": "1500000000000000000", "ether": "1.5"},
                "transaction_count": 42,
                "nonce": 7,
                "token_balances": [{"address": "0x...", "symbol": "USDC", "balance": "1000000", "decimals": 6}]
            }
        }
        ```
        """
        tool = "get_account_summary"
        try:
            params = self._validate_input(tool, AddressInput, address=address)
            account_address = self._validate_address(params.address)

            account, tokens, counters = await asyncio.gather(
                self._http_client.get_address(account_address),
                self._http_client.get_address_token_balances(account_address),
                self._http_client.get_address_counters(account_address),
            )

            balance_wei = str(_ACCOUNT_BALANCE(account))
            transaction_count = _TX_COUNT(counters)
            if transaction_count is None:
                transaction_count = _TX_COUNT(account)

            summary = AccountSummary(
                address=_ACCOUNT_ADDRESS(account) or account_address.lower(),
                balance=EtherBalance(wei=balance_wei, ether=format_wei_to_ether(balance_wei)),
                transaction_count=transaction_count or 0,
                nonce=parse_number(account.get("nonce")),
                token_balances=self._extract_token_balances(tokens),
            )
            return self._success(summary, f"Account summary for {summary.address}")

        except Exception as e:
            return self._build_error_response(tool, e, _API_ENDPOINTS["address"], address=address)

    @staticmethod
    def _extract_token_balances(raw: Any) -> List[TokenBalance]:
        entries = raw if isinstance(raw, list) else _TOKEN_LIST(raw)

        balances = []
        for record in _mappings(entries):
            token = _TOKEN_DETAILS(record)
            balance = _TOKEN_BALANCE(record)
            usd_value = parse_number(_TOKEN_USD(record))
            balances.append(TokenBalance(
                address=string_field("address")(token),
                symbol=string_field("symbol")(token),
                name=string_field("name")(token),
                balance=str(balance) if balance else None,
                decimals=parse_number(token.get("decimals")),
                usd_value=usd_value or None,
            ))
        return balances[:MAX_TOKEN_BALANCES]

    async def get_transactions(
        self,
        address: str,
        direction: Optional[Literal["in", "out", "all"]] = None,
        cursor: Optional[Dict[str, Union[str, int, float, bool]]] = None,
    ) -> Dict[str, Any]:
        """List recent transactions for an address, newest first, one page at a time.

        Args:
            address: Account address
            direction: "in" (received), "out" (sent) or "all" (default)
            cursor: ``next_cursor`` from a previous call to fetch the following page

        Returns:
            dict: ``{"address", "cursor", "next_cursor", "items": [...]}``. A null
            ``next_cursor`` means there are no more pages.
        """
        tool = "get_transactions"
        try:
            params = self._validate_input(
                tool, TransactionsInput, address=address, direction=direction, cursor=cursor
            )
            account_address = self._validate_address(params.address)

            query: Dict[str, Any] = dict(params.cursor or {})
            upstream_filter = {"in": "to", "out": "from"}.get(params.direction or "all")
            if upstream_filter and "filter" not in query:
                query["filter"] = upstream_filter

            response = await self._http_client.get_address_transactions(account_address, query)

            items = []
            for record in _mappings(_ITEMS(response)):
                tx_hash = str(_HASH(record))
                if not tx_hash:
                    continue
                items.append(TransactionRecord(
                    hash=tx_hash,
                    from_=_FROM(record),
                    to=_TO(record),
                    value=string_field("value")(record),
                    method=_TX_METHOD(record),
                    status=normalize_status(_TX_STATUS(record)),
                    timestamp=normalize_timestamp_seconds(_TIMESTAMP(record)),
                ))

            page = TransactionPage(
                address=params.address,
                cursor=params.cursor,
                next_cursor=extract_next_cursor(response),
                items=items,
            )
            return self._success(page, f"Fetched {len(items)} transaction(s)", direction=params.direction or "all")

        except Exception as e:
            return self._build_error_response(
                tool, e, _API_ENDPOINTS["address_transactions"], address=address, direction=direction
            )

    async def get_token_transfers(
        self,
        address: str,
        cursor: Optional[Dict[str, int]] = None,
        scope: Literal["token", "address"] = "token",
    ) -> Dict[str, Any]:
        """List token transfer events.

        Args:
            address: Token contract address (``scope="token"``) or account
                address (``scope="address"``)
            cursor: ``{"block_number": ..., "index": ...}`` from a previous ``next_cursor``
            scope: Whether ``address`` is a token contract or a holder account

        Returns:
            dict: ``{"address", "cursor", "next_cursor", "items": [...]}``
        """
        tool = "get_token_transfers"
        endpoint = _API_ENDPOINTS["address_token_transfers" if scope == "address" else "token_transfers"]
        try:
            params = self._validate_input(tool, TokenTransfersInput, address=address, cursor=cursor)
            if scope not in ("token", "address"):
                raise ValueError(f"scope must be 'token' or 'address', got {scope!r}")
            target = self._validate_address(params.address)

            query = None
            if params.cursor is not None:
                query = {"block_number": params.cursor.block_number, "index": params.cursor.index}

            if scope == "address":
                response = await self._http_client.get_address_token_transfers(target, query)
            else:
                response = await self._http_client.get_token_transfers(target, query)

            items = []
            for record in _mappings(_ITEMS(response)):
                transfer = self._normalize_transfer(record)
                if transfer.hash:
                    items.append(transfer)

            page = TokenTransferPage(
                address=params.address,
                cursor=params.cursor,
                next_cursor=self._transfer_cursor(response),
                items=items,
            )
            return self._success(page, f"Fetched {len(items)} token transfer(s)", scope=scope)

        except Exception as e:
            return self._build_error_response(tool, e, endpoint, address=address)

    @staticmethod
    def _normalize_transfer(record: Mapping[str, Any]) -> TokenTransfer:
        token = _TRANSFER_TOKEN(record)
        decimals = parse_number(_TRANSFER_DECIMALS(token))
        if decimals is None:
            decimals = parse_number(record.get("token_decimals"))

        return TokenTransfer(
            hash=str(_TRANSFER_HASH(record)),
            log_index=_TRANSFER_LOG_INDEX(record),
            block_number=parse_number(record.get("block_number")),
            timestamp=normalize_timestamp_seconds(_TIMESTAMP(record)),
            from_=_FROM(record),
            to=_TO(record),
            token=TokenRef(
                address=_TOKEN_ADDRESS(token),
                symbol=string_field("symbol")(token),
                name=string_field("name")(token),
                decimals=decimals,
            ),
            amount=_TRANSFER_AMOUNT(record),
            type=_TRANSFER_TYPE(record),
        )

    @staticmethod
    def _transfer_cursor(response: Mapping[str, Any]) -> Optional[TokenTransferCursor]:
        raw = _NEXT_PAGE_OBJECT(response)
        if raw is None:
            return None
        block_number = parse_number(raw.get("block_number"))
        index = parse_number(raw.get("index"))
        if block_number is None or index is None:
            return None
        return TokenTransferCursor(block_number=int(block_number), index=int(index))

    # =========================================================================
    # Transactions & logs
    # =========================================================================

    async def get_transaction_by_hash(self, hash: str) -> Dict[str, Any]:
        """Fetch a transaction with status, decoded method and event logs.

        Args:
            hash: Transaction hash (0x-prefixed)

        Returns:
            dict: Transaction details. ``status`` is one of success, failed,
            pending or null.
        """
        tool = "get_transaction_by_hash"
        try:
            params = self._validate_input(tool, TransactionHashInput, hash=hash)
            response = await self._http_client.get_transaction(params.hash)

            decoded_source = _TX_DECODED(response)
            decoded = None
            if decoded_source is not None:
                params_list = _DECODED_PARAMS(decoded_source)
                decoded = DecodedCall(
                    name=_DECODED_NAME(decoded_source),
                    signature=_DECODED_SIGNATURE(decoded_source),
                    params=_mappings(params_list) if params_list is not None else None,
                )

            logs = [
                TransactionLog(
                    index=_LOG_INDEX(entry),
                    address=_LOG_ADDRESS(entry),
                    data=string_field("data")(entry),
                    topics=_string_list(entry["topics"]) if isinstance(entry.get("topics"), list) else None,
                )
                for entry in _mappings(_TX_LOGS(response))
            ]

            details = TransactionDetails(
                hash=str(response.get("hash") or params.hash),
                block_number=_TX_BLOCK(response),
                timestamp=normalize_timestamp_seconds(_TIMESTAMP(response)),
                status=normalize_status(_TX_STATUS(response)),
                from_=_FROM(response),
                to=_TO(response),
                value=string_field("value")(response),
                fee=_TX_FEE(response),
                method=_TX_INPUT_METHOD(response),
                decoded_method=decoded,
                logs=logs,
            )
            return self._success(details, f"Fetched transaction {details.hash}")

        except Exception as e:
            return self._build_error_response(tool, e, _API_ENDPOINTS["transaction"], hash=hash)

    async def get_logs(
        self,
        address: Optional[str] = None,
        topics: Optional[List[str]] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        transaction_hash: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Retrieve event logs by emitter address, topics and block range, or for one transaction.

        Args:
            address: Emitting contract address
            topics: Up to four topic filters
            from_block: First block (inclusive)
            to_block: Last block (inclusive)
            page: 1-based page (default 1)
            page_size: Logs per page, at most 100 (default 100)
            transaction_hash: When given, return the logs of this transaction instead

        Returns:
            dict: ``{"page", "page_size", "next_page", "items": [...]}``
        """
        tool = "get_logs"
        endpoint = _API_ENDPOINTS["transaction_logs" if transaction_hash else "logs"]
        try:
            params = self._validate_input(
                tool,
                LogsInput,
                address=address,
                topics=topics,
                from_block=from_block,
                to_block=to_block,
                page=page,
                page_size=page_size,
                transaction_hash=transaction_hash,
            )
            resolved_page = params.page or 1
            resolved_page_size = params.page_size or DEFAULT_LOG_PAGE_SIZE

            if params.transaction_hash:
                response = await self._http_client.get_transaction_logs(params.transaction_hash.strip())
            else:
                response = await self._http_client.get_logs({
                    "address": self._validate_address(params.address) if params.address else None,
                    "topics": ",".join(params.topics) if params.topics else None,
                    "from_block": params.from_block,
                    "to_block": params.to_block,
                    "page": resolved_page,
                    "page_size": resolved_page_size,
                })

            items = []
            for record in _mappings(_ITEMS(response)):
                raw_topics = _LOG_TOPICS(record)
                if raw_topics is not None:
                    record_topics = _string_list(raw_topics)
                elif isinstance(record.get("topic"), str):
                    record_topics = [record["topic"]]
                else:
                    record_topics = []

                items.append(LogRecord(
                    address=_LOG_ADDRESS(record),
                    data=string_field("data")(record),
                    topics=record_topics,
                    block_number=parse_number(record.get("block_number")),
                    transaction_hash=_LOG_TX_HASH(record),
                    log_index=_LOG_RECORD_INDEX(record),
                    timestamp=normalize_timestamp_seconds(_TIMESTAMP(record)),
                ))

            log_page = LogPage(
                page=resolved_page,
                page_size=resolved_page_size,
                next_page=extract_next_page(response),
                items=items,
            )
            return self._success(log_page, f"Fetched {len(items)} log(s)")

        except Exception as e:
            return self._build_error_response(
                tool, e, endpoint, address=address, transaction_hash=transaction_hash
            )

    # =========================================================================
    # Contracts, tokens & search
    # =========================================================================

    async def get_contract_abi(self, address: str) -> Dict[str, Any]:
        """Fetch the verified ABI and compiler metadata of a smart contract.

        Args:
            address: Contract address

        Returns:
            dict: ``{"address", "abi": [...] | null, "metadata": {"compiler",
            "evm_version", "verified_at", "verified"}}``
        """
        tool = "get_contract_abi"
        try:
            params = self._validate_input(tool, AddressInput, address=address)
            contract_address = self._validate_address(params.address)
            response = await self._http_client.get_smart_contract(contract_address)

            abi = self._parse_abi(_ABI(response))
            verified_flag = _VERIFIED(response)

            contract = ContractABI(
                address=params.address,
                abi=abi,
                metadata=ContractMetadata(
                    compiler=_COMPILER(response),
                    evm_version=_EVM_VERSION(response),
                    verified_at=_VERIFIED_AT(response),
                    verified=bool(verified_flag) if verified_flag is not None else abi is not None,
                ),
            )
            return self._success(contract, f"Fetched ABI for {params.address}")

        except Exception as e:
            return self._build_error_response(tool, e, _API_ENDPOINTS["smart_contract"], address=address)

    @staticmethod
    def _parse_abi(raw: Any) -> Optional[List[Mapping[str, Any]]]:
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.debug("Contract ABI is not valid JSON, ignoring it")
                return None
        if isinstance(raw, list):
            return _mappings(raw)
        return None

    async def resolve_token(self, address: str) -> Dict[str, Any]:
        """Look up token metadata (name, symbol, decimals, supply, holders, type).

        Args:
            address: Token contract address
        """
        tool = "resolve_token"
        try:
            params = self._validate_input(tool, AddressInput, address=address)
            token_address = self._validate_address(params.address)
            response = await self._http_client.get_token(token_address)

            token = TokenMetadata(
                address=params.address,
                name=_TOKEN_NAME(response),
                symbol=_TOKEN_SYMBOL(response),
                decimals=parse_number(_TOKEN_DECIMALS(response)),
                total_supply=_TOKEN_SUPPLY(response),
                holders=parse_number(_TOKEN_HOLDERS(response)),
                type=_TOKEN_TYPE(response),
            )
            return self._success(token, f"Resolved token {token.symbol or params.address}")

        except Exception as e:
            return self._build_error_response(tool, e, _API_ENDPOINTS["token"], address=address)

    async def search(self, query: str) -> Dict[str, Any]:
        """Search the explorer for addresses, tokens, blocks or transactions.

        Args:
            query: Search term, at least two characters

        Returns:
            dict: ``{"query", "items": [...]}`` with at most 10 results
        """
        tool = "search"
        try:
            params = self._validate_input(tool, SearchInput, query=query)
            response = await self._http_client.search(params.query)

            items = [
                SearchResult(
                    type=string_field("type")(record) or "unknown",
                    name=_SEARCH_NAME(record),
                    hash=_SEARCH_HASH(record),
                    address=_SEARCH_ADDRESS(record),
                    label=string_field("label")(record),
                    match=_SEARCH_MATCH(record),
                )
                for record in _mappings(_ITEMS(response)[:MAX_SEARCH_RESULTS])
            ]
            return self._success(SearchResults(query=params.query, items=items), f"Found {len(items)} result(s)")

        except Exception as e:
            return self._build_error_response(tool, e, _API_ENDPOINTS["search"], query=query)

    # =========================================================================
    # DEX routers
    # =========================================================================

    async def list_routers(self) -> Dict[str, Any]:
        """List known DEX router addresses for the configured network."""
        routers = select_routers_for_network(self._routers, self._network)
        return self.response_builder.success_response(
            data=routers,
            message=f"{len(routers)} known router(s) on {self._network}",
            network=self._network,
        )

    async def get_dex_router_activity(
        self,
        router: str,
        since_minutes: Optional[int] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Inspect recent transactions sent to a DEX router.

        Args:
            router: Known router name (see ``list_routers``) or router address
            since_minutes: Only include transactions from the last N minutes
            page: 1-based page (default 1)
            page_size: Items per page, at most 100 (default 20)

        Returns:
            dict: ``{"router", "page", "page_size", "since_minutes", "items": [...]}``
            where each item has hash, from, method, decoded, timestamp (epoch ms)
            and value.
        """
        tool = "get_dex_router_activity"
        try:
            params = self._validate_input(
                tool,
                RouterActivityInput,
                router=router,
                since_minutes=since_minutes,
                page=page,
                page_size=page_size,
            )
            router_address = self._validate_address(
                resolve_router(params.router, self._routers, self._network)
            )

            activity = await self._scanner.scan(
                router_address,
                since_minutes=params.since_minutes,
                page=params.page or 1,
                page_size=params.page_size or DEFAULT_PAGE_SIZE,
            )

            router_name = params.router.strip() if params.router.strip() in self._routers else None
            return self._success(
                activity,
                f"Fetched {len(activity.items)} router transaction(s)",
                router_name=router_name,
            )

        except Exception as e:
            return self._build_error_response(
                tool, e, _API_ENDPOINTS["address_transactions"], router=router
            )
