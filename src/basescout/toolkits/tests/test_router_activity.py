"""
Tests for the router activity scanner: cursor walking, time-window cutoff,
page slicing and per-item normalization.
"""
import pytest
from unittest.mock import AsyncMock, Mock

from basescout.exceptions import UpstreamHttpError
from basescout.toolkits.data.router_activity import (
    RouterActivityScanner,
    activity_timestamp_ms,
    normalize_activity_item,
)


ROUTER = "0xe592427a0aece92de3edee1f18e0157c05861564"
NOW_MS = 1_700_000_000_000


def _batch(hashes, next_page_params=None, timestamps=None):
    items = []
    for position, tx_hash in enumerate(hashes):
        item = {"hash": tx_hash, "from": {"hash": "0xsender"}, "method": "swap"}
        if timestamps is not None:
            item["timestamp"] = timestamps[position]
        items.append(item)
    return {"items": items, "next_page_params": next_page_params}


def _scanner(*responses):
    client = Mock()
    client.get_address_transactions = AsyncMock(side_effect=list(responses))
    return RouterActivityScanner(client, now_ms=lambda: NOW_MS), client


class TestPagination:

    @pytest.mark.asyncio
    async def test_second_page_is_sliced_from_buffer(self):
        scanner, client = _scanner(
            _batch([f"0x{i}" for i in range(0, 10)], {"block_number": 100, "index": 1}),
            _batch([f"0x{i}" for i in range(10, 20)], {"block_number": 90, "index": 1}),
            _batch([f"0x{i}" for i in range(20, 25)]),
        )

        page = await scanner.scan(ROUTER, page=2, page_size=10)

        assert [item.hash for item in page.items] == [f"0x{i}" for i in range(10, 20)]
        assert page.page == 2
        assert page.page_size == 10
        # 20 buffered items satisfy page 2, so the third batch is never fetched
        assert client.get_address_transactions.await_count == 2

    @pytest.mark.asyncio
    async def test_last_page_is_partial(self):
        scanner, client = _scanner(
            _batch([f"0x{i}" for i in range(0, 10)], {"block_number": 100, "index": 1}),
            _batch([f"0x{i}" for i in range(10, 20)], {"block_number": 90, "index": 1}),
            _batch([f"0x{i}" for i in range(20, 25)]),
        )

        page = await scanner.scan(ROUTER, page=3, page_size=10)

        assert [item.hash for item in page.items] == [f"0x{i}" for i in range(20, 25)]
        assert client.get_address_transactions.await_count == 3

    @pytest.mark.asyncio
    async def test_cursor_is_forwarded_with_to_filter(self):
        scanner, client = _scanner(
            _batch(["0x1"], {"block_number": 100, "index": 7}),
            _batch(["0x2"]),
        )

        await scanner.scan(ROUTER, page_size=5)

        calls = client.get_address_transactions.await_args_list
        assert calls[0].args == (ROUTER, {"filter": "to"})
        assert calls[1].args == (ROUTER, {"filter": "to", "block_number": 100, "index": 7})

    @pytest.mark.asyncio
    async def test_repeated_cursor_stops_scan(self, mock_logger):
        same = {"block_number": 100, "index": 1}
        scanner, client = _scanner(_batch(["0x1"], same), _batch(["0x2"], same), _batch(["0x3"], same))

        page = await scanner.scan(ROUTER, page_size=50)

        assert [item.hash for item in page.items] == ["0x1", "0x2"]
        assert client.get_address_transactions.await_count == 2
        mock_logger['scanner'].warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_numeric_next_page_is_followed(self):
        scanner, client = _scanner(
            {"items": [{"hash": "0x1"}], "next_page": 2},
            {"items": [{"hash": "0x2"}]},
        )

        page = await scanner.scan(ROUTER, page_size=5)

        assert [item.hash for item in page.items] == ["0x1", "0x2"]
        assert client.get_address_transactions.await_args_list[1].args[1] == {"filter": "to", "page": 2}

    @pytest.mark.asyncio
    async def test_non_mapping_entries_are_skipped(self):
        scanner, _ = _scanner({"items": [{"hash": "0x1"}, "garbage", None, {"hash": "0x2"}]})

        page = await scanner.scan(ROUTER)

        assert [item.hash for item in page.items] == ["0x1", "0x2"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 101)])
    async def test_invalid_paging_arguments(self, page, page_size):
        scanner, client = _scanner(_batch(["0x1"]))

        with pytest.raises(ValueError):
            await scanner.scan(ROUTER, page=page, page_size=page_size)

        client.get_address_transactions.assert_not_awaited()


class TestTimeWindow:

    @pytest.mark.asyncio
    async def test_cutoff_filters_and_stops_fetching(self):
        scanner, client = _scanner(
            _batch(["0x1", "0x2"], {"block_number": 10, "index": 0},
                   timestamps=[NOW_MS - 1_000, NOW_MS - 60_000]),
            _batch(["0x3", "0x4"], {"block_number": 9, "index": 0},
                   timestamps=[NOW_MS - 300_000, NOW_MS - 900_000]),
            _batch(["0x5"], timestamps=[NOW_MS - 1_000_000]),
        )

        page = await scanner.scan(ROUTER, since_minutes=10, page_size=50)

        assert [item.hash for item in page.items] == ["0x1", "0x2", "0x3"]
        assert page.since_minutes == 10
        assert client.get_address_transactions.await_count == 2

    @pytest.mark.asyncio
    async def test_items_without_timestamp_are_dropped_under_cutoff(self):
        scanner, _ = _scanner({"items": [
            {"hash": "0x1", "timestamp": NOW_MS - 1_000},
            {"hash": "0x2"},
        ]})

        page = await scanner.scan(ROUTER, since_minutes=5)

        assert [item.hash for item in page.items] == ["0x1"]

    @pytest.mark.asyncio
    async def test_items_without_timestamp_are_kept_without_cutoff(self):
        scanner, _ = _scanner({"items": [{"hash": "0x1"}, {"hash": "0x2"}]})

        page = await scanner.scan(ROUTER)

        assert len(page.items) == 2
        assert page.items[1].timestamp is None

    @pytest.mark.asyncio
    async def test_second_timestamps_are_compared_in_milliseconds(self):
        now_seconds = NOW_MS // 1000
        scanner, _ = _scanner({"items": [
            {"hash": "0x1", "timestamp": now_seconds - 30},
            {"hash": "0x2", "timestamp": now_seconds - 3_600},
        ]})

        page = await scanner.scan(ROUTER, since_minutes=1)

        assert [item.hash for item in page.items] == ["0x1"]
        assert page.items[0].timestamp == (now_seconds - 30) * 1000

    @pytest.mark.asyncio
    async def test_upstream_errors_propagate(self):
        client = Mock()
        client.get_address_transactions = AsyncMock(
            side_effect=UpstreamHttpError("https://x/api", 502, "bad gateway")
        )
        scanner = RouterActivityScanner(client, now_ms=lambda: NOW_MS)

        with pytest.raises(UpstreamHttpError):
            await scanner.scan(ROUTER)


class TestNormalization:

    def test_method_falls_back_to_decoded_name(self):
        item = normalize_activity_item({
            "hash": "0xabc",
            "from": "0xsender",
            "decoded_input": {
                "method_call": "exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))",
                "method_id": "0x414bf389",
                "parameters": [{"name": "params", "value": []}, "junk"],
            },
        })

        assert item.method == item.decoded.name
        assert item.decoded.name.startswith("exactInputSingle")
        assert item.decoded.signature == "0x414bf389"
        assert item.decoded.params == [{"name": "params", "value": []}]

    def test_top_level_method_wins(self):
        item = normalize_activity_item({
            "hash": "0xabc",
            "method": "multicall",
            "decoded_input": {"name": "exactInput"},
        })

        assert item.method == "multicall"
        assert item.decoded.name == "exactInput"

    def test_empty_decoded_object_is_ignored(self):
        item = normalize_activity_item({"hash": "0xabc", "decoded_input": {}, "decoded": {"name": "swap"}})

        assert item.decoded.name == "swap"

    def test_sender_value_and_alias_dump(self):
        item = normalize_activity_item({
            "tx_hash": "0xabc",
            "from": {"hash": "0xsender"},
            "amount": "1000",
            "block_timestamp": "2023-11-14T22:13:20Z",
        })

        dumped = item.model_dump(by_alias=True)
        assert dumped["hash"] == "0xabc"
        assert dumped["from"] == "0xsender"
        assert dumped["value"] == "1000"
        assert dumped["timestamp"] == 1_700_000_000_000

    @pytest.mark.parametrize("raw,expected", [
        ({"timestamp": 1_700_000_000}, 1_700_000_000_000),
        ({"timestamp": 1_700_000_000_123}, 1_700_000_000_123),
        ({"timestamp": "1700000000"}, 1_700_000_000_000),
        ({"block_timestamp": "2023-11-14T22:13:20.000000Z"}, 1_700_000_000_000),
        ({"timestamp": "yesterday"}, None),
        ({}, None),
    ])
    def test_activity_timestamp_ms(self, raw, expected):
        assert activity_timestamp_ms(raw) == expected
