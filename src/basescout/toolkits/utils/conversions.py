"""Value conversions for explorer payloads."""

import math
from datetime import datetime, timezone
from typing import Any, Optional, Union

__all__ = [
    "WEI_PER_ETHER",
    "checksum_address",
    "parse_number",
    "normalize_timestamp_ms",
    "normalize_timestamp_seconds",
    "format_wei_to_ether",
    "normalize_status",
]

WEI_PER_ETHER = 10 ** 18

# Below this a numeric timestamp is taken to be in seconds
_MILLISECOND_THRESHOLD = 1e12

Number = Union[int, float]


def checksum_address(address: str) -> str:
    """Normalize a hex address for use in explorer paths.

    ``0x``-prefixed addresses are lower-cased; anything else is returned
    unchanged. No EIP-55 checksum is computed.
    """
    if not address:
        return address
    lowered = address.lower()
    if not lowered.startswith("0x"):
        return address
    return lowered


def parse_number(value: Any) -> Optional[Number]:
    """Lenient number parsing. Returns None for anything non-numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _parse_iso(value: str) -> Optional[datetime]:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def normalize_timestamp_ms(value: Any) -> Optional[Number]:
    """Epoch milliseconds from a number, numeric string or ISO-8601 date.

    Numbers below 10**12 are read as seconds and scaled up.
    """
    numeric = parse_number(value)
    if numeric is not None:
        return numeric * 1000 if numeric < _MILLISECOND_THRESHOLD else numeric

    if isinstance(value, str):
        dt = _parse_iso(value)
        if dt is not None:
            return int(dt.timestamp() * 1000)
    return None


def normalize_timestamp_seconds(value: Any) -> Optional[Number]:
    """Numbers pass through unchanged; ISO-8601 dates become whole epoch seconds."""
    numeric = parse_number(value)
    if numeric is not None:
        return numeric

    if isinstance(value, str):
        dt = _parse_iso(value)
        if dt is not None:
            return math.floor(dt.timestamp())
    return None


def format_wei_to_ether(wei: Any) -> str:
    """Exact wei→ether formatting with trailing zeros stripped.

    >>> format_wei_to_ether("1500000000000000000")
    '1.5'
    >>> format_wei_to_ether("not-a-number")
    '0'
    """
    if wei is None or wei == "" or isinstance(wei, bool):
        return "0"

    try:
        if isinstance(wei, int):
            amount = wei
        else:
            text = str(wei).strip()
            amount = int(text, 16) if text.lower().startswith(("0x", "-0x")) else int(text)
    except ValueError:
        return "0"

    sign = "-" if amount < 0 else ""
    whole, remainder = divmod(abs(amount), WEI_PER_ETHER)
    if remainder == 0:
        return f"{sign}{whole}"

    fraction = str(remainder).rjust(18, "0").rstrip("0")
    return f"{sign}{whole}.{fraction}"


def normalize_status(value: Any) -> Optional[str]:
    """Map explorer status strings onto success / failed / pending."""
    if not isinstance(value, str):
        return None
    lowered = value.lower()
    if "success" in lowered:
        return "success"
    if "fail" in lowered:
        return "failed"
    if "pending" in lowered:
        return "pending"
    return None
