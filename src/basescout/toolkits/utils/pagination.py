"""Pagination helpers.

Blockscout v2 hands out keyset cursors as ``next_page_params``; some
endpoints and older deployments report ``next_page``/``nextPage`` instead,
either as an object or as a plain page number.
"""

from typing import Any, Dict, Mapping, Optional, Union

from basescout.toolkits.utils.conversions import parse_number

__all__ = ["CursorValue", "Cursor", "clean_cursor", "extract_next_cursor", "extract_next_page"]

CursorValue = Union[str, int, float, bool]
Cursor = Dict[str, CursorValue]

_CURSOR_FIELDS = ("next_page_params", "next_page", "nextPage")
_PAGE_FIELDS = ("next_page", "nextPage")


def clean_cursor(value: Any) -> Optional[Cursor]:
    """Keep only primitive entries of a cursor object; empty results become None."""
    if not isinstance(value, Mapping):
        return None
    cursor = {
        str(key): raw
        for key, raw in value.items()
        if isinstance(raw, (str, int, float, bool))
    }
    return cursor or None


def extract_next_page(payload: Mapping[str, Any]) -> Optional[int]:
    """Numeric next page from ``next_page``/``nextPage``, if the upstream reports one."""
    for field in _PAGE_FIELDS:
        raw = payload.get(field)
        if isinstance(raw, Mapping):
            continue
        number = parse_number(raw)
        if number is not None:
            return int(number)
    return None


def extract_next_cursor(payload: Mapping[str, Any]) -> Optional[Cursor]:
    """Cursor that fetches the page following ``payload``.

    Object cursors win; a bare numeric next page is returned as ``{"page": n}``.
    Returns None when the listing is exhausted.
    """
    for field in _CURSOR_FIELDS:
        cursor = clean_cursor(payload.get(field))
        if cursor is not None:
            return cursor

    next_page = extract_next_page(payload)
    if next_page is not None:
        return {"page": next_page}
    return None
