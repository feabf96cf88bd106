"""Field Resolution Utilities
=========================

Explorer payloads name the same attribute differently depending on the
endpoint and the explorer version. Normalization is expressed as an ordered
list of accessors; the first accessor that yields a present value wins.

Example:
    ```python
    method_name = FieldResolver(
        string_field("name"),
        string_field("method_call"),
        string_field("method"),
    )
    method_name({"method_call": "swap"})   # "swap"
    ```
"""

from typing import Any, Callable, Mapping, Optional

from basescout.toolkits.utils.conversions import parse_number

__all__ = [
    "Accessor",
    "FieldResolver",
    "any_field",
    "string_field",
    "list_field",
    "mapping_field",
    "number_field",
    "nested",
]

# An accessor returns None when its field is absent or of the wrong kind.
Accessor = Callable[[Mapping[str, Any]], Any]


def any_field(name: str) -> Accessor:
    """Any non-null value."""
    def accessor(record: Mapping[str, Any]) -> Any:
        return record.get(name)
    return accessor


def string_field(name: str) -> Accessor:
    def accessor(record: Mapping[str, Any]) -> Optional[str]:
        value = record.get(name)
        return value if isinstance(value, str) else None
    return accessor


def list_field(name: str) -> Accessor:
    def accessor(record: Mapping[str, Any]) -> Optional[list]:
        value = record.get(name)
        return value if isinstance(value, list) else None
    return accessor


def mapping_field(name: str, non_empty: bool = True) -> Accessor:
    """A mapping value, by default only when it has at least one key."""
    def accessor(record: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        value = record.get(name)
        if not isinstance(value, Mapping):
            return None
        if non_empty and not value:
            return None
        return value
    return accessor


def number_field(name: str) -> Accessor:
    """A number, or a string that parses as one."""
    def accessor(record: Mapping[str, Any]) -> Optional[float]:
        return parse_number(record.get(name))
    return accessor


def nested(*path: str, leaf: Callable[[str], Accessor] = string_field) -> Accessor:
    """Walk mappings along ``path`` and apply ``leaf`` to the last segment.

    ``nested("from", "hash")`` reads ``record["from"]["hash"]`` as a string.
    """
    if not path:
        raise ValueError("nested() needs at least one path segment")

    *parents, last = path
    leaf_accessor = leaf(last)

    def accessor(record: Mapping[str, Any]) -> Any:
        current: Any = record
        for segment in parents:
            if not isinstance(current, Mapping):
                return None
            current = current.get(segment)
        if not isinstance(current, Mapping):
            return None
        return leaf_accessor(current)
    return accessor


class FieldResolver:
    """Evaluate accessors in priority order and return the first present value."""

    def __init__(self, *accessors: Accessor, default: Any = None):
        if not accessors:
            raise ValueError("FieldResolver needs at least one accessor")
        self._accessors = accessors
        self.default = default

    def __call__(self, record: Any) -> Any:
        return self.resolve(record)

    def resolve(self, record: Any) -> Any:
        if not isinstance(record, Mapping):
            return self.default
        for accessor in self._accessors:
            value = accessor(record)
            if value is not None:
                return value
        return self.default

    def __repr__(self) -> str:
        return f"FieldResolver({len(self._accessors)} accessors, default={self.default!r})"
