"""
Decoded CBOR value model.

Decoded payloads are generic, untyped trees. They are held as a tagged variant
(``ValueKind`` + payload) so presentation code switches on the kind instead of
inspecting Python types.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple


class ValueKind(Enum):
    BYTES = 'Byte String'
    TEXT = 'Text String'
    ARRAY = 'Array'
    MAP = 'Map'
    UNSIGNED = 'Unsigned Int'
    SIGNED = 'Signed Int'
    BOOL = 'Boolean'
    NULL = 'Null'
    FLOAT = 'Float'
    TAG = 'Tag'
    OTHER = 'Other'


@dataclass(frozen=True)
class DecodedValue:
    """One node of a decoded CBOR tree.

    Payload by kind:
        BYTES: bytes
        TEXT: str
        ARRAY: tuple of DecodedValue
        MAP: tuple of (DecodedValue, DecodedValue) pairs, in encoded order
        UNSIGNED / SIGNED: int
        BOOL: bool
        NULL: None
        FLOAT: float
        TAG: (tag number, DecodedValue)
        OTHER: repr text of a value the codec produced outside these kinds
    """
    kind: ValueKind
    value: Any = None

    @classmethod
    def null(cls) -> 'DecodedValue':
        return cls(ValueKind.NULL)

    @classmethod
    def integer(cls, n: int) -> 'DecodedValue':
        return cls(ValueKind.UNSIGNED if n >= 0 else ValueKind.SIGNED, n)

    @classmethod
    def array(cls, items: List['DecodedValue']) -> 'DecodedValue':
        return cls(ValueKind.ARRAY, tuple(items))

    @classmethod
    def map(cls, pairs: List[Tuple['DecodedValue', 'DecodedValue']]) -> 'DecodedValue':
        return cls(ValueKind.MAP, tuple(pairs))

    def to_python(self) -> Any:
        """Plain Python rendering, mostly useful in tests and JSON dumps."""
        if self.kind is ValueKind.ARRAY:
            return [item.to_python() for item in self.value]
        if self.kind is ValueKind.MAP:
            return {_hashable(k.to_python()): v.to_python() for k, v in self.value}
        if self.kind is ValueKind.TAG:
            tag, inner = self.value
            return {'tag': tag, 'value': inner.to_python()}
        return self.value

    def key_text(self) -> str:
        """Compact rendering used for map keys in the pretty printer."""
        if self.kind is ValueKind.TEXT:
            return self.value
        if self.kind is ValueKind.BYTES:
            return self.value.hex().upper()
        if self.kind is ValueKind.NULL:
            return 'null'
        if self.kind is ValueKind.BOOL:
            return 'true' if self.value else 'false'
        return str(self.to_python())


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _hashable(v)) for k, v in value.items())
    return value
