"""
Payload codec: decodes one CBOR value from the front of a byte buffer.

The engine only needs two answers from the codec: "here is a value and the
number of bytes it used", or "cannot decode". cbor2 reports running out of
data as CBORDecodeEOF; that is mapped to PayloadIncompleteError, every other
decode error to PayloadMalformedError. CBORDecodeEOF is caught by name because
only some cbor2 releases also derive it from EOFError.
"""
import io
import logging
from collections.abc import Mapping
from typing import Any, Tuple

import cbor2

from can_decoder.exceptions import PayloadIncompleteError, PayloadMalformedError
from can_decoder.models.decoded_value import DecodedValue, ValueKind

logger = logging.getLogger(__name__)


def _decode_first(data: bytes) -> Tuple[Any, int]:
    fp = io.BytesIO(data)
    item = cbor2.CBORDecoder(fp).decode()
    return item, fp.tell()


def _shortest_complete_prefix(data: bytes, upper: int) -> int:
    """Length of the first encoded item in data.

    A well-formed CBOR item is prefix-free, so the first prefix that decodes is
    exactly the item. ``upper`` is the stream position after decoding, which
    overshoots when the decoder reads ahead.
    """
    for n in range(1, upper):
        try:
            _decode_first(data[:n])
        except (cbor2.CBORDecodeError, EOFError, ValueError, TypeError, OverflowError):
            continue
        return n
    return upper


def decode_prefix(buffer: bytes) -> Tuple[DecodedValue, int]:
    """Decode the first CBOR value in buffer.

    Args:
        buffer: Accumulated message bytes

    Returns:
        (decoded value, number of leading bytes consumed)

    Raises:
        PayloadIncompleteError: The buffer ends before the value does
        PayloadMalformedError: The buffer is not valid CBOR
    """
    data = bytes(buffer)
    if not data:
        raise PayloadIncompleteError("Empty buffer", data=data)

    try:
        item, position = _decode_first(data)
    except (cbor2.CBORDecodeEOF, EOFError) as e:
        raise PayloadIncompleteError(f"Need more bytes: {e}", data=data, original_error=e) from e
    except cbor2.CBORDecodeError as e:
        raise PayloadMalformedError(f"Invalid CBOR: {e}", data=data, original_error=e) from e
    except (ValueError, TypeError, OverflowError) as e:
        # semantic tag handlers (datetimes, decimals, ...) raise plain errors
        raise PayloadMalformedError(f"Invalid CBOR: {e}", data=data, original_error=e) from e

    consumed = _shortest_complete_prefix(data, min(position, len(data)))
    return to_decoded_value(item), consumed


def to_decoded_value(item: Any) -> DecodedValue:
    """Convert a cbor2 result into the DecodedValue variant."""
    if item is None:
        return DecodedValue.null()
    if isinstance(item, bool):
        return DecodedValue(ValueKind.BOOL, item)
    if isinstance(item, int):
        return DecodedValue.integer(item)
    if isinstance(item, float):
        return DecodedValue(ValueKind.FLOAT, item)
    if isinstance(item, (bytes, bytearray, memoryview)):
        return DecodedValue(ValueKind.BYTES, bytes(item))
    if isinstance(item, str):
        return DecodedValue(ValueKind.TEXT, item)
    if isinstance(item, cbor2.CBORTag):
        return DecodedValue(ValueKind.TAG, (item.tag, to_decoded_value(item.value)))
    if isinstance(item, cbor2.CBORSimpleValue):
        # older cbor2 releases define this as a namedtuple; keep it out of ARRAY
        return DecodedValue(ValueKind.OTHER, f"simple({item.value})")
    if isinstance(item, (list, tuple)):
        return DecodedValue.array([to_decoded_value(v) for v in item])
    if isinstance(item, Mapping):
        return DecodedValue.map([(to_decoded_value(k), to_decoded_value(v)) for k, v in item.items()])
    return DecodedValue(ValueKind.OTHER, repr(item))
