"""
Text rendering for frames, decoded CBOR values and capture statistics.

All functions return lists of lines (or a single string) so callers decide
where output goes; nothing here prints.
"""
from typing import List

from can_decoder.constants import NONCE_LENGTH, TIMESTAMP_DECIMALS
from can_decoder.models.classified_frame import ClassifiedFrame
from can_decoder.models.decoded_value import DecodedValue, ValueKind


def ascii_preview(data: bytes) -> str:
    """Printable ASCII with '.' for everything else."""
    return ''.join(chr(b) if 32 <= b < 127 else '.' for b in data)


def format_value(value: DecodedValue, indent: int = 0) -> List[str]:
    """Recursively render a decoded CBOR value, two spaces per indent level."""
    prefix = '  ' * indent
    kind = value.kind
    lines = []

    if kind is ValueKind.BYTES:
        data = value.value
        lines.append(f"{prefix}Type: Byte String ({len(data)} bytes)")
        lines.append(f"{prefix}Hex: {data.hex().upper()}")
        lines.append(f"{prefix}ASCII: {ascii_preview(data)}")
        if len(data) == NONCE_LENGTH:
            lines.append(f"{prefix}Possible Nonce/IV ({NONCE_LENGTH} bytes)")
    elif kind is ValueKind.TEXT:
        text = value.value
        lines.append(f"{prefix}Type: Text String ({len(text)} chars)")
        lines.append(f"{prefix}Value: {text!r}")
        if any(ord(c) < 32 or ord(c) > 126 for c in text):
            lines.append(f"{prefix}Contains non-printable bytes (possibly encrypted data)")
            lines.append(f"{prefix}Raw Hex: {text.encode('utf-8', errors='surrogatepass').hex().upper()}")
    elif kind is ValueKind.ARRAY:
        lines.append(f"{prefix}Type: Array (length {len(value.value)})")
        for i, item in enumerate(value.value):
            lines.append(f"{prefix}  [{i}]:")
            lines.extend(format_value(item, indent + 2))
    elif kind is ValueKind.MAP:
        lines.append(f"{prefix}Type: Map ({len(value.value)} entries)")
        for key, item in value.value:
            lines.append(f"{prefix}  Key: {key.key_text()}")
            lines.append(f"{prefix}  Value:")
            lines.extend(format_value(item, indent + 2))
    elif kind is ValueKind.UNSIGNED:
        lines.append(f"{prefix}Type: Unsigned Int")
        lines.append(f"{prefix}Value: {value.value} (0x{value.value:X})")
    elif kind is ValueKind.SIGNED:
        lines.append(f"{prefix}Type: Signed Int")
        lines.append(f"{prefix}Value: {value.value}")
    elif kind is ValueKind.BOOL:
        lines.append(f"{prefix}Type: Boolean")
        lines.append(f"{prefix}Value: {'true' if value.value else 'false'}")
    elif kind is ValueKind.NULL:
        lines.append(f"{prefix}Type: Null")
    elif kind is ValueKind.TAG:
        tag, inner = value.value
        lines.append(f"{prefix}Type: Tag {tag}")
        lines.extend(format_value(inner, indent + 1))
    else:
        lines.append(f"{prefix}Type: {kind.value}")
        lines.append(f"{prefix}Value: {value.value}")
    return lines


def format_frame_line(frame: ClassifiedFrame) -> str:
    """One-line frame summary: ID, standard/extended, header, kind and data."""
    raw = frame.frame
    id_type = 'Ext' if raw.is_extended else 'Std'
    return (f"ID:0x{raw.can_id}({id_type}) Hdr:{frame.header:02X} [{frame.label}] "
            f"Data[{len(raw.data)}]: {raw.data_hex}")


def format_timestamp(seconds: float) -> str:
    return f"{seconds:.{TIMESTAMP_DECIMALS}f}"


def format_duration(ms: float) -> str:
    """Human readable duration from milliseconds."""
    if ms < 1000:
        return f"{ms:.2f} ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.2f} sec"
    minutes = seconds / 60
    if minutes < 60:
        return f"{int(minutes)} min {int(seconds) % 60} sec"
    hours = minutes / 60
    return f"{int(hours)} hour {int(minutes) % 60} min"
