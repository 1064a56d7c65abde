"""
Reassembly models: the in-progress Message, completed messages and diagnostics.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from can_decoder.models.decoded_value import DecodedValue


@dataclass
class Message:
    """Mutable state of the multi-frame CBOR message being reassembled.

    Attributes:
        can_id: CAN ID of the frame that opened the message
        buffer: Accumulated payload bytes not yet consumed by a decode
        frame_count: Frames absorbed since the message was opened
    """
    can_id: str
    buffer: bytearray = field(default_factory=bytearray)
    frame_count: int = 0

    def absorb(self, payload: bytes) -> None:
        self.buffer.extend(payload)
        self.frame_count += 1

    @property
    def buffer_hex(self) -> str:
        return bytes(self.buffer).hex().upper()


@dataclass(frozen=True)
class DecodedMessage:
    """A CBOR value recovered from one or more frames.

    Attributes:
        can_id: CAN ID of the message's START frame
        frame_count: Number of frames absorbed into the message
        raw_bytes: Exact bytes the codec consumed
        value: Decoded value
        sequence: Sequence number of the frame that completed the message
    """
    can_id: str
    frame_count: int
    raw_bytes: bytes
    value: DecodedValue
    sequence: Optional[int] = None

    @property
    def raw_hex(self) -> str:
        return self.raw_bytes.hex().upper()


class DiagnosticKind(Enum):
    """Non-fatal conditions reported by the reassembly engine."""
    DISCARDED_INCOMPLETE = 'discarded_incomplete'
    ORPHAN_CONTINUATION = 'orphan_continuation'
    MALFORMED_PAYLOAD = 'malformed_payload'
    TRAILING_INCOMPLETE = 'trailing_incomplete'


@dataclass(frozen=True)
class Diagnostic:
    """A reassembly condition worth reporting.

    Attributes:
        kind: What happened
        can_id: CAN ID of the frame that triggered it
        sequence: Sequence number of that frame (None at end of stream)
        byte_count: Bytes discarded or dropped
        data: The discarded/dropped bytes
        detail: Codec error text, if any
    """
    kind: DiagnosticKind
    can_id: Optional[str] = None
    sequence: Optional[int] = None
    byte_count: int = 0
    data: bytes = b''
    detail: Optional[str] = None

    def describe(self) -> str:
        data_hex = self.data.hex().upper()
        if self.kind is DiagnosticKind.DISCARDED_INCOMPLETE:
            return f"Discarding incomplete buffer ({self.byte_count} bytes): {data_hex}"
        if self.kind is DiagnosticKind.ORPHAN_CONTINUATION:
            return f"Continuation on 0x{self.can_id} with no message in progress"
        if self.kind is DiagnosticKind.MALFORMED_PAYLOAD:
            return f"Dropping malformed CBOR buffer ({self.byte_count} bytes): {data_hex} ({self.detail})"
        return f"Capture ended with an incomplete buffer ({self.byte_count} bytes): {data_hex}"
