"""
Classified frame model: a RawFrame tagged with its role in the protocol.
"""
from dataclasses import dataclass
from enum import Enum

from capture.readers.interface import RawFrame


class FrameKind(Enum):
    """Role of a frame, decided from its header byte and ID."""
    START = 'START'
    CONTINUATION = 'CONT'
    HEARTBEAT = 'HEARTBEAT'
    UNACCOUNTED = 'DATA'


@dataclass(frozen=True)
class ClassifiedFrame:
    """A RawFrame plus classification metadata.

    Attributes:
        frame: The frame as read from the capture
        header: First data byte (payload[0])
        kind: Frame role
        sequence: Ingestion order within one source; breaks timestamp ties
        timestamp: Resolved timestamp in seconds (0.0 when the capture has none)
    """
    frame: RawFrame
    header: int
    kind: FrameKind
    sequence: int
    timestamp: float = 0.0

    @property
    def can_id(self) -> str:
        return self.frame.can_id

    @property
    def data(self) -> bytes:
        return self.frame.data

    @property
    def payload(self) -> bytes:
        """Frame data with the header byte stripped."""
        return self.frame.data[1:]

    @property
    def payload_hex(self) -> str:
        return self.payload.hex().upper()

    @property
    def is_cbor(self) -> bool:
        return self.kind in (FrameKind.START, FrameKind.CONTINUATION)

    @property
    def is_heartbeat(self) -> bool:
        return self.kind is FrameKind.HEARTBEAT

    @property
    def is_accounted(self) -> bool:
        return self.is_cbor or self.is_heartbeat

    @property
    def label(self) -> str:
        """Short tag used in frame listings; header 0x00 data frames show as ZERO."""
        if self.kind is FrameKind.UNACCOUNTED and self.header == 0x00:
            return 'ZERO'
        return self.kind.value
