from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Iterable, Iterator, Protocol

CAN_FRAME_MAX_LENGTH = 8


@dataclass(frozen=True)
class RawFrame:
    """One bus frame as read from a capture file.

    The CAN identifier is kept as the text the capture wrote, because formats
    differ in radix and width and the comparison keys must reproduce it exactly.

    Attributes:
        can_id: CAN identifier text (e.g. '01111ABC', '18209820', '100')
        data: Frame data bytes (0-8 bytes, header byte first)
        is_extended: True for 29-bit identifiers
        bus: Bus/interface number reported by the capture
        length: DLC as written in the capture
        timestamp: Seconds (fractional), already converted from the capture's unit
        direction: Rx/Tx marker where the capture records one
        channel: Interface name (e.g. 'can0') where the capture records one
    """
    can_id: str
    data: bytes
    is_extended: bool = False
    bus: int = 0
    length: int = 0
    timestamp: Optional[float] = None
    direction: Optional[str] = None
    channel: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            raise TypeError(f"data must be bytes, got {type(self.data)}")
        if len(self.data) > CAN_FRAME_MAX_LENGTH:
            raise ValueError(f"CAN data length must be <= {CAN_FRAME_MAX_LENGTH} bytes, got {len(self.data)}")

    @property
    def data_hex(self) -> str:
        return self.data.hex().upper()


class CaptureReader(Protocol):
    """Interface that all capture readers implement."""

    def parse_line(self, line: str) -> Optional[RawFrame]:
        """Parse a single line, or None if the line is not a frame."""
        ...

    def iter_frames(self, lines: Iterable[str]) -> Iterator[RawFrame]:
        """Yield frames from an iterable of lines, skipping unparsable ones."""
        ...
