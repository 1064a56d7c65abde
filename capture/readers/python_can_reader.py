from __future__ import annotations
import logging
from typing import Iterator, Optional

try:
    import can
except Exception:
    can = None

from capture import metrics
from .interface import RawFrame, CAN_FRAME_MAX_LENGTH

logger = logging.getLogger(__name__)

# Formats only python-can knows how to read. .csv and .log stay with the text
# readers because their layouts differ from python-can's own CSV/candump-l.
PYTHON_CAN_SUFFIXES = ('.asc', '.blf', '.trc', '.mf4', '.db')


def format_can_id(arbitration_id: int, is_extended: bool) -> str:
    """Render an identifier the way candump writes it (8 or 3 hex digits)."""
    return f"{arbitration_id:08X}" if is_extended else f"{arbitration_id:03X}"


class PythonCanLogReader:
    """Wrapper around python-can's LogReader that yields RawFrame records.

    python-can hands back integer arbitration IDs, so the text identifier is
    rebuilt in candump width. Error frames, remote frames and CAN FD frames
    longer than 8 bytes carry nothing the decoder can use and are skipped.

    Example:
      r = PythonCanLogReader('drive.asc')
      frames = list(r.iter_frames())
    """

    def __init__(self, path: str):
        self.path = path

    def to_raw_frame(self, msg) -> Optional[RawFrame]:
        if getattr(msg, 'is_error_frame', False) or getattr(msg, 'is_remote_frame', False):
            return None
        data = bytes(msg.data or b'')
        if len(data) > CAN_FRAME_MAX_LENGTH:
            logger.debug(f"Skipping {len(data)}-byte frame 0x{msg.arbitration_id:X} from {self.path}")
            return None
        channel = getattr(msg, 'channel', None)
        bus = channel if isinstance(channel, int) else 0
        is_rx = getattr(msg, 'is_rx', True)
        return RawFrame(
            can_id=format_can_id(msg.arbitration_id, msg.is_extended_id),
            data=data,
            is_extended=bool(msg.is_extended_id),
            bus=bus,
            length=getattr(msg, 'dlc', len(data)),
            timestamp=getattr(msg, 'timestamp', None),
            direction='Rx' if is_rx else 'Tx',
            channel=None if channel is None else str(channel),
        )

    def iter_frames(self) -> Iterator[RawFrame]:
        if can is None:
            raise RuntimeError('python-can library not available')
        for msg in can.LogReader(self.path):
            frame = self.to_raw_frame(msg)
            if frame is None:
                metrics.inc("lines_skipped")
                continue
            metrics.inc("lines_parsed")
            yield frame
