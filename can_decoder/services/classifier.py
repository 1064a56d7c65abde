"""
Frame classification and heartbeat detection.

The high nibble of the header byte (payload[0]) carries the frame role:
Ax opens a CBOR message, 1x continues it. Everything else is either a
recognized heartbeat or an unaccounted frame.
"""
import logging
from typing import Iterable, Iterator, Optional, Tuple

from capture import metrics
from capture.readers.interface import RawFrame
from can_decoder.constants import (
    HEADER_NIBBLE_MASK, HEADER_START, HEADER_CONTINUATION, HEARTBEAT_ID_PREFIX,
)
from can_decoder.exceptions import FrameClassificationError
from can_decoder.models.classified_frame import ClassifiedFrame, FrameKind

logger = logging.getLogger(__name__)


def is_heartbeat(can_id: str, data: bytes, prefix: str = HEARTBEAT_ID_PREFIX) -> bool:
    """Return True if the frame is a keep-alive: ID text starts with prefix and every byte is zero.

    An empty payload counts as all-zero.
    """
    if not can_id.startswith(prefix):
        return False
    return all(b == 0 for b in data)


def classify(frame: RawFrame, heartbeat_prefix: str = HEARTBEAT_ID_PREFIX) -> Tuple[FrameKind, int]:
    """Classify a frame; first matching rule wins.

    Returns:
        (kind, header byte)

    Raises:
        FrameClassificationError: If the frame has no data (no header byte)
    """
    if not frame.data:
        raise FrameClassificationError(f"Frame 0x{frame.can_id} has no header byte", can_id=frame.can_id)

    header = frame.data[0]
    nibble = header & HEADER_NIBBLE_MASK
    if nibble == HEADER_START:
        return FrameKind.START, header
    if nibble == HEADER_CONTINUATION:
        return FrameKind.CONTINUATION, header
    if is_heartbeat(frame.can_id, frame.data, heartbeat_prefix):
        return FrameKind.HEARTBEAT, header
    return FrameKind.UNACCOUNTED, header


class FrameClassifier:
    """Turns one source's RawFrames into ClassifiedFrames in capture order.

    Each source gets its own classifier so sequence numbers are unique and
    strictly increasing within that source only.

    Attributes:
        heartbeat_prefix: CAN ID text prefix of keep-alive frames
        frames_skipped: Frames dropped because they had no data
    """

    def __init__(self, heartbeat_prefix: str = HEARTBEAT_ID_PREFIX):
        self.heartbeat_prefix = heartbeat_prefix
        self.frames_skipped = 0
        self._next_sequence = 0

    def classify_frame(self, frame: RawFrame) -> Optional[ClassifiedFrame]:
        """Classify one frame, or return None if it carries no data."""
        if not frame.data:
            self.frames_skipped += 1
            metrics.inc("frames_empty")
            logger.debug(f"Skipping empty frame 0x{frame.can_id}")
            return None

        kind, header = classify(frame, self.heartbeat_prefix)
        classified = ClassifiedFrame(
            frame=frame,
            header=header,
            kind=kind,
            sequence=self._next_sequence,
            timestamp=frame.timestamp if frame.timestamp is not None else 0.0,
        )
        self._next_sequence += 1
        metrics.inc("frames_classified")
        return classified

    def classify_all(self, frames: Iterable[RawFrame]) -> Iterator[ClassifiedFrame]:
        for frame in frames:
            classified = self.classify_frame(frame)
            if classified is not None:
                yield classified
