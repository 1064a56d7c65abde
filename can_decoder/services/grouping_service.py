"""
Grouping index: classified frames grouped by CAN ID, ordered by time.
"""
import logging
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from can_decoder.models.classified_frame import ClassifiedFrame

logger = logging.getLogger(__name__)


class FrameView(Enum):
    """Which frames a grouped listing shows."""
    ALL = 'all'
    ACCOUNTED_ONLY = 'accounted'
    UNACCOUNTED_ONLY = 'unaccounted'

    @classmethod
    def from_flags(cls, hide_accounted: bool = False, hide_unaccounted: bool = False) -> 'FrameView':
        """Map the CLI's hide flags to a view.

        Raises:
            ValueError: If both flags are set
        """
        if hide_accounted and hide_unaccounted:
            raise ValueError("hide_accounted and hide_unaccounted are mutually exclusive")
        if hide_accounted:
            return cls.UNACCOUNTED_ONLY
        if hide_unaccounted:
            return cls.ACCOUNTED_ONLY
        return cls.ALL

    def includes(self, frame: ClassifiedFrame) -> bool:
        if self is FrameView.ACCOUNTED_ONLY:
            return frame.is_accounted
        if self is FrameView.UNACCOUNTED_ONLY:
            return not frame.is_accounted
        return True


def frame_order_key(frame: ClassifiedFrame) -> Tuple[float, int]:
    """Timestamp first; equal timestamps keep capture order via the sequence number."""
    return (frame.timestamp, frame.sequence)


def group_frames(frames: Iterable[ClassifiedFrame],
                 view: FrameView = FrameView.ALL) -> List[Tuple[str, List[ClassifiedFrame]]]:
    """Group frames by CAN ID text.

    Args:
        frames: Classified frames of one source
        view: Filter applied inside each group

    Returns:
        (can_id, frames) pairs sorted by CAN ID; frames sorted by
        (timestamp, sequence). Groups left empty by the view are omitted.
    """
    grouped: Dict[str, List[ClassifiedFrame]] = {}
    for frame in frames:
        grouped.setdefault(frame.can_id, []).append(frame)

    result = []
    for can_id in sorted(grouped):
        members = sorted(grouped[can_id], key=frame_order_key)
        visible = [f for f in members if view.includes(f)]
        if not visible:
            continue
        result.append((can_id, visible))

    logger.debug(f"Grouped {sum(len(v) for _, v in result)} frames into {len(result)} CAN IDs (view={view.value})")
    return result
