"""
Hand-written notes for a few CAN IDs seen in captures.

These are guesses made while reverse-engineering, not decoding logic; they
only decorate verbose frame listings.
"""
from typing import List

from can_decoder.constants import CAN_ID_TELEMETRY, CAN_ID_STATUS
from can_decoder.models.classified_frame import ClassifiedFrame


def annotate_frame(frame: ClassifiedFrame) -> List[str]:
    """Return annotation lines for a non-CBOR frame (empty if nothing is known)."""
    if frame.is_cbor:
        return []
    data = frame.data
    if frame.is_heartbeat:
        return ["Heartbeat/Keep-alive (all zeros)"]
    if frame.can_id == CAN_ID_TELEMETRY and len(data) >= 4:
        return ["Telemetry? Bytes[0:4]: " + ' '.join(f"{b:02X}" for b in data[:4])]
    if frame.can_id == CAN_ID_STATUS:
        return [f"Status byte: {data[0]:02X}"]
    return []
