"""
Service layer for the CAN CBOR decoder.

Services:
- classifier: Frame classification and heartbeat detection
- ReassemblyEngine: Multi-frame CBOR reassembly state machine
- grouping_service: Frames grouped by CAN ID in time order
- comparison_service: Unaccounted pattern comparison across captures
- CaptureService: Runs a capture source through classification and reassembly
"""

from can_decoder.services.classifier import FrameClassifier, classify, is_heartbeat
from can_decoder.services.reassembly_service import ReassemblyEngine, ReassemblyResult
from can_decoder.services.grouping_service import FrameView, group_frames
from can_decoder.services.comparison_service import ComparisonReport, compare_sources
from can_decoder.services.capture_service import CaptureService, CaptureResult

__all__ = [
    'FrameClassifier', 'classify', 'is_heartbeat',
    'ReassemblyEngine', 'ReassemblyResult',
    'FrameView', 'group_frames',
    'ComparisonReport', 'compare_sources',
    'CaptureService', 'CaptureResult',
]
