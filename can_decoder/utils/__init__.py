"""
Utility modules for rendering decoder output.

This package contains:
- formatting: Frame lines, decoded value pretty printer, durations
- annotations: Hand-written notes for known CAN IDs
- reports: Report renderers for decode, grouped and compare modes
"""

from can_decoder.utils.formatting import format_value, format_frame_line, format_duration
from can_decoder.utils.annotations import annotate_frame

__all__ = [
    'format_value',
    'format_frame_line',
    'format_duration',
    'annotate_frame',
]
