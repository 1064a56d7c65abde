from .interface import CaptureReader, RawFrame
from .savvycan import SavvyCanReader
from .candump import CandumpReader
from .python_can_reader import PythonCanLogReader
from .loader import detect_format, iter_text_frames, read_capture

__all__ = [
    "CaptureReader",
    "RawFrame",
    "SavvyCanReader",
    "CandumpReader",
    "PythonCanLogReader",
    "detect_format",
    "iter_text_frames",
    "read_capture",
]
