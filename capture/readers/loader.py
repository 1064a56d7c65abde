"""
Capture loading with format autodetection.

Text captures may be SavvyCAN CSV or candump dumps; the format is decided from
the first line (a SavvyCAN header or a ``#`` separator) and, failing that, per
line: a comma-separated line without ``#`` is CSV, and once a CSV line has
been seen the rest of the capture is read as CSV. Binary and vendor formats
are handed to python-can.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, List

from capture import metrics
from .interface import RawFrame
from .savvycan import SavvyCanReader, SAVVYCAN_TIMESTAMP_SCALE
from .candump import CandumpReader
from .python_can_reader import PythonCanLogReader, PYTHON_CAN_SUFFIXES

logger = logging.getLogger(__name__)

FORMAT_CSV = 'csv'
FORMAT_CANDUMP = 'candump'
FORMAT_PYTHON_CAN = 'python-can'
FORMAT_UNKNOWN = 'unknown'


def detect_format(first_line: str) -> str:
    """Guess the text capture format from its first line."""
    if SavvyCanReader.is_header(first_line):
        return FORMAT_CSV
    if '#' in first_line:
        return FORMAT_CANDUMP
    if ',' in first_line:
        return FORMAT_CSV
    return FORMAT_UNKNOWN


def iter_text_frames(lines: Iterable[str], timestamp_scale: float = SAVVYCAN_TIMESTAMP_SCALE) -> Iterator[RawFrame]:
    """Yield RawFrames from SavvyCAN/candump text lines in capture order."""
    csv_reader = SavvyCanReader(timestamp_scale=timestamp_scale)
    candump_reader = CandumpReader()
    is_csv = False
    first = True

    for line in lines:
        if not line.strip():
            continue
        if first:
            first = False
            fmt = detect_format(line)
            logger.info(f"Detected {fmt} format")
            if SavvyCanReader.is_header(line):
                is_csv = True
                continue

        if is_csv or (',' in line and '#' not in line):
            is_csv = True
            frame = csv_reader.parse_line(line)
        else:
            frame = candump_reader.parse_line(line)

        if frame is None:
            metrics.inc("lines_skipped")
            continue
        metrics.inc("lines_parsed")
        yield frame


def read_capture(path: str, timestamp_scale: float = SAVVYCAN_TIMESTAMP_SCALE) -> List[RawFrame]:
    """Read a whole capture file into memory.

    Raises:
        OSError: if the file cannot be opened
        ValueError: if python-can cannot parse a binary or vendor log
    """
    if path.lower().endswith(PYTHON_CAN_SUFFIXES):
        logger.info(f"Reading {os.path.basename(path)} with python-can")
        try:
            return list(PythonCanLogReader(path).iter_frames())
        except (OSError, RuntimeError):
            raise
        except Exception as e:
            # python-can format readers raise their own parse errors (BLFParseError, struct.error, ...)
            raise ValueError(f"python-can could not parse {path}: {e}") from e

    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return list(iter_text_frames(f, timestamp_scale=timestamp_scale))
