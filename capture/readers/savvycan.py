"""Reader for SavvyCAN CSV exports.

Line format::

    Time Stamp,ID,Extended,Dir,Bus,LEN,D1,D2,D3,D4,D5,D6,D7,D8

The timestamp column is written in microseconds; it is converted to seconds
here so the decoder only ever sees seconds.
"""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from capture import metrics
from .interface import RawFrame, CAN_FRAME_MAX_LENGTH
from .regex_patterns import REGEX_SAVVYCAN_HEADER

logger = logging.getLogger(__name__)

SAVVYCAN_FIELD_COUNT = 14
SAVVYCAN_TIMESTAMP_SCALE = 1e-6  # microseconds -> seconds


class SavvyCanReader:
    """Parse SavvyCAN CSV lines into RawFrame records.

    Example:
      r = SavvyCanReader()
      frames = list(r.iter_frames(open('capture.csv')))
    """

    def __init__(self, timestamp_scale: float = SAVVYCAN_TIMESTAMP_SCALE):
        self.timestamp_scale = timestamp_scale

    @staticmethod
    def is_header(line: str) -> bool:
        return bool(REGEX_SAVVYCAN_HEADER.search(line))

    def parse_line(self, line: str) -> Optional[RawFrame]:
        fields = [f.strip() for f in line.rstrip('\r\n').split(',')]
        if len(fields) < SAVVYCAN_FIELD_COUNT:
            logger.debug(f"SavvyCAN line skipped: got {len(fields)} fields, need {SAVVYCAN_FIELD_COUNT}")
            return None

        try:
            length = int(fields[5])
        except ValueError:
            logger.debug(f"SavvyCAN line skipped: invalid length {fields[5]!r}")
            return None

        try:
            bus = int(fields[4])
        except ValueError:
            bus = 0

        data = bytearray()
        for i in range(min(length, CAN_FRAME_MAX_LENGTH)):
            cell = fields[6 + i]
            if not cell:
                continue
            try:
                value = int(cell, 16)
            except ValueError:
                continue
            if not 0 <= value <= 0xFF:
                continue
            data.append(value)

        return RawFrame(
            can_id=fields[1],
            data=bytes(data),
            is_extended=fields[2].lower() == 'true',
            bus=bus,
            length=length,
            timestamp=self._parse_timestamp(fields[0]),
            direction=fields[3] or None,
        )

    def _parse_timestamp(self, text: str) -> Optional[float]:
        try:
            return float(text) * self.timestamp_scale
        except ValueError:
            return None

    def iter_frames(self, lines: Iterable[str]) -> Iterator[RawFrame]:
        for line in lines:
            if not line.strip() or self.is_header(line):
                continue
            frame = self.parse_line(line)
            if frame is None:
                metrics.inc("lines_skipped")
                continue
            metrics.inc("lines_parsed")
            yield frame
