"""Reader for candump-style single line dumps.

Accepted forms::

    (1699999999.123456) can0 18209820#A2010203
    can0 123#00 11 22
    123#0011

The identifier is kept exactly as written before the ``#``.
"""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from capture import metrics
from .interface import RawFrame, CAN_FRAME_MAX_LENGTH
from .regex_patterns import REGEX_CANDUMP_TIMESTAMP, REGEX_HEX_WHITESPACE

logger = logging.getLogger(__name__)

# candump writes 3 hex digits for standard IDs and 8 for extended ones
STANDARD_ID_WIDTH = 3


class CandumpReader:
    """Parse candump lines into RawFrame records."""

    def parse_line(self, line: str) -> Optional[RawFrame]:
        idx_hash = line.find('#')
        if idx_hash == -1:
            logger.debug("candump line skipped: no '#' separator")
            return None

        id_part = line[:idx_hash].strip()
        timestamp = None
        ts_match = REGEX_CANDUMP_TIMESTAMP.search(id_part)
        if ts_match:
            try:
                timestamp = float(ts_match.group(1))
            except ValueError:
                timestamp = None

        # drop "(timestamp)" and keep "iface ID"
        close = id_part.rfind(')')
        if close != -1:
            id_part = id_part[close + 1:].strip()

        channel = None
        if ' ' in id_part:
            channel, id_part = id_part.rsplit(' ', 1)
            channel = channel.strip() or None
        can_id = id_part.strip()
        if not can_id:
            logger.debug("candump line skipped: empty CAN ID")
            return None

        payload_hex = REGEX_HEX_WHITESPACE.sub('', line[idx_hash + 1:])
        try:
            data = bytes.fromhex(payload_hex)
        except ValueError as e:
            logger.debug(f"candump line skipped: invalid payload hex {payload_hex!r}: {e}")
            return None
        if len(data) > CAN_FRAME_MAX_LENGTH:
            logger.debug(f"candump line skipped: {len(data)} data bytes")
            return None

        return RawFrame(
            can_id=can_id,
            data=data,
            is_extended=len(can_id) > STANDARD_ID_WIDTH,
            length=len(data),
            timestamp=timestamp,
            channel=channel,
        )

    def iter_frames(self, lines: Iterable[str]) -> Iterator[RawFrame]:
        for line in lines:
            if not line.strip():
                continue
            frame = self.parse_line(line)
            if frame is None:
                metrics.inc("lines_skipped")
                continue
            metrics.inc("lines_parsed")
            yield frame
