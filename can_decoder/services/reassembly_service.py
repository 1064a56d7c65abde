"""
Reassembly engine for multi-frame CBOR messages.

One engine owns the state of one capture source. START frames open a message
(discarding any unfinished one), CONTINUATION frames append to it, and after
every absorbed frame the engine makes exactly one decode attempt on the
buffer. Heartbeat and unaccounted frames never touch the state.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from capture import metrics
from can_decoder.exceptions import PayloadIncompleteError, PayloadMalformedError
from can_decoder.models.classified_frame import ClassifiedFrame, FrameKind
from can_decoder.models.message import Message, DecodedMessage, Diagnostic, DiagnosticKind
from can_decoder.services.payload_codec import decode_prefix

logger = logging.getLogger(__name__)


@dataclass
class ReassemblyResult:
    """What absorbing one frame produced.

    Attributes:
        message: Decoded message completed by this frame, if any
        diagnostics: Conditions raised while absorbing this frame
    """
    message: Optional[DecodedMessage] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)


class ReassemblyEngine:
    """Accumulates CBOR payload bytes across frames and decodes complete messages.

    Attributes:
        lenient_decode: If True, malformed buffers are kept and buffered like
                        incomplete ones; otherwise they are dropped and reported
        current: Message being reassembled (None when idle)
    """

    def __init__(self, lenient_decode: bool = False, decoder=decode_prefix):
        """Initialize the engine.

        Args:
            lenient_decode: Keep buffering on malformed CBOR instead of dropping
            decoder: Callable(buffer) -> (value, consumed); defaults to the CBOR codec
        """
        self.lenient_decode = lenient_decode
        self._decode = decoder
        self.current: Optional[Message] = None

    @property
    def buffer(self) -> bytes:
        return bytes(self.current.buffer) if self.current is not None else b''

    @property
    def is_accumulating(self) -> bool:
        return self.current is not None and len(self.current.buffer) > 0

    def reset(self) -> None:
        self.current = None

    def absorb(self, frame: ClassifiedFrame) -> ReassemblyResult:
        """Feed one classified frame to the engine.

        Args:
            frame: Next frame of the source, in capture order

        Returns:
            ReassemblyResult with the decoded message (if the frame completed one)
            and any diagnostics
        """
        result = ReassemblyResult()
        if frame.kind is FrameKind.START:
            self._start(frame, result)
        elif frame.kind is FrameKind.CONTINUATION:
            self._continue(frame, result)
        else:
            return result

        if self.current is not None and self.current.buffer:
            self._try_decode(frame, result)
        return result

    def _start(self, frame: ClassifiedFrame, result: ReassemblyResult) -> None:
        if self.is_accumulating:
            discarded = bytes(self.current.buffer)
            diag = Diagnostic(
                kind=DiagnosticKind.DISCARDED_INCOMPLETE,
                can_id=self.current.can_id,
                sequence=frame.sequence,
                byte_count=len(discarded),
                data=discarded,
            )
            logger.warning(diag.describe())
            metrics.inc("buffers_discarded")
            result.diagnostics.append(diag)

        self.current = Message(can_id=frame.can_id)
        self.current.absorb(frame.payload)
        logger.debug(f"New message on 0x{frame.can_id}, buffer: {self.current.buffer_hex}")

    def _continue(self, frame: ClassifiedFrame, result: ReassemblyResult) -> None:
        if self.current is None:
            diag = Diagnostic(
                kind=DiagnosticKind.ORPHAN_CONTINUATION,
                can_id=frame.can_id,
                sequence=frame.sequence,
            )
            logger.warning(diag.describe())
            metrics.inc("orphan_continuations")
            result.diagnostics.append(diag)
            self.current = Message(can_id=frame.can_id)

        self.current.absorb(frame.payload)
        logger.debug(f"Frame {self.current.frame_count} appended, buffer now: "
                     f"{self.current.buffer_hex} ({len(self.current.buffer)} bytes)")

    def _try_decode(self, frame: ClassifiedFrame, result: ReassemblyResult) -> None:
        message = self.current
        try:
            value, consumed = self._decode(bytes(message.buffer))
        except PayloadIncompleteError:
            return
        except PayloadMalformedError as e:
            if self.lenient_decode:
                logger.debug(f"Malformed buffer on 0x{message.can_id} kept (lenient): {e}")
                return
            dropped = bytes(message.buffer)
            diag = Diagnostic(
                kind=DiagnosticKind.MALFORMED_PAYLOAD,
                can_id=message.can_id,
                sequence=frame.sequence,
                byte_count=len(dropped),
                data=dropped,
                detail=str(e),
            )
            logger.warning(diag.describe())
            metrics.inc("payloads_malformed")
            result.diagnostics.append(diag)
            self.current = None
            return

        raw = bytes(message.buffer[:consumed])
        result.message = DecodedMessage(
            can_id=message.can_id,
            frame_count=message.frame_count,
            raw_bytes=raw,
            value=value,
            sequence=frame.sequence,
        )
        metrics.inc("messages_decoded")
        logger.info(f"Decoded CBOR message on 0x{message.can_id} ({message.frame_count} frames, {consumed} bytes)")

        remainder = message.buffer[consumed:]
        if remainder:
            # the tail arrived in this frame and opens the next message
            self.current = Message(can_id=message.can_id, buffer=bytearray(remainder), frame_count=1)
        else:
            self.current = None

    def flush(self) -> List[Diagnostic]:
        """End of stream: report and clear any unfinished buffer."""
        diagnostics = []
        if self.is_accumulating:
            leftover = bytes(self.current.buffer)
            diag = Diagnostic(
                kind=DiagnosticKind.TRAILING_INCOMPLETE,
                can_id=self.current.can_id,
                byte_count=len(leftover),
                data=leftover,
            )
            logger.info(diag.describe())
            diagnostics.append(diag)
        self.current = None
        return diagnostics
