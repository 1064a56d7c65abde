"""
Capture Service: runs one capture source through classification and reassembly.

Each source gets its own FrameClassifier and ReassemblyEngine, so several
sources can be processed on worker threads without sharing mutable state.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from capture.readers import RawFrame, read_capture
from can_decoder.config import DecoderSettings
from can_decoder.exceptions import CaptureReadError
from can_decoder.models.classified_frame import ClassifiedFrame, FrameKind
from can_decoder.models.message import DecodedMessage, Diagnostic
from can_decoder.services.classifier import FrameClassifier
from can_decoder.services.reassembly_service import ReassemblyEngine

logger = logging.getLogger(__name__)

# Called for every classified frame with the frame and what absorbing it produced
FrameCallback = Callable[[ClassifiedFrame, Optional[DecodedMessage], List[Diagnostic]], None]


@dataclass
class CaptureResult:
    """Everything recovered from one capture source.

    Attributes:
        source: Capture name (file path or '<stdin>')
        frames: Classified frames in capture order
        messages: Decoded CBOR messages in completion order
        diagnostics: Reassembly diagnostics in the order they occurred
        frames_skipped: Frames dropped for having no data
        readable: False if the capture could not be read at all
        error: Read error text when readable is False
    """
    source: str
    frames: List[ClassifiedFrame] = field(default_factory=list)
    messages: List[DecodedMessage] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    frames_skipped: int = 0
    readable: bool = True
    error: Optional[str] = None

    def count(self, kind: FrameKind) -> int:
        return sum(1 for f in self.frames if f.kind is kind)

    @property
    def counts_by_kind(self) -> Dict[FrameKind, int]:
        return {kind: self.count(kind) for kind in FrameKind}

    @property
    def unaccounted_count(self) -> int:
        return self.count(FrameKind.UNACCOUNTED)

    @property
    def duration_ms(self) -> float:
        """Time between the first and last timestamped frame, in milliseconds."""
        stamps = [f.frame.timestamp for f in self.frames if f.frame.timestamp is not None]
        if len(stamps) < 2:
            return 0.0
        return (max(stamps) - min(stamps)) * 1000.0


class CaptureService:
    """Service for turning capture sources into CaptureResults.

    Attributes:
        settings: Decoder settings (heartbeat prefix, decode policy, timestamp scale)
    """

    def __init__(self, settings: Optional[DecoderSettings] = None):
        self.settings = settings or DecoderSettings()

    def process(self, source: str, raw_frames: Iterable[RawFrame],
                on_frame: Optional[FrameCallback] = None) -> CaptureResult:
        """Classify and reassemble one source's frames in capture order.

        Args:
            source: Capture name
            raw_frames: Frames in capture order
            on_frame: Optional callback for streaming output

        Returns:
            CaptureResult for the source
        """
        classifier = FrameClassifier(heartbeat_prefix=self.settings.heartbeat_id_prefix)
        engine = ReassemblyEngine(lenient_decode=self.settings.lenient_decode)
        result = CaptureResult(source=source)

        for frame in classifier.classify_all(raw_frames):
            result.frames.append(frame)
            step = engine.absorb(frame)
            if step.message is not None:
                result.messages.append(step.message)
            result.diagnostics.extend(step.diagnostics)
            if on_frame is not None:
                on_frame(frame, step.message, step.diagnostics)

        result.diagnostics.extend(engine.flush())
        result.frames_skipped = classifier.frames_skipped
        logger.info(f"{source}: {len(result.frames)} frames, {len(result.messages)} messages, "
                    f"{len(result.diagnostics)} diagnostics")
        return result

    def load(self, path: str, on_frame: Optional[FrameCallback] = None) -> CaptureResult:
        """Read and process a capture file.

        Raises:
            CaptureReadError: If the file cannot be read
        """
        try:
            raw_frames = read_capture(path, timestamp_scale=self.settings.savvycan_timestamp_scale)
        except (OSError, ValueError, RuntimeError) as e:
            raise CaptureReadError(f"Cannot read capture {path}: {e}", path=path, original_error=e) from e
        return self.process(path, raw_frames, on_frame=on_frame)

    def load_or_empty(self, path: str) -> CaptureResult:
        """Like load(), but an unreadable capture becomes an empty result."""
        try:
            return self.load(path)
        except CaptureReadError as e:
            logger.error(str(e))
            return CaptureResult(source=path, readable=False, error=str(e))

    def load_many(self, paths: Sequence[str], max_workers: int = 1) -> Dict[str, CaptureResult]:
        """Load several captures, one worker per file; unreadable files yield empty results."""
        if max_workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(self.load_or_empty, paths))
        else:
            results = [self.load_or_empty(p) for p in paths]
        return {source_name(r.source, paths): r for r in results}


def source_name(path: str, all_paths: Sequence[str]) -> str:
    """Short display name: the basename, unless two captures share it."""
    base = os.path.basename(path)
    if sum(1 for p in all_paths if os.path.basename(p) == base) > 1:
        return path
    return base
