"""
Report renderers for the three CLI modes: streaming decode, grouped-by-ID and
cross-capture comparison.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from can_decoder.constants import SEPARATOR_WIDE, SEPARATOR_GROUP, SEPARATOR_COMPARE
from can_decoder.models.classified_frame import ClassifiedFrame, FrameKind
from can_decoder.models.message import DecodedMessage, Diagnostic
from can_decoder.services.capture_service import CaptureResult
from can_decoder.services.comparison_service import ComparisonReport
from can_decoder.utils.annotations import annotate_frame
from can_decoder.utils.formatting import (
    format_value, format_frame_line, format_timestamp, format_duration,
)


def render_banner() -> List[str]:
    return [
        "CAN CBOR Decoder",
        "Supports: CSV format (SavvyCAN), candump format, python-can log formats",
        "Protocol: Ax = Start Frame, 1x = Continuation",
        SEPARATOR_WIDE,
    ]


def render_message(message: DecodedMessage) -> List[str]:
    lines = [
        "",
        SEPARATOR_WIDE,
        f"COMPLETE CBOR MESSAGE (CAN ID: 0x{message.can_id}, {message.frame_count} frames, "
        f"{len(message.raw_bytes)} bytes)",
        f"Raw CBOR: {message.raw_hex}",
        SEPARATOR_WIDE.replace('=', '-'),
    ]
    lines.extend(format_value(message.value))
    lines.append(SEPARATOR_WIDE)
    return lines


def render_frame_event(frame: ClassifiedFrame, message: Optional[DecodedMessage],
                       diagnostics: Sequence[Diagnostic],
                       verbose: bool = False, show_frames: bool = True) -> List[str]:
    """Lines printed while streaming one frame through the engine."""
    lines = []
    if show_frames:
        lines.append(format_frame_line(frame))
    for diag in diagnostics:
        lines.append(f"   ! {diag.describe()}")
    if show_frames and verbose:
        if frame.kind is FrameKind.START:
            lines.append(f"   New message started: {frame.payload_hex}")
        elif frame.kind is FrameKind.CONTINUATION:
            lines.append(f"   Appended {len(frame.payload)} bytes: {frame.payload_hex}")
        for note in annotate_frame(frame):
            lines.append(f"   {note}")
    if message is not None:
        lines.extend(render_message(message))
    return lines


def render_grouped(groups: List[Tuple[str, List[ClassifiedFrame]]]) -> List[str]:
    lines = ["", SEPARATOR_WIDE, "FRAMES GROUPED BY CAN ID", SEPARATOR_WIDE]
    for can_id, frames in groups:
        lines.append("")
        lines.append(f"CAN ID: 0x{can_id} ({len(frames)} frames)")
        lines.append(SEPARATOR_GROUP)
        for f in frames:
            lines.append(f"  [{format_timestamp(f.timestamp)} #{f.sequence}] {format_frame_line(f)}")
    lines.extend(["", SEPARATOR_WIDE])
    return lines


def render_capture_summary(result: CaptureResult) -> List[str]:
    counts = result.counts_by_kind
    lines = [
        "",
        f"Summary for {result.source}:",
        f"   Frames: {len(result.frames)} (skipped empty: {result.frames_skipped})",
        f"   START: {counts[FrameKind.START]}  CONT: {counts[FrameKind.CONTINUATION]}  "
        f"HEARTBEAT: {counts[FrameKind.HEARTBEAT]}  UNACCOUNTED: {counts[FrameKind.UNACCOUNTED]}",
        f"   CBOR messages decoded: {len(result.messages)}",
        f"   Diagnostics: {len(result.diagnostics)}",
        f"   Capture duration: {format_duration(result.duration_ms)}",
    ]
    return lines


def render_metrics(counters: Dict[str, int]) -> List[str]:
    lines = ["", "Counters:"]
    for name in sorted(counters):
        lines.append(f"   {name}: {counters[name]}")
    return lines


def render_comparison(report: ComparisonReport, unreadable: Sequence[str] = ()) -> List[str]:
    lines = ["", SEPARATOR_WIDE, "UNACCOUNTED FRAMES COMPARISON", SEPARATOR_WIDE, "Files analyzed:"]
    for i, summary in enumerate(report.summaries, start=1):
        note = " [unreadable]" if summary.source in unreadable else ""
        lines.append(f"  [{i}] {summary.source} ({summary.unaccounted_frames} unaccounted / "
                     f"{summary.total_frames} total frames, {summary.unaccounted_ratio:.1%}){note}")

    if report.common:
        lines.append("")
        lines.append(f"Frames Common to ALL Files ({len(report.common)} patterns):")
        lines.append(SEPARATOR_COMPARE)
        for p in report.common:
            counts = ', '.join(str(p.occurrences.get(s, 0)) for s in report.sources)
            lines.append(f"  {p}")
            lines.append(f"    Occurrences: [{counts}]")

    for source in report.sources:
        patterns = report.unique.get(source, [])
        if not patterns:
            continue
        lines.append("")
        lines.append(f"Frames UNIQUE to {source} ({len(patterns)} patterns):")
        lines.append(SEPARATOR_COMPARE)
        for p in patterns:
            lines.append(f"  {p} (count: {p.occurrences[source]})")

    if report.partial:
        lines.append("")
        lines.append(f"Frames in SOME Files ({len(report.partial)} patterns):")
        lines.append(SEPARATOR_COMPARE)
        for p in report.partial:
            present = ', '.join(f"[{i}]:{p.occurrences[s]}"
                                for i, s in enumerate(report.sources, start=1) if s in p.occurrences)
            lines.append(f"  {p}")
            lines.append(f"    Present in: {present}")

    lines.extend([
        "",
        SEPARATOR_WIDE,
        "Summary:",
        f"   Total unique patterns: {report.total_patterns}",
        f"   Common to all files: {report.common_count}",
        f"   Unique to one file: {report.unique_count}",
        f"   In some files: {report.partial_count}",
        SEPARATOR_WIDE,
    ])
    return lines
