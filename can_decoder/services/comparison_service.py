"""
Comparison engine for unaccounted frames across several captures.

Each source is folded into its own pattern map (pattern key -> occurrences in
that source); the maps are then merged. Occurrence counts only ever add, so the
merge is commutative and associative and the result does not depend on the
order sources are processed in or on whether they are folded in parallel.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from can_decoder.models.classified_frame import ClassifiedFrame
from can_decoder.models.pattern import UnaccountedPattern, PatternKey

logger = logging.getLogger(__name__)

PatternMap = Dict[PatternKey, UnaccountedPattern]


@dataclass(frozen=True)
class SourceSummary:
    """Per-source triage numbers.

    Attributes:
        source: Capture name
        total_frames: Classified frames in the source
        unaccounted_frames: Frames that were neither CBOR nor heartbeat
    """
    source: str
    total_frames: int
    unaccounted_frames: int

    @property
    def unaccounted_ratio(self) -> float:
        if self.total_frames == 0:
            return 0.0
        return self.unaccounted_frames / self.total_frames


@dataclass
class ComparisonReport:
    """Categorized unaccounted patterns.

    Attributes:
        sources: Source names, sorted
        summaries: Per-source frame counts, same order as sources
        common: Patterns seen in every source
        unique: source -> patterns seen only in that source
        partial: Patterns seen in more than one but not all sources
    """
    sources: List[str]
    summaries: List[SourceSummary]
    common: List[UnaccountedPattern] = field(default_factory=list)
    unique: Dict[str, List[UnaccountedPattern]] = field(default_factory=dict)
    partial: List[UnaccountedPattern] = field(default_factory=list)

    @property
    def total_patterns(self) -> int:
        return len(self.common) + sum(len(p) for p in self.unique.values()) + len(self.partial)

    @property
    def common_count(self) -> int:
        return len(self.common)

    @property
    def unique_counts_by_source(self) -> Dict[str, int]:
        return {source: len(self.unique.get(source, [])) for source in self.sources}

    @property
    def unique_count(self) -> int:
        return sum(self.unique_counts_by_source.values())

    @property
    def partial_count(self) -> int:
        return len(self.partial)


def pattern_sort_key(pattern: UnaccountedPattern):
    return (pattern.can_id, pattern.header, pattern.payload_hex)


def fold_source(source: str, frames: Iterable[ClassifiedFrame]) -> PatternMap:
    """Fold one source's unaccounted frames into a fresh pattern map."""
    patterns: PatternMap = {}
    for frame in frames:
        if frame.is_accounted:
            continue
        key = (frame.can_id, frame.header, frame.payload_hex)
        pattern = patterns.get(key)
        if pattern is None:
            pattern = UnaccountedPattern(can_id=frame.can_id, header=frame.header, payload_hex=frame.payload_hex)
            patterns[key] = pattern
        pattern.add(source)
    return patterns


def merge_pattern_maps(maps: Iterable[PatternMap]) -> PatternMap:
    """Merge per-source maps; inputs are not modified."""
    merged: PatternMap = {}
    for partial_map in maps:
        for key, pattern in partial_map.items():
            target = merged.get(key)
            if target is None:
                merged[key] = pattern.copy()
                continue
            for source, count in pattern.occurrences.items():
                target.add(source, count)
    return merged


def summarize_source(source: str, frames: Sequence[ClassifiedFrame]) -> SourceSummary:
    unaccounted = sum(1 for f in frames if not f.is_accounted)
    return SourceSummary(source=source, total_frames=len(frames), unaccounted_frames=unaccounted)


def categorize(patterns: PatternMap, sources: Sequence[str]) -> ComparisonReport:
    """Split patterns into common / unique / partial.

    Common is checked first, so with a single source every pattern is common.
    """
    ordered_sources = sorted(sources)
    source_total = len(ordered_sources)
    report = ComparisonReport(sources=ordered_sources, summaries=[])

    for pattern in sorted(patterns.values(), key=pattern_sort_key):
        if pattern.source_count == source_total:
            report.common.append(pattern)
        elif pattern.source_count == 1:
            (source,) = pattern.occurrences.keys()
            report.unique.setdefault(source, []).append(pattern)
        else:
            report.partial.append(pattern)
    return report


def compare_sources(frames_by_source: Mapping[str, Sequence[ClassifiedFrame]],
                    max_workers: Optional[int] = None) -> ComparisonReport:
    """Compare unaccounted frame patterns across sources.

    Args:
        frames_by_source: source name -> classified frames of that source
        max_workers: Fold sources in a thread pool of this size; None or 1 folds sequentially

    Returns:
        ComparisonReport with sorted categories and per-source summaries
    """
    sources = sorted(frames_by_source)
    if max_workers and max_workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            per_source = list(pool.map(lambda s: fold_source(s, frames_by_source[s]), sources))
    else:
        per_source = [fold_source(s, frames_by_source[s]) for s in sources]

    merged = merge_pattern_maps(per_source)
    report = categorize(merged, sources)
    report.summaries = [summarize_source(s, frames_by_source[s]) for s in sources]
    logger.info(f"Compared {len(sources)} sources: {len(merged)} patterns "
                f"({report.common_count} common, {report.unique_count} unique, {report.partial_count} partial)")
    return report
