"""
Unaccounted frame pattern model used by the cross-capture comparison.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

PatternKey = Tuple[str, int, str]


@dataclass
class UnaccountedPattern:
    """A shape of unaccounted frame: CAN ID + header byte + payload bytes.

    The shape is independent of when or how often it was seen; occurrences
    maps each source (capture name) to how many times the shape appeared there.

    Attributes:
        can_id: CAN identifier text
        header: Header byte
        payload_hex: Upper-case hex of the bytes after the header
        occurrences: source -> count
    """
    can_id: str
    header: int
    payload_hex: str
    occurrences: Dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> PatternKey:
        return (self.can_id, self.header, self.payload_hex)

    @property
    def source_count(self) -> int:
        return len(self.occurrences)

    @property
    def total_count(self) -> int:
        return sum(self.occurrences.values())

    def add(self, source: str, n: int = 1) -> None:
        self.occurrences[source] = self.occurrences.get(source, 0) + n

    def copy(self) -> 'UnaccountedPattern':
        return UnaccountedPattern(self.can_id, self.header, self.payload_hex, dict(self.occurrences))

    def __str__(self) -> str:
        return f"ID:0x{self.can_id} Hdr:{self.header:02X} Data:{self.payload_hex}"
