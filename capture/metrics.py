"""Process-local counters shared by the capture readers and the decoder engine.

Readers count parsed and skipped lines, the decoder counts classified frames,
decoded messages and reassembly diagnostics. Nothing here is persisted; the CLI
prints the counters in verbose mode. Captures may be processed on worker
threads, so updates go through a lock.
"""
from __future__ import annotations

import threading
from collections import Counter
from typing import Dict

_c = Counter()
_lock = threading.Lock()


def inc(name: str, n: int = 1) -> None:
    with _lock:
        _c[name] += n


def get(name: str) -> int:
    with _lock:
        return _c[name]


def get_all() -> Dict[str, int]:
    with _lock:
        return dict(_c)


def reset_all() -> None:
    with _lock:
        _c.clear()
