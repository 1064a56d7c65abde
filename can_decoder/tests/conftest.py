import os
import sys

import pytest

# Ensure repo root is on sys.path for tests so `capture` imports resolve
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from capture import metrics  # noqa: E402
from capture.readers.interface import RawFrame  # noqa: E402
from can_decoder.services.classifier import FrameClassifier  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_all()
    yield


@pytest.fixture
def make_frames():
    """Build ClassifiedFrames from (can_id, data[, timestamp]) tuples in capture order."""
    def _make(*entries):
        classifier = FrameClassifier()
        raw = []
        for entry in entries:
            can_id, data = entry[0], bytes(entry[1])
            timestamp = entry[2] if len(entry) > 2 else None
            raw.append(RawFrame(can_id=can_id, data=data, timestamp=timestamp))
        return list(classifier.classify_all(raw))
    return _make
