"""
Data models for the CAN CBOR decoder.

Models:
- ClassifiedFrame / FrameKind: A capture frame tagged with its protocol role
- Message / DecodedMessage: Reassembly state and completed messages
- Diagnostic / DiagnosticKind: Non-fatal reassembly conditions
- DecodedValue / ValueKind: Tagged variant for decoded CBOR trees
- UnaccountedPattern: Dedup key and occurrence counts for comparison
"""

from can_decoder.models.classified_frame import ClassifiedFrame, FrameKind
from can_decoder.models.decoded_value import DecodedValue, ValueKind
from can_decoder.models.message import Message, DecodedMessage, Diagnostic, DiagnosticKind
from can_decoder.models.pattern import UnaccountedPattern, PatternKey

__all__ = [
    'ClassifiedFrame', 'FrameKind',
    'DecodedValue', 'ValueKind',
    'Message', 'DecodedMessage', 'Diagnostic', 'DiagnosticKind',
    'UnaccountedPattern', 'PatternKey',
]
