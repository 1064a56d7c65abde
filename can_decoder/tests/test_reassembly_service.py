import cbor2
import pytest

from capture import metrics
from can_decoder.exceptions import PayloadMalformedError
from can_decoder.models.message import DiagnosticKind
from can_decoder.services.reassembly_service import ReassemblyEngine

CAN_ID = "18209820"


def chunk_frames(encoded, can_id=CAN_ID):
    """Split an encoded value into a START frame and 7-byte CONTINUATION frames."""
    chunks = [encoded[i:i + 7] for i in range(0, len(encoded), 7)] or [b""]
    entries = [(can_id, bytes([0xA2]) + chunks[0])]
    entries += [(can_id, bytes([0x11]) + c) for c in chunks[1:]]
    return entries


def feed(engine, frames):
    messages, diagnostics = [], []
    for f in frames:
        result = engine.absorb(f)
        if result.message is not None:
            messages.append(result.message)
        diagnostics.extend(result.diagnostics)
    return messages, diagnostics


def test_start_then_continuation_forms_one_message(make_frames):
    engine = ReassemblyEngine()
    frames = make_frames((CAN_ID, [0xA1, 0x82, 0x01]), (CAN_ID, [0x11, 0x02]))

    first = engine.absorb(frames[0])
    assert first.message is None
    assert first.diagnostics == []
    assert engine.buffer == b"\x82\x01"

    second = engine.absorb(frames[1])
    msg = second.message
    assert msg is not None
    assert msg.can_id == CAN_ID
    assert msg.frame_count == 2
    assert msg.raw_bytes == b"\x82\x01\x02"
    assert msg.value.to_python() == [1, 2]
    assert msg.sequence == 1
    assert engine.buffer == b""
    assert engine.current is None
    assert metrics.get("messages_decoded") == 1


@pytest.mark.parametrize("item", [
    b"x" * 20,
    "a longer text value spanning several frames",
    {"cmd": 3, "args": [1, 2, 3, 4], "nonce": b"\x01" * 9},
    list(range(30)),
    7,
])
def test_single_value_over_many_frames(make_frames, item):
    encoded = cbor2.dumps(item)
    entries = chunk_frames(encoded)
    engine = ReassemblyEngine()
    messages, diagnostics = feed(engine, make_frames(*entries))

    assert diagnostics == []
    assert len(messages) == 1
    assert messages[0].frame_count == len(entries)
    assert messages[0].raw_bytes == encoded
    assert messages[0].value.to_python() == item
    assert engine.buffer == b""


def test_start_discards_unfinished_message(make_frames):
    engine = ReassemblyEngine()
    frames = make_frames((CAN_ID, [0xA0, 0x83, 0x01, 0x02]), ("100", [0xA0, 0x02]))
    messages, diagnostics = feed(engine, frames)

    assert len(diagnostics) == 1
    diag = diagnostics[0]
    assert diag.kind is DiagnosticKind.DISCARDED_INCOMPLETE
    assert diag.byte_count == 3
    assert diag.data == b"\x83\x01\x02"
    assert diag.can_id == CAN_ID
    assert diag.sequence == 1
    assert [m.value.to_python() for m in messages] == [2]
    assert messages[0].can_id == "100"
    assert messages[0].frame_count == 1
    assert metrics.get("buffers_discarded") == 1


def test_start_with_empty_buffer_reports_nothing(make_frames):
    engine = ReassemblyEngine()
    _, diagnostics = feed(engine, make_frames((CAN_ID, [0xA0]), (CAN_ID, [0xA0])))
    assert diagnostics == []
    assert engine.current is not None
    assert engine.current.frame_count == 1


def test_orphan_continuation_is_reported_and_still_buffered(make_frames):
    engine = ReassemblyEngine()
    messages, diagnostics = feed(engine, make_frames((CAN_ID, [0x10, 0x82, 0x01]), (CAN_ID, [0x10, 0x02])))

    assert [d.kind for d in diagnostics] == [DiagnosticKind.ORPHAN_CONTINUATION]
    assert diagnostics[0].sequence == 0
    assert len(messages) == 1
    assert messages[0].frame_count == 2
    assert messages[0].value.to_python() == [1, 2]
    assert metrics.get("orphan_continuations") == 1


def test_unconsumed_suffix_starts_next_message(make_frames):
    engine = ReassemblyEngine()
    frames = make_frames((CAN_ID, [0xA0, 0x01, 0x82]), (CAN_ID, [0x10, 0x05, 0x06]))

    first = engine.absorb(frames[0])
    assert first.message.value.to_python() == 1
    assert first.message.raw_bytes == b"\x01"
    assert engine.buffer == b"\x82"
    assert engine.current.frame_count == 1

    second = engine.absorb(frames[1])
    assert second.message.value.to_python() == [5, 6]
    assert second.message.frame_count == 2
    assert engine.buffer == b""


def test_one_decode_attempt_per_frame(make_frames):
    engine = ReassemblyEngine()
    frames = make_frames((CAN_ID, [0xA0, 0x01, 0x02]), (CAN_ID, [0x10]))
    first = engine.absorb(frames[0])
    assert first.message.value.to_python() == 1
    assert engine.buffer == b"\x02"
    second = engine.absorb(frames[1])
    assert second.message.value.to_python() == 2
    assert engine.buffer == b""


def test_other_frames_do_not_touch_state(make_frames):
    engine = ReassemblyEngine()
    frames = make_frames(
        (CAN_ID, [0xA0, 0x82, 0x01]),
        ("200", [0x50, 0x01]),
        ("01111000", [0x00, 0x00]),
        (CAN_ID, [0x10, 0x02]),
    )
    assert engine.absorb(frames[0]).message is None
    for f in frames[1:3]:
        result = engine.absorb(f)
        assert result.message is None and result.diagnostics == []
        assert engine.buffer == b"\x82\x01"
    assert engine.absorb(frames[3]).message.frame_count == 2


def test_malformed_buffer_dropped_in_strict_mode(make_frames):
    engine = ReassemblyEngine()
    messages, diagnostics = feed(engine, make_frames((CAN_ID, [0xA0, 0x1C, 0x00]), (CAN_ID, [0x10, 0x02])))

    assert diagnostics[0].kind is DiagnosticKind.MALFORMED_PAYLOAD
    assert diagnostics[0].byte_count == 2
    assert diagnostics[0].data == b"\x1c\x00"
    assert diagnostics[0].detail
    # the continuation lands on an idle engine
    assert diagnostics[1].kind is DiagnosticKind.ORPHAN_CONTINUATION
    assert [m.value.to_python() for m in messages] == [2]
    assert metrics.get("payloads_malformed") == 1


def test_malformed_buffer_kept_in_lenient_mode(make_frames):
    engine = ReassemblyEngine(lenient_decode=True)
    frames = make_frames((CAN_ID, [0xA0, 0x1C, 0x00]), (CAN_ID, [0x10, 0x02]), (CAN_ID, [0xA0, 0x02]))

    first = engine.absorb(frames[0])
    assert first.diagnostics == []
    assert engine.buffer == b"\x1c\x00"
    engine.absorb(frames[1])
    assert engine.buffer == b"\x1c\x00\x02"

    third = engine.absorb(frames[2])
    assert third.diagnostics[0].kind is DiagnosticKind.DISCARDED_INCOMPLETE
    assert third.diagnostics[0].byte_count == 3
    assert third.message.value.to_python() == 2


def test_injected_decoder_malformed_policy(make_frames):
    def always_malformed(buffer):
        raise PayloadMalformedError("bad", data=buffer)

    strict = ReassemblyEngine(decoder=always_malformed)
    lenient = ReassemblyEngine(lenient_decode=True, decoder=always_malformed)
    frames = make_frames((CAN_ID, [0xA0, 0x01]))
    assert strict.absorb(frames[0]).diagnostics[0].kind is DiagnosticKind.MALFORMED_PAYLOAD
    assert strict.buffer == b""
    assert lenient.absorb(frames[0]).diagnostics == []
    assert lenient.buffer == b"\x01"


def test_flush_reports_trailing_buffer(make_frames):
    engine = ReassemblyEngine()
    feed(engine, make_frames((CAN_ID, [0xA0, 0x83, 0x01])))
    diagnostics = engine.flush()
    assert len(diagnostics) == 1
    assert diagnostics[0].kind is DiagnosticKind.TRAILING_INCOMPLETE
    assert diagnostics[0].byte_count == 2
    assert diagnostics[0].sequence is None
    assert engine.current is None
    assert engine.flush() == []


def test_engines_are_independent(make_frames):
    a, b = ReassemblyEngine(), ReassemblyEngine()
    frames = make_frames((CAN_ID, [0xA0, 0x82, 0x01]))
    a.absorb(frames[0])
    assert a.buffer == b"\x82\x01"
    assert b.buffer == b""
