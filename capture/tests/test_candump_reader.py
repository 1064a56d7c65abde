import pytest

from capture.readers.candump import CandumpReader


def test_full_candump_line():
    f = CandumpReader().parse_line("(1699999999.123456) can0 18209820#A2010203")
    assert f is not None
    assert f.can_id == "18209820"
    assert f.is_extended is True
    assert f.channel == "can0"
    assert f.data == bytes([0xA2, 0x01, 0x02, 0x03])
    assert f.length == 4
    assert f.timestamp == pytest.approx(1699999999.123456)


def test_bare_line_keeps_id_text_and_has_no_timestamp():
    f = CandumpReader().parse_line("100#50")
    assert f.can_id == "100"
    assert f.is_extended is False
    assert f.timestamp is None
    assert f.channel is None
    assert f.data == b"\x50"


def test_id_leading_zeros_preserved():
    f = CandumpReader().parse_line("vcan0 01111ABC#0000")
    assert f.can_id == "01111ABC"
    assert f.data == b"\x00\x00"


def test_spaces_in_payload_are_ignored():
    f = CandumpReader().parse_line("123#A1 02 03")
    assert f.data == b"\xA1\x02\x03"


def test_empty_payload_is_a_frame():
    f = CandumpReader().parse_line("123#")
    assert f is not None
    assert f.data == b""


@pytest.mark.parametrize("line", [
    "no separator here",
    "123#XYZ",
    "123#0",
    "123#000102030405060708",
])
def test_invalid_lines_rejected(line):
    assert CandumpReader().parse_line(line) is None
