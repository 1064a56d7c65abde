import io

import pytest

from can_decoder import main as cli

CAPTURE = """(1.000000) can0 100#50
(1.100000) can0 200#A082
(1.200000) can0 200#100102
"""

OTHER_CAPTURE = """(5.000000) can0 100#50
(5.100000) can0 300#4401
"""


@pytest.fixture(autouse=True)
def _home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("CAN_DECODER_LENIENT_DECODE", raising=False)
    monkeypatch.delenv("CAN_DECODER_HEARTBEAT_PREFIX", raising=False)


@pytest.fixture
def capture_file(tmp_path):
    path = tmp_path / "first.log"
    path.write_text(CAPTURE)
    return str(path)


def test_decode_file(capture_file, capsys):
    assert cli.main([capture_file]) == 0
    out = capsys.readouterr().out
    assert "CAN CBOR Decoder" in out
    assert "ID:0x100(Std) Hdr:50 [DATA] Data[1]: 50" in out
    assert "COMPLETE CBOR MESSAGE (CAN ID: 0x200, 2 frames, 3 bytes)" in out
    assert "Raw CBOR: 820102" in out
    assert "CBOR messages decoded: 1" in out


def test_quiet_hides_frame_lines(capture_file, capsys):
    assert cli.main([capture_file, "--quiet"]) == 0
    out = capsys.readouterr().out
    assert "ID:0x100(Std)" not in out
    assert "COMPLETE CBOR MESSAGE" in out


def test_grouped_view_hiding_accounted(capture_file, capsys):
    assert cli.main([capture_file, "--group", "--hide-accounted", "--quiet"]) == 0
    out = capsys.readouterr().out
    assert "FRAMES GROUPED BY CAN ID" in out
    assert "CAN ID: 0x100 (1 frames)" in out
    assert "CAN ID: 0x200 (" not in out


def test_hide_flags_are_mutually_exclusive(capture_file):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([capture_file, "--hide-accounted", "--hide-unaccounted"])
    assert excinfo.value.code == 2


def test_verbose_prints_counters(capture_file, capsys):
    assert cli.main([capture_file, "-v"]) == 0
    out = capsys.readouterr().out
    assert "Counters:" in out
    assert "   messages_decoded: 1" in out
    assert "New message started: 82" in out


def test_stdin_input(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(CAPTURE))
    assert cli.main([]) == 0
    out = capsys.readouterr().out
    assert "Summary for <stdin>:" in out
    assert "COMPLETE CBOR MESSAGE" in out


def test_unreadable_file_sets_exit_code(tmp_path, capture_file, capsys):
    missing = str(tmp_path / "missing.log")
    assert cli.main([missing, capture_file]) == 1
    out = capsys.readouterr().out
    assert f"Could not read {missing}" in out
    assert "COMPLETE CBOR MESSAGE" in out


def test_compare_needs_two_files(capture_file, capsys):
    assert cli.main(["--compare", capture_file]) == 2
    assert "at least two" in capsys.readouterr().err


def test_compare_two_files(tmp_path, capture_file, capsys):
    other = tmp_path / "second.log"
    other.write_text(OTHER_CAPTURE)
    assert cli.main(["--compare", capture_file, str(other), "--workers", "2"]) == 0
    out = capsys.readouterr().out
    assert "UNACCOUNTED FRAMES COMPARISON" in out
    assert "Frames Common to ALL Files (1 patterns):" in out
    assert "Frames UNIQUE to second.log (1 patterns):" in out
    assert "  ID:0x300 Hdr:44 Data:01 (count: 1)" in out


def test_missing_config_file(capture_file, tmp_path, capsys):
    assert cli.main([capture_file, "--config", str(tmp_path / "none.json")]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_workers(capture_file, capsys):
    assert cli.main([capture_file, "--workers", "0"]) == 2
