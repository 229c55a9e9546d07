"""Unit tests for the CLI main module."""

import base64
import json
from unittest.mock import patch

import pytest

from chunkreader.cli.main import format_counts, format_record, main
from chunkreader.io.buffered_file_reader import ChunkCursor, ChunkRecord


@pytest.fixture(autouse=True)
def no_signal_setup():
    """Keep main() from replacing the test process' signal handlers."""
    with patch("chunkreader.cli.main.setup_signal_handling"):
        yield


def run_main(argv):
    """Run main() with the given arguments and return the exit code (0 if it returned)."""
    with patch("sys.argv", ["chunkreader"] + argv):
        try:
            main()
        except SystemExit as e:
            return e.code
    return 0


def make_record(start, data, end=None):
    end = start + len(data) if end is None else end
    return ChunkRecord(cursor=ChunkCursor(start, end), data=data, _peek=lambda cursor: None)


def test_format_record_raw():
    assert format_record(make_record(0, b"\x00abc"), "raw") == b"\x00abc"


def test_format_record_json():
    line = format_record(make_record(3, b"abc", end=5), "json")
    assert line.endswith(b"\n")
    assert json.loads(line) == {"start": 3, "end": 5, "length": 3, "data": base64.b64encode(b"abc").decode("ascii")}


def test_format_counts():
    assert format_counts({"chunks": 3, "bytes": 12}) == "Chunks: 3\nBytes: 12"


def test_main_raw_output_to_file(make_file, tmp_path):
    """Test that raw chunks reproduce the input file."""
    content = bytes(range(256)) * 4
    source = make_file(content)
    output = tmp_path / "out.bin"

    assert run_main(["-c", "7", "-o", str(output), str(source)]) == 0
    assert output.read_bytes() == content


def test_main_json_output(make_file, capfd):
    source = make_file(b"abc\r\nghi\r\njkl")

    assert run_main(["-s", "crlf", "-t", "-f", "json", str(source)]) == 0

    lines = [json.loads(line) for line in capfd.readouterr().out.splitlines()]
    assert [(line["start"], line["end"]) for line in lines] == [(0, 5), (5, 10), (10, 13)]
    assert [base64.b64decode(line["data"]) for line in lines] == [b"abc", b"ghi", b"jkl"]
    # length counts the emitted data, not the trimmed separator
    assert [line["length"] for line in lines] == [3, 3, 3]


def test_main_summary_to_stderr(make_file, capfd):
    source = make_file(b"abcdefg")

    assert run_main(["-c", "3", "-S", "stderr", str(source)]) == 0

    captured = capfd.readouterr()
    assert captured.out == "abcdefg"
    assert "Chunks: 3" in captured.err
    assert "Bytes: 7" in captured.err


def test_main_summary_to_file(make_file, tmp_path):
    source = make_file(b"a\nb\n")
    output = tmp_path / "out.txt"

    assert run_main(["-s", "lf", "-S", "file", "-o", str(output), str(source)]) == 0

    assert output.read_text() == "a\nb\n\nChunks: 2\nBytes: 4\n"


def test_main_missing_file(tmp_path, capfd):
    assert run_main([str(tmp_path / "missing.bin")]) == 1
    assert "Error:" in capfd.readouterr().err


def test_main_permission_denied(make_file, capfd):
    source = make_file(b"abc")
    denied = PermissionError(13, "Permission denied")
    with patch("chunkreader.io.buffered_file_reader.LocalFileSource", side_effect=denied):
        assert run_main([str(source)]) == 126
    assert "Error:" in capfd.readouterr().err


def test_main_invalid_configuration(make_file, capfd):
    source = make_file(b"abc")
    assert run_main(["-p", "5", str(source)]) == 1
    assert "file_modification_poll_interval" in capfd.readouterr().err


def test_main_validation_error(make_file, capfd):
    source = make_file(b"abc")
    assert run_main(["-t", str(source)]) == 1
    assert "requires -s/--separator" in capfd.readouterr().err


def test_main_usage_error(capfd):
    assert run_main(["--format", "xml", "data.bin"]) == 2


def test_main_broken_pipe_stops_quietly(make_file, capfd):
    """Test that a broken pipe ends the loop without an error message."""
    source = make_file(b"abcdef")
    with patch("chunkreader.cli.main.SafeWriter.write", side_effect=BrokenPipeError()):
        assert run_main(["-c", "2", str(source)]) == 0
    assert "Error:" not in capfd.readouterr().err


def test_main_exit_code_after_signal(make_file):
    source = make_file(b"abc")
    with patch("chunkreader.cli.main.signal_handler") as mock_handler:
        mock_handler.exit_code.return_value = 130
        assert run_main([str(source)]) == 130
