# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the stdin/stdout aware stream helpers."""

import io
from pathlib import Path

import pytest

from piecedecode.utils.filesystem import (
    InputOpenError,
    OutputOpenError,
    open_readable,
    open_writable,
    write_line,
)


def test_reads_file_lines(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text("a b\nc\n", encoding="utf-8")

    with open_readable(str(source)) as handle:
        assert list(handle) == ["a b\n", "c\n"]
    assert handle.closed


def test_empty_path_reads_stdin(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_stdin = io.StringIO("x\n")
    monkeypatch.setattr("sys.stdin", fake_stdin)

    with open_readable("") as handle:
        assert handle is fake_stdin
    assert not fake_stdin.closed


def test_lone_carriage_return_is_not_a_line_break(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_bytes(b"a\rb c\r\nd\n")

    with open_readable(str(source)) as handle:
        assert list(handle) == ["a\rb c\r\n", "d\n"]


def test_stdin_read_as_utf8_lines(monkeypatch: pytest.MonkeyPatch) -> None:
    raw = io.BytesIO("▁a\rb\n".encode("utf-8"))
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(raw, encoding="latin-1"))

    with open_readable("") as handle:
        assert list(handle) == ["▁a\rb\n"]
    assert not raw.closed


def test_missing_input_raises(tmp_path: Path) -> None:
    with pytest.raises(InputOpenError, match="Cannot open input file"):
        with open_readable(str(tmp_path / "missing.txt")):
            pass


def test_input_open_error_is_an_oserror() -> None:
    assert issubclass(InputOpenError, OSError)
    assert issubclass(OutputOpenError, OSError)


def test_writes_lines_and_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "out.txt"

    with open_writable(str(target)) as sink:
        write_line(sink, "first")
        write_line(sink, "")
        write_line(sink, "third")

    assert target.read_bytes() == b"first\n\nthird\n"


def test_output_closed_when_body_raises(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"

    with pytest.raises(RuntimeError):
        with open_writable(str(target)) as sink:
            write_line(sink, "kept")
            raise RuntimeError("boom")

    assert sink.closed
    assert target.read_text(encoding="utf-8") == "kept\n"


def test_empty_path_writes_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    with open_writable("") as sink:
        write_line(sink, "to stdout")

    assert capsys.readouterr().out == "to stdout\n"


def test_unwritable_output_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(OutputOpenError, match="Cannot open output file"):
        with open_writable(str(blocker / "out.txt")):
            pass
