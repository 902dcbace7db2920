# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Line-oriented stream helpers for the decode driver.

Both helpers treat the empty path as the process's standard stream, so the
rest of the code never has to special-case stdin or stdout. Files we open
are closed on every exit path; the standard streams are only flushed, never
closed, since they belong to the process.
"""

import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO


class InputOpenError(OSError):
    """A text input file could not be opened for reading."""


class OutputOpenError(OSError):
    """The output sink could not be opened for writing."""


@contextmanager
def open_readable(path: str) -> Iterator[TextIO]:
    """
    Open a UTF-8 text input for line iteration.

    Lines end at "\\n" only; a lone "\\r" stays part of the line. Stdin is
    re-read through its byte buffer under the same rules, and the buffer is
    detached afterwards so the process's stdin stays open.

    Args:
        path: File to read, or "" for stdin.

    Raises:
        InputOpenError: If the file can't be opened.
    """
    if path == "":
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            # A text-only replacement for sys.stdin.
            yield sys.stdin
            return
        reader = io.TextIOWrapper(buffer, encoding="utf-8", newline="\n")
        try:
            yield reader
        finally:
            reader.detach()
        return

    try:
        handle = open(path, "r", encoding="utf-8", newline="\n")
    except OSError as err:
        raise InputOpenError(f"Cannot open input file {path}: {err}") from err

    with handle:
        yield handle


@contextmanager
def open_writable(path: str) -> Iterator[TextIO]:
    """
    Open the output sink for incremental writes.

    Parent directories are created as needed. Lines are always terminated
    with a bare newline so output is byte-identical across platforms.

    Args:
        path: File to write, or "" for stdout.

    Raises:
        OutputOpenError: If the file can't be created.
    """
    if path == "":
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handle = open(target, "w", encoding="utf-8", newline="\n")
    except OSError as err:
        raise OutputOpenError(f"Cannot open output file {path}: {err}") from err

    with handle:
        yield handle


def write_line(sink: TextIO, text: str) -> None:
    """Write one line of decoded text."""
    sink.write(text)
    sink.write("\n")
