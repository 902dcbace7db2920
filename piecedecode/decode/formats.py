# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Input and output format names accepted by the decode driver.

The (input, output) pair is resolved exactly once per run. Anything outside
these enums is a configuration error, reported before any file is opened.
"""

from enum import Enum


class UnknownFormatError(ValueError):
    """Raised when an input or output format name is not recognised."""


class InputFormat(str, Enum):
    """How each unit of input is encoded."""

    PIECE = "piece"
    ID = "id"
    MAP = "map"

    @property
    def line_oriented(self) -> bool:
        """piece and id are read line by line, map is read one whole file at a time."""
        return self is not InputFormat.MAP


class OutputFormat(str, Enum):
    """What the model produces for each unit."""

    STRING = "string"
    PROTO = "proto"


def parse_input_format(value: str | InputFormat) -> InputFormat:
    if isinstance(value, InputFormat):
        return value
    try:
        return InputFormat(value)
    except ValueError:
        raise UnknownFormatError(f"Unknown input format: {value}") from None


def parse_output_format(value: str | OutputFormat) -> OutputFormat:
    if isinstance(value, OutputFormat):
        return value
    try:
        return OutputFormat(value)
    except ValueError:
        raise UnknownFormatError(f"Unknown output format: {value}") from None
