# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Batch runner: feeds every input source through the run's UnitDecoder.

Sources are processed strictly in the order given, lines strictly in file
order. Text formats produce one unit per line; the map format produces one
unit per file. All output goes to the single sink the UnitDecoder was built
with, so results from every source land there sequentially.
"""

from typing import NamedTuple, Sequence

from piecedecode.decode.binary import read_id_file
from piecedecode.decode.dispatch import UnitDecoder
from piecedecode.decode.tokens import split_line
from piecedecode.logging.logger import get_logger
from piecedecode.utils.filesystem import open_readable

STDIN_SOURCE = ""


class RunStats(NamedTuple):
    """What one batch run processed."""

    sources: int
    units: int


def resolve_input_sources(input_path: str, positional: Sequence[str]) -> list[str]:
    """
    Work out which inputs a run reads.

    A single --input wins. Otherwise every positional argument is an input
    file. With neither, the run reads stdin, signalled by the empty path.
    """
    if input_path:
        return [input_path]
    sources = list(positional)
    if not sources:
        sources.append(STDIN_SOURCE)
    return sources


def _describe(source: str) -> str:
    return source if source != STDIN_SOURCE else "<stdin>"


def run_batch(sources: Sequence[str], unit_decoder: UnitDecoder) -> RunStats:
    """
    Decode every unit of every source.

    Raises:
        InputOpenError: A text input can't be opened. Earlier sources have
                        already been written to the sink.
        DecodeError: The model failed on some unit; nothing after it runs.
    """
    logger = get_logger("piecedecode.decode.runner")
    line_oriented = unit_decoder.input_format.line_oriented
    units = 0

    for source in sources:
        source_units = 0

        if line_oriented:
            with open_readable(source) as handle:
                for line in handle:
                    unit_decoder(split_line(line))
                    source_units += 1
        else:
            unit_decoder(read_id_file(source))
            source_units = 1

        units += source_units
        logger.debug(
            "Input processed",
            extra={"source": _describe(source), "units": source_units},
        )

    return RunStats(sources=len(sources), units=units)
