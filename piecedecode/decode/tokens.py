# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Line tokenizer for the text input formats.

Lines are split on single spaces, exactly the way upstream tools join
pieces and ids when they write them out. Consecutive spaces therefore give
empty tokens rather than being collapsed.

Id tokens go through a permissive conversion with C atoi semantics: leading
whitespace and a sign are accepted, parsing stops at the first non-digit,
and a token with no leading digits at all becomes 0. That never fails, which
also means a corrupted id file decodes silently, so batches containing such
tokens are reported with a warning.
"""

import re
from typing import Sequence

from piecedecode.logging.logger import get_logger

_ATOI_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_DECIMAL = re.compile(r"[+-]?[0-9]+")

# How many offending tokens to include in the warning.
_SAMPLE_SIZE = 5


def split_line(line: str) -> list[str]:
    """
    Split one input line into tokens.

    The trailing line terminator is removed first. An empty line gives an
    empty token list, which is still a unit to decode.
    """
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    if not line:
        return []
    return line.split(" ")


def parse_id(token: str) -> int:
    """Convert a decimal token to an int, yielding 0 when nothing parses."""
    match = _ATOI_PREFIX.match(token)
    if match is None:
        return 0
    return int(match.group(1))


def parse_ids(tokens: Sequence[str]) -> list[int]:
    """Convert a batch of id tokens, warning once if any were not clean decimals."""
    ids = [parse_id(token) for token in tokens]

    lenient = [token for token in tokens if _DECIMAL.fullmatch(token) is None]
    if lenient:
        logger = get_logger("piecedecode.decode.tokens")
        logger.warning(
            "Non-decimal id tokens converted leniently",
            extra={"count": len(lenient), "sample": lenient[:_SAMPLE_SIZE]},
        )

    return ids
