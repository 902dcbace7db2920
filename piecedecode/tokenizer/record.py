# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured decode output.

This is the Python shape of the "proto" output format: the detokenized text
plus one span per input piece telling you which characters of the text that
piece produced. Both backends build this type the same way, so nothing
downstream has to know which library did the decoding.
"""

from dataclasses import asdict, dataclass
from typing import Callable, Sequence


@dataclass(frozen=True)
class PieceSpan:
    """One input piece and the slice of decoded text it maps to."""

    piece: str
    id: int
    surface: str
    begin: int
    end: int


@dataclass(frozen=True)
class DecodeRecord:
    """Decoded text plus per-piece boundaries."""

    text: str
    pieces: tuple[PieceSpan, ...]

    def to_dict(self) -> dict[str, object]:
        return {"text": self.text, "pieces": [asdict(span) for span in self.pieces]}


def build_record(
    units: Sequence[tuple[str, int]],
    decode_prefix: Callable[[int], str],
) -> DecodeRecord:
    """
    Attach a character span to every (piece, id) pair.

    Detokenizers only know a piece's surface in context (a leading word
    boundary marker is dropped at the start of the text, byte pieces merge
    with their neighbours), so each span comes from decoding successively
    longer prefixes and diffing against the previous result. That is
    quadratic in the unit length, which is fine for sentence-sized units.

    Args:
        units: Pieces in decode order, each with its vocabulary id.
        decode_prefix: Decodes the first N units of the same sequence.

    Returns:
        The record. An empty unit gives empty text and no spans, without
        calling decode_prefix at all.
    """
    spans: list[PieceSpan] = []
    previous = ""
    for index, (piece, piece_id) in enumerate(units):
        current = decode_prefix(index + 1)
        begin = _common_prefix_length(previous, current)
        spans.append(
            PieceSpan(
                piece=piece,
                id=piece_id,
                surface=current[begin:],
                begin=begin,
                end=len(current),
            )
        )
        previous = current

    return DecodeRecord(text=previous, pieces=tuple(spans))


def _common_prefix_length(left: str, right: str) -> int:
    length = 0
    for left_char, right_char in zip(left, right):
        if left_char != right_char:
            break
        length += 1
    return length
