# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SentencePiece decode backend.

Wraps sentencepiece.SentencePieceProcessor through its long-stable core
calls only: Load, DecodePieces, DecodeIds, IdToPiece, PieceToId and the
special id getters. Decode extra options and per-piece spans are applied
here on top of those, since the processor's own entry points for them
changed between 0.2.x releases.

Supported extra options, applied in the order given:

  - reverse: decode the unit back to front
  - bos / eos: add the model's bos / eos piece at the start / end
"""

from pathlib import Path
from typing import Callable, Sequence, TypeVar

import sentencepiece as spm

from piecedecode.tokenizer.exceptions import DecodeError, ExtraOptionsError, ModelLoadError
from piecedecode.tokenizer.interfaces import DecodeModel
from piecedecode.tokenizer.record import DecodeRecord, build_record

T = TypeVar("T")
U = TypeVar("U")

SUPPORTED_EXTRA_OPTIONS = frozenset({"bos", "eos", "reverse"})

# What the SWIG layer raises for a non-OK status, an id out of range or
# beyond C int, or a list element of the wrong type.
_LIBRARY_ERRORS = (IndexError, OSError, OverflowError, RuntimeError, TypeError, ValueError)


class SentencePieceModel(DecodeModel):
    """A loaded SentencePiece .model file."""

    backend = "sentencepiece"

    def __init__(self, processor: spm.SentencePieceProcessor) -> None:
        self._processor = processor
        self._extra_options: tuple[str, ...] = ()

    @classmethod
    def from_file(cls, model_path: Path) -> "SentencePieceModel":
        if not model_path.is_file():
            raise ModelLoadError(f"Model file not found: {model_path}")

        processor = spm.SentencePieceProcessor()
        try:
            processor.Load(str(model_path))
        except _LIBRARY_ERRORS as err:
            raise ModelLoadError(f"Cannot load SentencePiece model {model_path}: {err}") from err
        return cls(processor)

    @property
    def vocab_size(self) -> int:
        return self._processor.GetPieceSize()

    def set_decode_extra_options(self, extra_options: str) -> None:
        directives = tuple(directive for directive in extra_options.split(":") if directive)
        unsupported = sorted(set(directives) - SUPPORTED_EXTRA_OPTIONS)
        if unsupported:
            raise ExtraOptionsError(
                f"Unsupported decode extra options for the sentencepiece backend: {', '.join(unsupported)}"
            )
        for directive in ("bos", "eos"):
            if directive in directives and self._special_id(directive) < 0:
                raise ExtraOptionsError(f"The model defines no id for '{directive}'")
        self._extra_options = directives

    def _special_id(self, directive: str) -> int:
        if directive == "bos":
            return self._processor.bos_id()
        return self._processor.eos_id()

    def _apply_extra_options(self, unit: Sequence[T], from_id: Callable[[int], T]) -> list[T]:
        prepared = list(unit)
        for directive in self._extra_options:
            if directive == "reverse":
                prepared.reverse()
            elif directive == "bos":
                prepared.insert(0, from_id(self._processor.bos_id()))
            else:
                prepared.append(from_id(self._processor.eos_id()))
        return prepared

    def _prepare_ids(self, ids: Sequence[int]) -> list[int]:
        vocab_size = self.vocab_size
        for token_id in ids:
            if not 0 <= token_id < vocab_size:
                raise DecodeError(f"Id {token_id} is out of range [0, {vocab_size})")
        return self._apply_extra_options(ids, int)

    def _prepare_pieces(self, pieces: Sequence[str]) -> list[str]:
        return self._apply_extra_options(pieces, self._processor.IdToPiece)

    def _call(self, library_fn: Callable[[U], T], argument: U) -> T:
        try:
            return library_fn(argument)
        except _LIBRARY_ERRORS as err:
            raise DecodeError(f"SentencePiece failed to decode: {err}") from err

    def decode_pieces(self, pieces: Sequence[str]) -> str:
        return self._call(self._processor.DecodePieces, self._prepare_pieces(pieces))

    def decode_ids(self, ids: Sequence[int]) -> str:
        return self._call(self._processor.DecodeIds, self._prepare_ids(ids))

    def decode_pieces_as_record(self, pieces: Sequence[str]) -> DecodeRecord:
        # Unknown pieces keep their literal spelling in DecodePieces, so the
        # prefixes are decoded as pieces rather than via their unk id.
        prepared = self._prepare_pieces(pieces)
        units = [(piece, self._call(self._processor.PieceToId, piece)) for piece in prepared]
        return build_record(
            units, lambda length: self._call(self._processor.DecodePieces, prepared[:length])
        )

    def decode_ids_as_record(self, ids: Sequence[int]) -> DecodeRecord:
        prepared = self._prepare_ids(ids)
        units = [(self._call(self._processor.IdToPiece, token_id), token_id) for token_id in prepared]
        return build_record(
            units, lambda length: self._call(self._processor.DecodeIds, prepared[:length])
        )
