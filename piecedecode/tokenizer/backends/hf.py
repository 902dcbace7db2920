# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
HuggingFace tokenizers decode backend.

Lets the same driver invert token streams produced with a tokenizer.json
(for example one trained with the tokenizers library). The Rust-backed
Tokenizer does the actual detokenization; this module adds what it does
not do on its own:

  - strict id range checking (the library quietly skips unknown ids)
  - piece to id lookup with unk fallback
  - the 'reverse' decode directive
  - per-piece spans for the proto output format
"""

from pathlib import Path
from typing import Sequence

from tokenizers import Tokenizer

from piecedecode.tokenizer.exceptions import DecodeError, ExtraOptionsError, ModelLoadError
from piecedecode.tokenizer.interfaces import DecodeModel
from piecedecode.tokenizer.record import DecodeRecord, build_record

SUPPORTED_EXTRA_OPTIONS = frozenset({"reverse"})


class HuggingFaceModel(DecodeModel):
    """A loaded tokenizer.json."""

    backend = "tokenizers"

    def __init__(self, tokenizer: Tokenizer) -> None:
        self._tokenizer = tokenizer
        self._reverse = False

    @classmethod
    def from_file(cls, tokenizer_path: Path) -> "HuggingFaceModel":
        if not tokenizer_path.is_file():
            raise ModelLoadError(f"Model file not found: {tokenizer_path}")

        # tokenizers raises a bare Exception for malformed JSON.
        try:
            tokenizer = Tokenizer.from_file(str(tokenizer_path))
        except Exception as err:
            raise ModelLoadError(f"Cannot load tokenizer {tokenizer_path}: {err}") from err
        return cls(tokenizer)

    @property
    def vocab_size(self) -> int:
        return self._tokenizer.get_vocab_size(with_added_tokens=True)

    def set_decode_extra_options(self, extra_options: str) -> None:
        directives = [directive for directive in extra_options.split(":") if directive]
        unsupported = sorted(set(directives) - SUPPORTED_EXTRA_OPTIONS)
        if unsupported:
            raise ExtraOptionsError(
                f"Unsupported decode extra options for the tokenizers backend: {', '.join(unsupported)}"
            )
        self._reverse = "reverse" in directives

    def _piece_to_id(self, piece: str) -> int:
        token_id = self._tokenizer.token_to_id(piece)
        if token_id is not None:
            return token_id

        unk_token = getattr(self._tokenizer.model, "unk_token", None)
        if unk_token is not None:
            unk_id = self._tokenizer.token_to_id(unk_token)
            if unk_id is not None:
                return unk_id

        raise DecodeError(f"Unknown piece {piece!r} and the model has no unk token")

    def _prepare_ids(self, ids: Sequence[int]) -> list[int]:
        vocab_size = self.vocab_size
        for token_id in ids:
            if not 0 <= token_id < vocab_size:
                raise DecodeError(f"Id {token_id} is out of range [0, {vocab_size})")
        prepared = list(ids)
        if self._reverse:
            prepared.reverse()
        return prepared

    def _decode(self, ids: list[int]) -> str:
        try:
            return self._tokenizer.decode(ids, skip_special_tokens=False)
        except Exception as err:
            raise DecodeError(f"tokenizers failed to decode {len(ids)} ids: {err}") from err

    def decode_ids(self, ids: Sequence[int]) -> str:
        return self._decode(self._prepare_ids(ids))

    def decode_pieces(self, pieces: Sequence[str]) -> str:
        return self.decode_ids([self._piece_to_id(piece) for piece in pieces])

    def decode_ids_as_record(self, ids: Sequence[int]) -> DecodeRecord:
        ordered = self._prepare_ids(ids)
        units = [(self._tokenizer.id_to_token(token_id) or "", token_id) for token_id in ordered]
        return build_record(units, lambda length: self._decode(ordered[:length]))

    def decode_pieces_as_record(self, pieces: Sequence[str]) -> DecodeRecord:
        return self.decode_ids_as_record([self._piece_to_id(piece) for piece in pieces])
