# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract base class for tokenization models the decoder can drive.

The driver only ever needs the decode direction. Any backend that obeys
this contract can be plugged into the dispatcher without type checks or
conditional logic:

- decode_pieces / decode_ids return the detokenized text
- decode_pieces_as_record / decode_ids_as_record return a DecodeRecord
- every decode failure surfaces as DecodeError
- set_decode_extra_options failures surface as ExtraOptionsError
"""

from abc import ABC, abstractmethod
from typing import Sequence

from piecedecode.tokenizer.record import DecodeRecord


class DecodeModel(ABC):
    """Base class for all decode backends."""

    #: Short backend name used in log entries.
    backend: str = "abstract"

    @property
    @abstractmethod
    def vocab_size(self) -> int:
        """Number of ids the model knows about."""

    @abstractmethod
    def set_decode_extra_options(self, extra_options: str) -> None:
        """Apply ':' separated decode directives. An empty string clears them."""

    @abstractmethod
    def decode_pieces(self, pieces: Sequence[str]) -> str:
        ...

    @abstractmethod
    def decode_ids(self, ids: Sequence[int]) -> str:
        ...

    @abstractmethod
    def decode_pieces_as_record(self, pieces: Sequence[str]) -> DecodeRecord:
        ...

    @abstractmethod
    def decode_ids_as_record(self, ids: Sequence[int]) -> DecodeRecord:
        ...
