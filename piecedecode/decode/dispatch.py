# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Format dispatch: turn an (input format, output format) pair into a single
"decode one unit" callable.

The pair is resolved once, at startup. The result is a UnitDecoder built
from three pieces chosen from tables:

  convert — how a unit becomes a model request (ids get parsed, pieces and
            packed ids pass through unchanged)
  decode  — which of the model's four decode entry points to call
  emit    — what happens to the result (text is written as one line to the
            sink, records are forwarded to an optional callback and never
            written)

After that, every line or file in the run goes through the same object
with no further branching on formats.
"""

from functools import partial
from typing import Any, Callable, Optional, Sequence, TextIO

from piecedecode.decode.formats import (
    InputFormat,
    OutputFormat,
    parse_input_format,
    parse_output_format,
)
from piecedecode.decode.tokens import parse_ids
from piecedecode.tokenizer.interfaces import DecodeModel
from piecedecode.tokenizer.record import DecodeRecord
from piecedecode.utils.filesystem import write_line

RecordCallback = Callable[[DecodeRecord], None]

# Model entry point for every supported format pair.
_ENTRY_POINTS: dict[tuple[InputFormat, OutputFormat], str] = {
    (InputFormat.PIECE, OutputFormat.STRING): "decode_pieces",
    (InputFormat.PIECE, OutputFormat.PROTO): "decode_pieces_as_record",
    (InputFormat.ID, OutputFormat.STRING): "decode_ids",
    (InputFormat.ID, OutputFormat.PROTO): "decode_ids_as_record",
    (InputFormat.MAP, OutputFormat.STRING): "decode_ids",
    (InputFormat.MAP, OutputFormat.PROTO): "decode_ids_as_record",
}


def _pass_through(unit: Sequence[Any]) -> Sequence[Any]:
    return unit


def _drop_record(record: DecodeRecord) -> None:
    return None


_CONVERTERS: dict[InputFormat, Callable[[Sequence[Any]], Sequence[Any]]] = {
    InputFormat.PIECE: _pass_through,
    InputFormat.ID: parse_ids,
    InputFormat.MAP: _pass_through,
}


class UnitDecoder:
    """
    Decodes one unit of input: a line's tokens, or a whole map file's ids.

    Any DecodeError from the model propagates to the caller untouched; the
    run has no per-unit recovery.
    """

    def __init__(
        self,
        input_format: InputFormat,
        output_format: OutputFormat,
        convert: Callable[[Sequence[Any]], Sequence[Any]],
        decode: Callable[[Sequence[Any]], Any],
        emit: Callable[[Any], None],
    ) -> None:
        self.input_format = input_format
        self.output_format = output_format
        self._convert = convert
        self._decode = decode
        self._emit = emit
        self.units = 0

    def __call__(self, unit: Sequence[Any]) -> None:
        self._emit(self._decode(self._convert(unit)))
        self.units += 1

    def __repr__(self) -> str:
        return (
            f"UnitDecoder(input_format={self.input_format.value!r}, "
            f"output_format={self.output_format.value!r}, units={self.units})"
        )


def build_unit_decoder(
    model: DecodeModel,
    input_format: str | InputFormat,
    output_format: str | OutputFormat,
    sink: TextIO,
    on_record: Optional[RecordCallback] = None,
) -> UnitDecoder:
    """
    Resolve a format pair into the UnitDecoder for this run.

    Args:
        model: The loaded tokenization model.
        input_format: piece, id or map.
        output_format: string or proto.
        sink: Where string output lines go.
        on_record: Receives each DecodeRecord for proto output. Records are
                   dropped when it is None.

    Raises:
        UnknownFormatError: Either format name is not recognised.
    """
    resolved_input = parse_input_format(input_format)
    resolved_output = parse_output_format(output_format)

    decode = getattr(model, _ENTRY_POINTS[(resolved_input, resolved_output)])

    if resolved_output is OutputFormat.STRING:
        emit: Callable[[Any], None] = partial(write_line, sink)
    else:
        emit = on_record if on_record is not None else _drop_record

    return UnitDecoder(
        input_format=resolved_input,
        output_format=resolved_output,
        convert=_CONVERTERS[resolved_input],
        decode=decode,
        emit=emit,
    )
