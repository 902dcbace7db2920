# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the SentencePiece backend.

The session fixture trains a tiny character model, so expected values are
always taken from the library itself rather than hard-coded.
"""

import io
from pathlib import Path

import pytest
import sentencepiece as spm

from piecedecode.decode.dispatch import build_unit_decoder
from piecedecode.decode.tokens import split_line
from piecedecode.tokenizer.backends.spm import SentencePieceModel
from piecedecode.tokenizer.exceptions import DecodeError, ExtraOptionsError, ModelLoadError
from piecedecode.tokenizer.record import DecodeRecord


@pytest.fixture()
def model(spm_model_file: Path) -> SentencePieceModel:
    return SentencePieceModel.from_file(spm_model_file)


@pytest.fixture()
def processor(spm_model_file: Path) -> spm.SentencePieceProcessor:
    return spm.SentencePieceProcessor(model_file=str(spm_model_file))


def test_pieces_roundtrip(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    pieces = processor.EncodeAsPieces("hello world")
    assert model.decode_pieces(pieces) == "hello world"


def test_ids_roundtrip(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    ids = processor.EncodeAsIds("how are you")
    assert model.decode_ids(ids) == "how are you"


def test_empty_batch(model: SentencePieceModel) -> None:
    assert model.decode_ids([]) == ""
    assert model.decode_pieces([]) == ""


def test_vocab_size(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    assert model.vocab_size == processor.GetPieceSize()


def test_id_out_of_range(model: SentencePieceModel) -> None:
    with pytest.raises(DecodeError):
        model.decode_ids([model.vocab_size + 10])


def test_record_spans(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    ids = processor.EncodeAsIds("hello world")
    record = model.decode_ids_as_record(ids)

    assert record.text == "hello world"
    assert [span.id for span in record.pieces] == ids
    for span in record.pieces:
        assert record.text[span.begin:span.end] == span.surface


def test_pieces_record(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    pieces = processor.EncodeAsPieces("a world")
    record = model.decode_pieces_as_record(pieces)

    assert record.text == "a world"
    assert [span.piece for span in record.pieces] == pieces


def test_valid_extra_option(model: SentencePieceModel) -> None:
    model.set_decode_extra_options("reverse")


def test_invalid_extra_option(model: SentencePieceModel) -> None:
    with pytest.raises(ExtraOptionsError):
        model.set_decode_extra_options("no_such_option")


def test_missing_model_file(tmp_path: Path) -> None:
    with pytest.raises(ModelLoadError, match="not found"):
        SentencePieceModel.from_file(tmp_path / "missing.model")


def test_corrupt_model_file(tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.model"
    corrupt.write_bytes(b"definitely not a protobuf")
    with pytest.raises(ModelLoadError):
        SentencePieceModel.from_file(corrupt)


def test_empty_records(model: SentencePieceModel) -> None:
    empty = DecodeRecord(text="", pieces=())
    assert model.decode_ids_as_record([]) == empty
    assert model.decode_pieces_as_record([]) == empty


def test_empty_line_through_proto_dispatch(model: SentencePieceModel) -> None:
    records: list[DecodeRecord] = []
    unit_decoder = build_unit_decoder(model, "piece", "proto", io.StringIO(), on_record=records.append)

    for line in ("▁ h e\n", "\n"):
        unit_decoder(split_line(line))

    assert [record.text for record in records] == ["he", ""]
    assert records[1].pieces == ()


def test_id_beyond_c_int(model: SentencePieceModel) -> None:
    with pytest.raises(DecodeError):
        model.decode_ids([99999999999])
    with pytest.raises(DecodeError):
        model.decode_ids_as_record([99999999999])


def test_reverse_option(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    ids = processor.EncodeAsIds("how are you")
    model.set_decode_extra_options("reverse")

    assert model.decode_ids(list(reversed(ids))) == "how are you"
    assert model.decode_pieces(list(reversed(processor.EncodeAsPieces("how")))) == "how"


def test_bos_eos_options(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    ids = processor.EncodeAsIds("hello")
    model.set_decode_extra_options("bos:eos")

    record = model.decode_ids_as_record(ids)

    assert record.text == "hello"
    assert record.pieces[0].id == processor.bos_id()
    assert record.pieces[-1].id == processor.eos_id()
    assert record.pieces[0].surface == ""
    assert model.decode_ids(ids) == "hello"


def test_unknown_piece_in_record(model: SentencePieceModel, processor: spm.SentencePieceProcessor) -> None:
    record = model.decode_pieces_as_record(["h", "Z"])

    assert record.pieces[1].id == processor.unk_id()
    assert record.text == model.decode_pieces(["h", "Z"])
