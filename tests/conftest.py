# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for piecedecode tests.

Three kinds of model are available:
  - RecordingModel: a fake that records every decode call, for dispatch
    and runner tests where only the calls matter
  - a tiny HuggingFace WordLevel tokenizer saved as tokenizer.json
  - a tiny SentencePiece model trained once per session
"""

import argparse
import logging
import textwrap
from pathlib import Path
from typing import Any, Sequence

import pytest
import sentencepiece as spm
from tokenizers import Tokenizer, decoders, pre_tokenizers
from tokenizers.models import WordLevel

from piecedecode.logging.logger import ROOT_LOGGER_NAME
from piecedecode.tokenizer.exceptions import DecodeError
from piecedecode.tokenizer.interfaces import DecodeModel
from piecedecode.tokenizer.record import DecodeRecord, PieceSpan

WORD_VOCAB = {
    "<unk>": 0,
    "▁Hello": 1,
    "▁world": 2,
    "▁how": 3,
    "▁are": 4,
    "▁you": 5,
    "?": 6,
}


class RecordingModel(DecodeModel):
    """
    Fake model that records calls and returns predictable output.

    Pieces decode to the pieces joined with '|', ids to the ids joined with
    '-'. Ids at or above vocab_size raise DecodeError like a real backend.
    """

    backend = "recording"

    def __init__(self, vocab_size: int = 100) -> None:
        self._vocab_size = vocab_size
        self.calls: list[tuple[str, list[Any]]] = []
        self.extra_options = ""

    @property
    def vocab_size(self) -> int:
        return self._vocab_size

    def set_decode_extra_options(self, extra_options: str) -> None:
        self.extra_options = extra_options

    def _check(self, ids: Sequence[int]) -> None:
        for token_id in ids:
            if not 0 <= token_id < self._vocab_size:
                raise DecodeError(f"Id {token_id} is out of range")

    def decode_pieces(self, pieces: Sequence[str]) -> str:
        self.calls.append(("decode_pieces", list(pieces)))
        return "|".join(pieces)

    def decode_ids(self, ids: Sequence[int]) -> str:
        self._check(ids)
        self.calls.append(("decode_ids", list(ids)))
        return "-".join(str(token_id) for token_id in ids)

    def decode_pieces_as_record(self, pieces: Sequence[str]) -> DecodeRecord:
        self.calls.append(("decode_pieces_as_record", list(pieces)))
        return DecodeRecord(
            text="|".join(pieces),
            pieces=tuple(PieceSpan(piece, -1, piece, 0, 0) for piece in pieces),
        )

    def decode_ids_as_record(self, ids: Sequence[int]) -> DecodeRecord:
        self._check(ids)
        self.calls.append(("decode_ids_as_record", list(ids)))
        return DecodeRecord(
            text="-".join(str(token_id) for token_id in ids),
            pieces=tuple(PieceSpan(str(token_id), token_id, "", 0, 0) for token_id in ids),
        )


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    """Drop handlers between tests so each test's capture streams are used."""
    yield  # type: ignore[misc]
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture()
def recording_model() -> RecordingModel:
    return RecordingModel()


@pytest.fixture()
def hf_tokenizer_file(tmp_path: Path) -> Path:
    """A WordLevel tokenizer with Metaspace decoding, saved as tokenizer.json."""
    tokenizer = Tokenizer(WordLevel(vocab=dict(WORD_VOCAB), unk_token="<unk>"))
    tokenizer.pre_tokenizer = pre_tokenizers.Metaspace()
    tokenizer.decoder = decoders.Metaspace()

    tokenizer_path = tmp_path / "tokenizer.json"
    tokenizer.save(str(tokenizer_path))
    return tokenizer_path


@pytest.fixture(scope="session")
def spm_model_file(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """
    Train a character-level SentencePiece model once for the whole session.

    Character models are deterministic and train in milliseconds, and with
    hard_vocab_limit off the requested size is only an upper bound.
    """
    workdir = tmp_path_factory.mktemp("spm")
    corpus = workdir / "corpus.txt"
    lines = ["hello world", "how are you", "hello there", "a world of words"] * 50
    corpus.write_text("\n".join(lines) + "\n", encoding="utf-8")

    spm.SentencePieceTrainer.train(
        input=str(corpus),
        model_prefix=str(workdir / "tiny"),
        vocab_size=40,
        model_type="char",
        hard_vocab_limit=False,
    )
    return workdir / "tiny.model"


@pytest.fixture()
def make_args():
    """Build a fake argparse.Namespace with every CLI option present."""

    def _make(**kwargs: Any) -> argparse.Namespace:
        defaults: dict[str, Any] = {
            "model": None,
            "model_type": None,
            "input": None,
            "output": None,
            "input_format": None,
            "output_format": None,
            "extra_options": None,
            "config": None,
            "log_level": "DEBUG",
            "log_file": None,
            "inputs": [],
        }
        defaults.update(kwargs)
        return argparse.Namespace(**defaults)

    return _make


@pytest.fixture()
def decode_config_file(tmp_path: Path, hf_tokenizer_file: Path) -> Path:
    """A YAML config that pins the HF model and the id input format."""
    config_content = textwrap.dedent(f"""\
        global:
          log_level: "DEBUG"
        decode:
          model: "{hf_tokenizer_file}"
          input_format: "id"
    """)
    config_file = tmp_path / "decode.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
