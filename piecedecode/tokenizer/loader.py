# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Model loading: pick a backend, load the file, apply decode extra options.

This is the only place that knows which backends exist. Everything after
it talks to the DecodeModel interface.
"""

from pathlib import Path

from piecedecode.logging.logger import get_logger
from piecedecode.tokenizer.interfaces import DecodeModel


def resolve_model_type(model_path: Path, model_type: str = "auto") -> str:
    """
    Decide which backend should load the model.

    With 'auto', a .json file is a HuggingFace tokenizer and anything else
    is treated as a SentencePiece model, which is what the decoder was
    built around.
    """
    if model_type != "auto":
        return model_type
    return "tokenizers" if model_path.suffix.lower() == ".json" else "sentencepiece"


def load_model(model_path: Path, model_type: str = "auto", extra_options: str = "") -> DecodeModel:
    """
    Load a tokenization model and configure its decode extra options.

    Raises:
        ModelLoadError: The file is missing or the backend can't parse it.
        ExtraOptionsError: The backend rejected extra_options.
        ValueError: model_type names a backend that doesn't exist.
    """
    logger = get_logger("piecedecode.tokenizer.loader")
    resolved_type = resolve_model_type(model_path, model_type)

    if resolved_type == "sentencepiece":
        from piecedecode.tokenizer.backends.spm import SentencePieceModel

        model: DecodeModel = SentencePieceModel.from_file(model_path)
    elif resolved_type == "tokenizers":
        from piecedecode.tokenizer.backends.hf import HuggingFaceModel

        model = HuggingFaceModel.from_file(model_path)
    else:
        raise ValueError(f"Unknown model type: {model_type}")

    model.set_decode_extra_options(extra_options)

    logger.debug(
        "Model loaded",
        extra={
            "model": str(model_path),
            "backend": model.backend,
            "vocab_size": model.vocab_size,
            "extra_options": extra_options,
        },
    )
    return model
