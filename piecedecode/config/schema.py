# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for piecedecode.

The run configuration is built once at startup and never mutated, so every
model here is a frozen pydantic model with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

There are two shapes for the decode settings. DecodeSection is what a YAML
file may carry, where every key is optional because the command line can
fill in the rest. DecodeConfig is the final, fully validated run
configuration the driver actually uses.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from piecedecode.decode.formats import (
    InputFormat,
    OutputFormat,
    parse_input_format,
    parse_output_format,
)

ModelType = Literal["auto", "sentencepiece", "tokenizers"]

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GlobalConfig(BaseModel):
    """Cross-cutting settings: where diagnostics go and how chatty they are."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a copy of the JSON log stream",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_VALID_LOG_LEVELS)}, got '{value}'")
        return upper


class DecodeSection(BaseModel):
    """The optional decode: section of a YAML config file."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, protected_namespaces=()
    )

    model: Optional[str] = None
    model_type: Optional[ModelType] = None
    inputs: Optional[tuple[str, ...]] = None
    output: Optional[str] = None
    input_format: Optional[str] = None
    output_format: Optional[str] = None
    extra_options: Optional[str] = None


class DecodeConfig(BaseModel):
    """
    Everything one decode run needs, fixed for the lifetime of the process.

    Format names are checked here rather than in the dispatcher so that a
    bad --input_format fails before the model is loaded or any file opened.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, protected_namespaces=()
    )

    model: str = Field(description="Path to the tokenization model file")
    model_type: ModelType = Field(
        default="auto",
        description="Backend to load the model with; auto picks tokenizers for .json files",
    )
    inputs: tuple[str, ...] = Field(
        default=("",),
        description="Input paths in processing order; the empty path means stdin",
    )
    output: str = Field(default="", description="Output path; empty means stdout")
    input_format: InputFormat = Field(default=InputFormat.PIECE)
    output_format: OutputFormat = Field(default=OutputFormat.STRING)
    extra_options: str = Field(
        default="",
        description="':' separated decode directives handed to the model, e.g. 'reverse'",
    )

    @field_validator("model")
    @classmethod
    def _check_model(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("model path must not be empty")
        return value

    @field_validator("inputs")
    @classmethod
    def _default_to_stdin(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return value if value else ("",)

    @field_validator("input_format", mode="before")
    @classmethod
    def _check_input_format(cls, value: object) -> InputFormat:
        return parse_input_format(value)  # type: ignore[arg-type]

    @field_validator("output_format", mode="before")
    @classmethod
    def _check_output_format(cls, value: object) -> OutputFormat:
        return parse_output_format(value)  # type: ignore[arg-type]


class PieceDecodeConfig(BaseModel):
    """
    Top-level container for a YAML config file.

    A file might hold only global: for logging settings, or global: plus
    decode: to pin a model and formats for a recurring job.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    decode: Optional[DecodeSection] = Field(default=None)
