# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The decode command.

One function runs the whole pipeline and turns every failure into an exit
code:

  config (YAML + flags) -> model load -> format dispatch -> batch run

Each stage catches only the errors it is responsible for, logs one ERROR
record to stderr, and returns. The output sink is opened by a with block
around the batch run, so it is flushed and closed on success, on a decode
failure, and on Ctrl-C alike.

No print() calls. Decoded text goes to the sink, everything else through
the structured logger.
"""

import argparse
import logging
from functools import partial
from pathlib import Path
from typing import Any, Optional

from piecedecode.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, VALIDATION_ERROR
from piecedecode.config.exceptions import ConfigError
from piecedecode.config.loader import load_config, resolve_decode_config
from piecedecode.config.schema import DecodeConfig, GlobalConfig, PieceDecodeConfig
from piecedecode.decode.dispatch import UnitDecoder, build_unit_decoder
from piecedecode.decode.runner import resolve_input_sources, run_batch
from piecedecode.logging.logger import configure_logging, get_logger
from piecedecode.runtime.environment import get_system_info
from piecedecode.tokenizer.exceptions import DecodeError, ModelError
from piecedecode.tokenizer.loader import load_model
from piecedecode.tokenizer.record import DecodeRecord
from piecedecode.utils.filesystem import InputOpenError, OutputOpenError, open_writable


def _setup_logging(args: argparse.Namespace, global_config: GlobalConfig) -> logging.Logger:
    """Configure logging from flags first, then the YAML global: section."""
    log_level = args.log_level or global_config.log_level
    log_file = args.log_file or global_config.log_file
    configure_logging(log_level, Path(log_file) if log_file else None)
    return get_logger("piecedecode.cli.decode")


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """
    Pull the decode settings the user actually passed on the command line.

    Flags that weren't given are None so the YAML file (or the schema
    default) decides them.
    """
    inputs: Optional[tuple[str, ...]] = None
    if args.input or args.inputs:
        inputs = tuple(resolve_input_sources(args.input or "", args.inputs or []))

    return {
        "model": args.model,
        "model_type": args.model_type,
        "inputs": inputs,
        "output": args.output,
        "input_format": args.input_format,
        "output_format": args.output_format,
        "extra_options": args.extra_options,
    }


def _load_run_config(
    args: argparse.Namespace,
) -> tuple[int, Optional[DecodeConfig], logging.Logger]:
    """
    Build the immutable run configuration.

    Returns a tuple of (exit_code, config, logger). If exit_code is not
    SUCCESS, the caller should return it immediately.
    """
    file_config: Optional[PieceDecodeConfig] = None
    config_error: Optional[ConfigError] = None

    if args.config is not None:
        try:
            file_config = load_config(Path(args.config))
        except ConfigError as err:
            config_error = err

    global_config = file_config.global_config if file_config is not None else GlobalConfig()
    logger = _setup_logging(args, global_config)

    if config_error is not None:
        logger.error("Configuration error", extra={"config": args.config, "error": str(config_error)})
        return CONFIG_ERROR, None, logger

    decode_section = file_config.decode if file_config is not None else None
    try:
        config = resolve_decode_config(decode_section, _collect_overrides(args))
    except ConfigError as err:
        logger.error("Configuration error", extra={"error": str(err)})
        return CONFIG_ERROR, None, logger

    return SUCCESS, config, logger


def _forward_record(logger: logging.Logger, record: DecodeRecord) -> None:
    """Proto output never reaches the sink; note each record at debug level."""
    logger.debug(
        "Decoded record",
        extra={"piece_count": len(record.pieces), "text_length": len(record.text)},
    )


def handle_decode(args: argparse.Namespace) -> int:
    """Decode pieces, ids or packed id files back into text."""
    exit_code, config, logger = _load_run_config(args)
    if exit_code != SUCCESS or config is None:
        return exit_code

    logger.debug("Environment", extra=get_system_info()._asdict())

    try:
        model = load_model(Path(config.model), config.model_type, config.extra_options)
    except ModelError as err:
        logger.error("Model load failed", extra={"model": config.model, "error": str(err)})
        return VALIDATION_ERROR

    logger.info(
        "Decode started",
        extra={
            "model": config.model,
            "backend": model.backend,
            "input_format": config.input_format.value,
            "output_format": config.output_format.value,
            "sources": len(config.inputs),
        },
    )

    unit_decoder: Optional[UnitDecoder] = None
    try:
        with open_writable(config.output) as sink:
            unit_decoder = build_unit_decoder(
                model,
                config.input_format,
                config.output_format,
                sink,
                on_record=partial(_forward_record, logger),
            )
            stats = run_batch(config.inputs, unit_decoder)
    except OutputOpenError as err:
        logger.error("Cannot open output", extra={"output": config.output, "error": str(err)})
        return RUNTIME_ERROR
    except InputOpenError as err:
        logger.error("Cannot open input", extra={"error": str(err)})
        return RUNTIME_ERROR
    except DecodeError as err:
        logger.error(
            "Decode failed",
            extra={"error": str(err), "units_completed": unit_decoder.units if unit_decoder else 0},
        )
        return RUNTIME_ERROR
    except KeyboardInterrupt:
        logger.error("Interrupted", extra={"output": config.output})
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Runtime error", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    logger.info(
        "Decode finished",
        extra={"sources": stats.sources, "units": stats.units, "output": config.output or "<stdout>"},
    )
    return SUCCESS
