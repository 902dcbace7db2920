# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: reads YAML from disk and produces validated, frozen configs.

The loading pipeline is deliberately simple and linear:
  1. Read the file text
  2. Parse as YAML into a plain dict
  3. Hand the dict to pydantic for schema validation
  4. Overlay command-line values and validate the final DecodeConfig

If anything goes wrong at any step, we fail immediately with a clear error.
A broken config should stop the run before it decodes anything.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from piecedecode.config.exceptions import ConfigLoadError, ConfigValidationError
from piecedecode.config.schema import DecodeConfig, DecodeSection, PieceDecodeConfig


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    # An empty file is a valid "use all defaults" config.
    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_config(config_path: Path) -> PieceDecodeConfig:
    """
    Load and validate a config file.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (wrong types, unknown keys).
    """
    raw_data = _read_yaml_file(config_path)

    try:
        return PieceDecodeConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err


def resolve_decode_config(
    section: Optional[DecodeSection],
    overrides: Mapping[str, Any],
) -> DecodeConfig:
    """
    Merge file values and command-line values into the final run config.

    Precedence is command line, then the YAML decode: section, then the
    schema defaults. A None override means the flag was not given.

    Raises:
        ConfigValidationError: Missing model, unknown format names, bad types.
    """
    values: dict[str, Any] = {}
    if section is not None:
        values.update(section.model_dump(exclude_none=True))
    values.update({key: value for key, value in overrides.items() if value is not None})

    if not values.get("model"):
        raise ConfigValidationError("A model path is required: pass --model or set decode.model")

    try:
        return DecodeConfig.model_validate(values)
    except ValidationError as err:
        raise ConfigValidationError(_summarize_validation_error(err)) from err


def _summarize_validation_error(err: ValidationError) -> str:
    """
    Flatten pydantic's error list into one line per problem.

    pydantic prefixes messages raised from validators with 'Value error, ';
    we drop that so the format diagnostics read the same as anywhere else.
    """
    lines: list[str] = []
    for error in err.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        lines.append(f"{location}: {message}" if location else message)
    return "; ".join(lines)
