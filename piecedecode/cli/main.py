# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for piecedecode.

Turns tokenized text back into readable text with a pre-trained
tokenization model.

Usage:
    piecedecode --model m.model < pieces.txt
    piecedecode --model m.model --input_format id --output out.txt ids_a.txt ids_b.txt
    piecedecode --model m.model --input_format map shard_000.bin shard_001.bin
    piecedecode --config decode.yaml --log-level DEBUG

Flags that aren't given fall back to the decode: section of --config, then
to the built-in defaults.
"""

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from piecedecode.cli.commands import handle_decode
from piecedecode.cli.exit_codes import USER_ERROR
from piecedecode.runtime.environment import check_minimum_python


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on usage errors; we reserve 2 for config errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(USER_ERROR, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Every decode setting defaults to None here so the command can tell a
    flag that was passed from one that wasn't.
    """
    parser = _ArgumentParser(
        prog="piecedecode",
        description="Decode sub-word pieces, ids or packed id files back into text.",
    )
    parser.add_argument("--model", type=str, default=None, help="Model file name (required).")
    parser.add_argument(
        "--model_type",
        type=str,
        default=None,
        choices=["auto", "sentencepiece", "tokenizers"],
        help="Backend used to load --model (default: auto, by file extension).",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Input filename. When empty, positional files are read, else stdin.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output filename (default: stdout).",
    )
    parser.add_argument(
        "--input_format",
        type=str,
        default=None,
        help="Choose from piece, id or map (default: piece).",
    )
    parser.add_argument(
        "--output_format",
        type=str,
        default=None,
        help="Choose from string or proto (default: string).",
    )
    parser.add_argument(
        "--extra_options",
        type=str,
        default=None,
        help="':' separated decoder extra options, e.g. \"reverse\".",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (default: INFO).",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        dest="log_file",
        help="Also write the JSON log stream to this file.",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Input files, used when --input is not given.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    Parses the command line, runs the decode command, and exits with its
    return code.
    """
    check_minimum_python()
    args = build_parser().parse_args(argv)
    sys.exit(handle_decode(args))


if __name__ == "__main__":
    main()
