# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Reader for packed id files used by the map input format.

The file is a flat array of unsigned 16-bit little-endian integers: no
header, no length prefix, no padding. A trailing odd byte can't form an id
and is dropped.
"""

import struct
from pathlib import Path

from piecedecode.logging.logger import get_logger

ID_WIDTH_BYTES = 2


def unpack_ids(data: bytes) -> list[int]:
    """Unpack as many whole little-endian uint16 values as data holds."""
    count = len(data) // ID_WIDTH_BYTES
    return list(struct.unpack(f"<{count}H", data[: count * ID_WIDTH_BYTES]))


def read_id_file(path: str | Path) -> list[int]:
    """
    Read a packed id file into a list of ints.

    An unreadable file is reported on the error log and read as empty, so
    one missing shard doesn't abort a long map run. Text inputs behave
    differently and abort on open failure.
    """
    logger = get_logger("piecedecode.decode.binary")

    try:
        if path == "":
            raise FileNotFoundError("the map input format needs a file path, stdin is not supported")
        data = Path(path).read_bytes()
    except OSError as err:
        logger.error(
            "Unable to open id file",
            extra={"path": str(path), "error": str(err)},
        )
        return []

    if len(data) % ID_WIDTH_BYTES:
        logger.debug(
            "Dropping trailing odd byte",
            extra={"path": str(path), "size_bytes": len(data)},
        )

    return unpack_ids(data)
