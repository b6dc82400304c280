from __future__ import annotations

import gzip
import zlib
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from .errors import ContainerError
from .header import sniff_file_type

GZIP_MAGIC = b"\x1f\x8b"


def read_log_bytes(path: str | Path) -> bytes:
    """
    Return the decompressed payload stored at ``path``.

    The runtime writes gzip members, but hand-unpacked logs are also common,
    so a file without the gzip magic is taken as the payload itself.
    """

    path = Path(path)
    blob = path.read_bytes()
    if not blob.startswith(GZIP_MAGIC):
        logger.debug("{}: {} bytes, not gzip-compressed", path, len(blob))
        return blob
    try:
        payload = gzip.decompress(blob)
    except (EOFError, zlib.error, gzip.BadGzipFile) as exc:
        raise ContainerError(f"{path}: corrupt gzip container: {exc}") from exc
    logger.debug("{}: inflated {} -> {} bytes", path, len(blob), len(payload))
    return payload


def file_type_info(path: str | Path) -> Tuple[str, Optional[Tuple[int, int]]]:
    """Classify a log as ``binary`` or ``ascii`` without decoding its body."""

    return sniff_file_type(read_log_bytes(path))
