from __future__ import annotations

import gzip
from pathlib import Path

import pytest
from loguru import logger

from binlog import LogBuilder


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def builder() -> LogBuilder:
    return LogBuilder()


@pytest.fixture
def write_log(tmp_path: Path):
    """Write a payload to ``tmp_path``, gzip-compressed unless ``raw`` is set."""

    def _write(name: str, payload: bytes, *, raw: bool = False) -> Path:
        path = tmp_path / name
        path.write_bytes(payload if raw else gzip.compress(payload))
        return path

    return _write
