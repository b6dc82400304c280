from __future__ import annotations

import gzip

import pytest

from binprof.container import GZIP_MAGIC, file_type_info, read_log_bytes
from binprof.errors import BinprofError, ContainerError

PAYLOAD = b"FileType: BinaryLegionProf v: 1.0\nZeroTime {id:0, zero_time:long long:8}\n\n"


def test_gzip_member_is_inflated(write_log):
    path = write_log("prof.gz", PAYLOAD)
    assert path.read_bytes().startswith(GZIP_MAGIC)
    assert read_log_bytes(path) == PAYLOAD


def test_raw_payload_is_returned_unchanged(write_log):
    path = write_log("prof.bin", PAYLOAD, raw=True)
    assert read_log_bytes(str(path)) == PAYLOAD


def test_truncated_gzip_raises_container_error(tmp_path):
    path = tmp_path / "cut.gz"
    path.write_bytes(gzip.compress(PAYLOAD * 50)[:-12])
    with pytest.raises(ContainerError) as excinfo:
        read_log_bytes(path)
    assert isinstance(excinfo.value, OSError)
    assert isinstance(excinfo.value, BinprofError)
    assert excinfo.value.__cause__ is not None


def test_missing_file_raises_plain_os_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_log_bytes(tmp_path / "absent.gz")


def test_file_type_info(write_log):
    assert file_type_info(write_log("a.gz", PAYLOAD)) == ("binary", (1, 0))
    assert file_type_info(write_log("b.log", b"Prof Meta Desc 1 0 x\n", raw=True)) == ("ascii", None)
