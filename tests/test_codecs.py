from __future__ import annotations

import pytest

from binlog import boolean, cstr, i32, i64, u32, u64
from binprof.codecs import ByteReader
from binprof.errors import DimensionError, InvalidStringError, ShortReadError


def test_fixed_width_integers_are_little_endian():
    reader = ByteReader(u32(0xDEADBEEF) + i32(-2) + u64(1 << 63) + i64(-5) + b"\x7f")
    assert reader.u32() == 0xDEADBEEF
    assert reader.i32() == -2
    assert reader.u64() == 1 << 63
    assert reader.i64() == -5
    assert reader.u8() == 0x7F
    assert reader.at_end()


def test_boolean_treats_any_nonzero_byte_as_true():
    reader = ByteReader(boolean(False) + b"\x01\x02\xff")
    assert [reader.boolean() for _ in range(4)] == [False, True, True, True]


def test_short_read_leaves_cursor_in_place():
    reader = ByteReader(b"\x01\x02\x03")
    with pytest.raises(ShortReadError) as excinfo:
        reader.u32()
    assert excinfo.value.needed == 4
    assert excinfo.value.available == 3
    assert excinfo.value.offset == 0
    assert reader.offset == 0


def test_string_consumes_terminator():
    reader = ByteReader(cstr("hello") + cstr("") + cstr("zähler"))
    assert reader.string() == "hello"
    assert reader.string() == ""
    assert reader.string() == "zähler"
    assert reader.at_end()


def test_string_without_terminator_is_short():
    reader = ByteReader(b"abc")
    with pytest.raises(ShortReadError):
        reader.string()
    assert reader.offset == 0


def test_string_rejects_invalid_utf8():
    reader = ByteReader(b"\xff\xfe\x00")
    with pytest.raises(InvalidStringError) as excinfo:
        reader.string()
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_array_and_point_sizes_follow_max_dim():
    data = u64(*range(9))
    reader = ByteReader(data)
    array = reader.array(3)
    assert reader.offset == 48
    assert array.values == (0, 1, 2, 3, 4, 5)
    assert array.dim == 3
    point = reader.point(3)
    assert reader.offset == 72
    assert point.values == (6, 7, 8)
    assert point.dim == 3


def test_zero_dimension_consumes_nothing():
    reader = ByteReader(b"")
    assert reader.array(0).values == ()
    assert reader.point(0).values == ()
    assert reader.offset == 0


@pytest.mark.parametrize("max_dim", [None, -1])
def test_unusable_dimension_is_rejected(max_dim):
    reader = ByteReader(u64(1, 2))
    with pytest.raises(DimensionError) as excinfo:
        reader.point(max_dim)
    assert excinfo.value.max_dim == max_dim


def test_array_short_read_reports_needed_bytes():
    reader = ByteReader(u64(1, 2, 3))
    with pytest.raises(ShortReadError) as excinfo:
        reader.array(2)
    assert excinfo.value.needed == 32
    assert excinfo.value.available == 24
