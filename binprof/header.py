"""
Parser for the textual preamble of a BinaryLegionProf log.

The preamble looks like this (one declaration per record kind, ids are
chosen per file by the writer):

    FileType: BinaryLegionProf v: 1.0
    ZeroTime {id:6, zero_time:long long:8}
    TaskInfo {id:33, op_id:UniqueID:8, task_id:TaskID:4, ...}
    <blank line>

The binary body starts right after the blank line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from loguru import logger

from .errors import HeaderSyntaxError, UnknownValueFormatError, VersionError

FILETYPE_PREFIX = b"FileType: BinaryLegionProf v: "
SUPPORTED_VERSION = (1, 0)

_FILETYPE_RE = re.compile(rb"FileType: BinaryLegionProf v: (?P<major>[0-9]+)\.(?P<minor>[0-9]+)\n")
_RECORD_OPEN_RE = re.compile(rb"(?P<name>[A-Za-z0-9_]+) \{id:(?P<id>[0-9]+), ")
_FIELD_RE = re.compile(rb"(?P<name>[A-Za-z0-9_]+):(?P<type>[A-Za-z0-9_ ]+):(?P<size>-?[0-9]+)")
_FIELD_SEP = b", "
_RECORD_CLOSE = b"}\n"
_NEWLINE = b"\n"

U32_MAX = (1 << 32) - 1


class ValueFormat(Enum):
    """Field kinds a header may declare, keyed by their exact type token."""

    ARRAY = "array"
    BOOL = "bool"
    DEP_PART_OP_KIND = "DepPartOpKind"
    ID_TYPE = "IDType"
    INST_ID = "InstID"
    MAPPING_CALL_KIND = "MappingCallKind"
    MAX_DIM = "maxdim"
    MEM_ID = "MemID"
    MEM_KIND = "MemKind"
    MESSAGE_KIND = "MessageKind"
    POINT = "point"
    PROC_ID = "ProcID"
    PROC_KIND = "ProcKind"
    RUNTIME_CALL_KIND = "RuntimeCallKind"
    STRING = "string"
    TASK_ID = "TaskID"
    TIMESTAMP = "timestamp_t"
    U32 = "unsigned"
    U64 = "unsigned long long"
    I64 = "long long"
    UNIQUE_ID = "UniqueID"
    VARIANT_ID = "VariantID"

    @classmethod
    def from_token(cls, token: str, *, offset: int | None = None) -> "ValueFormat":
        try:
            return cls(token)
        except ValueError:
            raise UnknownValueFormatError(token, offset=offset) from None


@dataclass(frozen=True)
class FieldFormat:
    name: str
    value: ValueFormat
    size: int


@dataclass(frozen=True)
class RecordFormat:
    id: int
    name: str
    fields: Tuple[FieldFormat, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "fields": [
                {"name": field.name, "type": field.value.value, "size": field.size}
                for field in self.fields
            ],
        }


@dataclass(frozen=True)
class Header:
    version: Tuple[int, int]
    formats: Tuple[RecordFormat, ...]
    body_offset: int


def parse_filetype(data: bytes, offset: int = 0) -> Tuple[Tuple[int, int], int]:
    """Parse the ``FileType`` line; return ``(version, next_offset)``."""

    m = _FILETYPE_RE.match(data, offset)
    if m is None:
        raise HeaderSyntaxError("malformed FileType line", line=_line_at(data, offset), offset=offset)
    version = (int(m.group("major")), int(m.group("minor")))
    return version, m.end()


def parse_record_format(data: bytes, offset: int) -> Tuple[RecordFormat, int]:
    """Parse one ``Name {id:N, field, ...}`` declaration line."""

    m = _RECORD_OPEN_RE.match(data, offset)
    if m is None:
        raise HeaderSyntaxError("malformed record format line", line=_line_at(data, offset), offset=offset)
    record_id = int(m.group("id"))
    if record_id > U32_MAX:
        raise HeaderSyntaxError("record id does not fit in u32", line=_line_at(data, offset), offset=offset)
    name = m.group("name").decode("ascii")

    fields: List[FieldFormat] = []
    pos = m.end()
    while True:
        fm = _FIELD_RE.match(data, pos)
        if fm is None:
            raise HeaderSyntaxError(
                f"malformed field declaration in {name}", line=_line_at(data, offset), offset=pos
            )
        value = ValueFormat.from_token(fm.group("type").decode("ascii"), offset=fm.start("type"))
        fields.append(FieldFormat(fm.group("name").decode("ascii"), value, int(fm.group("size"))))
        pos = fm.end()
        if data.startswith(_FIELD_SEP, pos):
            pos += len(_FIELD_SEP)
            continue
        if data.startswith(_RECORD_CLOSE, pos):
            pos += len(_RECORD_CLOSE)
            break
        raise HeaderSyntaxError(
            f"expected ', ' or '}}' after field of {name}", line=_line_at(data, offset), offset=pos
        )
    return RecordFormat(id=record_id, name=name, fields=tuple(fields)), pos


def parse_header(data: bytes) -> Header:
    """
    Parse the complete preamble, validating the version.

    At least one record format must be declared and the list must be closed
    by a blank line.
    """

    version, pos = parse_filetype(data)
    if version != SUPPORTED_VERSION:
        raise VersionError(version, offset=0)

    formats: List[RecordFormat] = []
    while not data.startswith(_NEWLINE, pos):
        if pos >= len(data):
            raise HeaderSyntaxError("header ended without a blank line", offset=pos)
        record_format, pos = parse_record_format(data, pos)
        formats.append(record_format)
    if not formats:
        raise HeaderSyntaxError("header declares no record formats", offset=pos)
    pos += len(_NEWLINE)

    logger.debug(
        "header v{}.{}: {} record formats, body at 0x{:X}", version[0], version[1], len(formats), pos
    )
    return Header(version=version, formats=tuple(formats), body_offset=pos)


def sniff_file_type(data: bytes) -> Tuple[str, Optional[Tuple[int, int]]]:
    """
    Classify a payload by its first line only.

    Returns ``("binary", (major, minor))`` for BinaryLegionProf logs of any
    version and ``("ascii", None)`` for everything else (the legacy text logs).
    """

    m = _FILETYPE_RE.match(data)
    if m is None:
        return "ascii", None
    return "binary", (int(m.group("major")), int(m.group("minor")))


def _line_at(data: bytes, offset: int) -> bytes:
    end = data.find(_NEWLINE, offset)
    return data[offset:] if end == -1 else data[offset:end]
