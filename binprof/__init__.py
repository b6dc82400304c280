"""
Decoder for BinaryLegionProf profiler logs.
"""

from loguru import logger

from .codecs import Array, ByteReader, Point
from .container import GZIP_MAGIC, file_type_info, read_log_bytes
from .deserialize import (
    DecodedLog,
    ParseContext,
    decode_log,
    deserialize,
    deserialize_many,
    load_log,
    parse_log,
    record_counts,
)
from .errors import (
    BinprofError,
    ContainerError,
    DimensionError,
    FormatError,
    HeaderSyntaxError,
    InvalidStringError,
    MissingRecordFormatError,
    ShortReadError,
    TrailingBytesError,
    UnknownRecordTagError,
    UnknownValueFormatError,
    VersionError,
)
from .filtering import filter_record, is_on_visible_nodes
from .header import (
    FILETYPE_PREFIX,
    SUPPORTED_VERSION,
    FieldFormat,
    Header,
    RecordFormat,
    ValueFormat,
    parse_header,
    sniff_file_type,
)
from .ids import MemID, NodeID, ProcID, Timestamp
from .logging import configure_logging
from .records import RECORD_TYPES, Record
from .registry import REQUIRED_RECORD_KINDS, Registry, build_registry

# Silent as a library; binprof.logging.configure_logging turns output on.
logger.disable("binprof")

__all__ = [
    "Array",
    "ByteReader",
    "Point",
    "GZIP_MAGIC",
    "file_type_info",
    "read_log_bytes",
    "DecodedLog",
    "ParseContext",
    "decode_log",
    "load_log",
    "deserialize",
    "deserialize_many",
    "parse_log",
    "record_counts",
    "BinprofError",
    "ContainerError",
    "DimensionError",
    "FormatError",
    "HeaderSyntaxError",
    "InvalidStringError",
    "MissingRecordFormatError",
    "ShortReadError",
    "TrailingBytesError",
    "UnknownRecordTagError",
    "UnknownValueFormatError",
    "VersionError",
    "filter_record",
    "is_on_visible_nodes",
    "FILETYPE_PREFIX",
    "SUPPORTED_VERSION",
    "FieldFormat",
    "Header",
    "RecordFormat",
    "ValueFormat",
    "parse_header",
    "sniff_file_type",
    "MemID",
    "NodeID",
    "ProcID",
    "Timestamp",
    "configure_logging",
    "RECORD_TYPES",
    "Record",
    "REQUIRED_RECORD_KINDS",
    "Registry",
    "build_registry",
]
