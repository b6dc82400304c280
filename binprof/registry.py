from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Type

from loguru import logger

from .codecs import ByteReader
from .errors import MissingRecordFormatError, UnknownRecordTagError
from .header import RecordFormat
from .records import RECORD_TYPES, Record

# Every kind must be declared by a log this decoder accepts.
REQUIRED_RECORD_KINDS: tuple[str, ...] = tuple(RECORD_TYPES)


@dataclass(frozen=True)
class Registry:
    """Per-file binding of wire tags to record decoders."""

    ids: Mapping[str, int]
    decoders: Mapping[int, Type[Record]]

    def __len__(self) -> int:
        return len(self.decoders)

    def tag_of(self, kind: str) -> int:
        return self.ids[kind]

    def decode(self, reader: ByteReader, max_dim: Optional[int]) -> Record:
        """Read one tag plus payload; on failure the cursor is left untouched."""

        start = reader.offset
        try:
            tag = reader.u32()
            record_type = self.decoders.get(tag)
            if record_type is None:
                raise UnknownRecordTagError(tag, offset=start)
            return record_type.decode(reader, max_dim)
        except BaseException:
            reader.seek(start)
            raise


def build_registry(
    formats: Sequence[RecordFormat],
    *,
    required: Optional[Iterable[str]] = None,
) -> Registry:
    """
    Bind each declared record kind to its decoder.

    Later declarations of the same name replace earlier ones. Names this
    decoder does not know are ignored; every name in ``required`` (all known
    kinds by default) must be declared.
    """

    ids: Dict[str, int] = {}
    for record_format in formats:
        ids[record_format.name] = record_format.id

    wanted = REQUIRED_RECORD_KINDS if required is None else tuple(required)
    unknown = [name for name in wanted if name not in RECORD_TYPES]
    if unknown:
        raise ValueError(f"cannot require record kinds this decoder does not know: {', '.join(unknown)}")
    missing = [name for name in wanted if name not in ids]
    if missing:
        raise MissingRecordFormatError(missing)

    decoders: Dict[int, Type[Record]] = {}
    for name, record_type in RECORD_TYPES.items():
        if name in ids:
            decoders[ids[name]] = record_type

    ignored = sorted(set(ids) - set(RECORD_TYPES))
    if ignored:
        logger.debug("ignoring undecodable record formats: {}", ", ".join(ignored))
    logger.debug("bound {} record decoders", len(decoders))
    return Registry(ids=ids, decoders=decoders)
