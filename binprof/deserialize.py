"""
Entry points that turn a profiler log into an ordered list of records.

``parse_log`` works on an in-memory payload, ``deserialize`` reads one file
through the container layer, and ``deserialize_many`` fans independent files
out to worker processes.
"""

from __future__ import annotations

import os
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import AbstractSet, Any, Callable, Iterable, List, Optional, Sequence

from loguru import logger

from .codecs import ByteReader
from .container import read_log_bytes
from .errors import FormatError, InvalidStringError, ShortReadError, TrailingBytesError, UnknownRecordTagError
from .filtering import filter_record
from .header import parse_header
from .ids import NodeID
from .records import MachineDesc, MaxDimDesc, Record
from .registry import build_registry

# Failures that end the record loop; anything left over is reported afterwards.
_STOPPING_ERRORS = (ShortReadError, InvalidStringError, UnknownRecordTagError)


@dataclass
class ParseContext:
    """Running state carried from one record to the next within a file."""

    max_dim: Optional[int] = None
    node_id: Optional[NodeID] = None

    def observe(self, record: Record) -> None:
        if isinstance(record, MaxDimDesc):
            self.max_dim = record.max_dim
        elif isinstance(record, MachineDesc):
            if self.node_id is None:
                self.node_id = record.node_id
            elif record.node_id != self.node_id:
                logger.warning(
                    "ignoring MachineDesc for node {}: log already belongs to node {}",
                    int(record.node_id),
                    int(self.node_id),
                )


@dataclass(frozen=True)
class DecodedLog:
    """Records of one log together with the context they were decoded in."""

    records: List[Record]
    node_id: Optional[NodeID]
    max_dim: Optional[int]


def decode_log(
    data: bytes,
    visible_nodes: AbstractSet[NodeID],
    filter_input: bool,
    *,
    required: Optional[Iterable[str]] = None,
) -> DecodedLog:
    """
    Decode every record of a decompressed payload, in file order.

    With ``filter_input`` set, records are passed through ``filter_record``
    using the node id known at the time each record is seen. The returned
    node id is the one the log declares, even when its MachineDesc record
    was itself filtered out.
    """

    if filter_input and not visible_nodes:
        raise ValueError("visible_nodes must not be empty when filtering")

    header = parse_header(data)
    registry = build_registry(header.formats, required=required)
    reader = ByteReader(data, header.body_offset)
    context = ParseContext()

    records: List[Record] = []
    dropped = 0
    stopped_by: Optional[FormatError] = None
    while not reader.at_end():
        try:
            record = registry.decode(reader, context.max_dim)
        except _STOPPING_ERRORS as exc:
            stopped_by = exc
            break
        context.observe(record)
        if filter_input and not filter_record(record, visible_nodes, context.node_id):
            dropped += 1
            continue
        records.append(record)

    if not reader.at_end():
        raise TrailingBytesError(reader.remaining, offset=reader.offset) from stopped_by

    logger.debug(
        "decoded {} records ({} filtered out), node={}",
        len(records),
        dropped,
        None if context.node_id is None else int(context.node_id),
    )
    return DecodedLog(records=records, node_id=context.node_id, max_dim=context.max_dim)


def parse_log(
    data: bytes,
    visible_nodes: AbstractSet[NodeID],
    filter_input: bool,
    *,
    required: Optional[Iterable[str]] = None,
) -> List[Record]:
    return decode_log(data, visible_nodes, filter_input, required=required).records


def load_log(
    path: str | Path,
    visible_nodes: AbstractSet[NodeID],
    filter_input: bool,
    *,
    required: Optional[Iterable[str]] = None,
) -> DecodedLog:
    payload = read_log_bytes(path)
    logger.debug("{}: parsing {} payload bytes", path, len(payload))
    return decode_log(payload, visible_nodes, filter_input, required=required)


def deserialize(
    path: str | Path,
    visible_nodes: AbstractSet[NodeID],
    filter_input: bool,
    *,
    required: Optional[Iterable[str]] = None,
) -> List[Record]:
    return load_log(path, visible_nodes, filter_input, required=required).records


def deserialize_many(
    paths: Sequence[str | Path],
    visible_nodes: AbstractSet[NodeID],
    filter_input: bool,
    *,
    max_workers: int | None = None,
    loader: Callable[..., Any] = deserialize,
) -> List[Any]:
    """
    Decode several logs, one per worker process; results follow ``paths``.

    ``loader`` is called as ``loader(path, visible_nodes=..., filter_input=...)``
    and must be a module-level function so it can be sent to workers. Pass
    ``load_log`` to get a ``DecodedLog`` per file instead of a record list.
    """

    paths = list(paths)
    if not paths:
        return []

    handler = partial(loader, visible_nodes=frozenset(visible_nodes), filter_input=filter_input)
    workers = _resolve_workers(len(paths), max_workers)
    logger.debug("deserializing {} logs with {} worker(s)", len(paths), workers)

    if workers == 1:
        return [handler(path) for path in paths]
    with ProcessPoolExecutor(max_workers=workers) as pool:
        # map() yields in submission order.
        return list(pool.map(handler, paths))


def _resolve_workers(count: int, max_workers: int | None) -> int:
    cpu = os.cpu_count() or 1
    if max_workers is None:
        return min(cpu, count)
    return max(1, min(max_workers, count))


def record_counts(records: Iterable[Record]) -> Counter:
    return Counter(record.kind() for record in records)
