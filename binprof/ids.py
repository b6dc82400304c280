"""
Opaque identifier types referenced by profiler records.

Every identifier wraps the raw unsigned integer written by the runtime. The
processor and memory ids additionally encode the node that owns them, which
is what the visibility filter needs to know.

Realm packs those ids as (high to low bits):

    PROCESSOR:  tag:8 = 0x1d, owner_node:16, (unused):28, proc_idx:12
    MEMORY:     tag:8 = 0x1e, owner_node:16, (unused):32, mem_idx:8
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

OWNER_NODE_SHIFT = 40
OWNER_NODE_MASK = (1 << 16) - 1
PROC_INDEX_MASK = (1 << 12) - 1
MEM_INDEX_MASK = (1 << 8) - 1


@dataclass(frozen=True, order=True)
class NodeID:
    value: int

    def __int__(self) -> int:
        return self.value


class NodeOwned(Protocol):
    def node_id(self) -> NodeID: ...


def owner_node(raw: int) -> NodeID:
    return NodeID((raw >> OWNER_NODE_SHIFT) & OWNER_NODE_MASK)


@dataclass(frozen=True, order=True)
class ProcID:
    value: int

    def __int__(self) -> int:
        return self.value

    def node_id(self) -> NodeID:
        return owner_node(self.value)

    def proc_in_node(self) -> int:
        return self.value & PROC_INDEX_MASK


@dataclass(frozen=True, order=True)
class MemID:
    value: int

    def __int__(self) -> int:
        return self.value

    def node_id(self) -> NodeID:
        return owner_node(self.value)

    def mem_in_node(self) -> int:
        return self.value & MEM_INDEX_MASK


@dataclass(frozen=True, order=True)
class EventID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class InstUID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class InstID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class IPartID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class ISpaceID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class FSpaceID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class FieldID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class TreeID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class MapperCallKindID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class RuntimeCallKindID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class OpID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class TaskID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class VariantID:
    value: int

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class Timestamp:
    """Nanoseconds since the profiler's zero time."""

    ns: int

    def __int__(self) -> int:
        return self.ns


IDENTIFIER_TYPES = (
    NodeID,
    ProcID,
    MemID,
    EventID,
    InstUID,
    InstID,
    IPartID,
    ISpaceID,
    FSpaceID,
    FieldID,
    TreeID,
    MapperCallKindID,
    RuntimeCallKindID,
    OpID,
    TaskID,
    VariantID,
    Timestamp,
)
