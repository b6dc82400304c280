"""
Typed records decoded from the binary body.

Each record kind is a frozen dataclass whose fields are declared in wire
order. The ``wire(...)`` marker on every field names the codec that reads it,
so a record's decoder is derived from the class definition itself and the
field order on the wire cannot drift from the field order of the type.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Type, Union, get_args

from .codecs import Array, ByteReader, Point
from .ids import (
    IDENTIFIER_TYPES,
    EventID,
    FieldID,
    FSpaceID,
    InstID,
    InstUID,
    IPartID,
    ISpaceID,
    MapperCallKindID,
    MemID,
    NodeID,
    OpID,
    ProcID,
    RuntimeCallKindID,
    TaskID,
    Timestamp,
    TreeID,
    VariantID,
)

# A codec reads one field given the reader and the running dimensionality.
Codec = Callable[[ByteReader, Optional[int]], Any]


def _u32(reader: ByteReader, max_dim: Optional[int]) -> int:
    return reader.u32()


def _i32(reader: ByteReader, max_dim: Optional[int]) -> int:
    return reader.i32()


def _u64(reader: ByteReader, max_dim: Optional[int]) -> int:
    return reader.u64()


def _i64(reader: ByteReader, max_dim: Optional[int]) -> int:
    return reader.i64()


def _bool(reader: ByteReader, max_dim: Optional[int]) -> bool:
    return reader.boolean()


def _string(reader: ByteReader, max_dim: Optional[int]) -> str:
    return reader.string()


def _array(reader: ByteReader, max_dim: Optional[int]) -> Array:
    return reader.array(max_dim)


def _point(reader: ByteReader, max_dim: Optional[int]) -> Point:
    return reader.point(max_dim)


def _wrapped(id_type: type, read: Codec) -> Codec:
    def codec(reader: ByteReader, max_dim: Optional[int]) -> Any:
        return id_type(read(reader, max_dim))

    return codec


U32 = _u32
I32 = _i32
U64 = _u64
I64 = _i64
BOOL = _bool
STRING = _string
ARRAY = _array
POINT = _point

EVENT_ID = _wrapped(EventID, _u64)
INST_UID = _wrapped(InstUID, _u64)
INST_ID = _wrapped(InstID, _u64)
IPART_ID = _wrapped(IPartID, _u64)
ISPACE_ID = _wrapped(ISpaceID, _u64)
FSPACE_ID = _wrapped(FSpaceID, _u64)
FIELD_ID = _wrapped(FieldID, _u32)
TREE_ID = _wrapped(TreeID, _u32)
MAPPER_CALL_KIND_ID = _wrapped(MapperCallKindID, _u32)
RUNTIME_CALL_KIND_ID = _wrapped(RuntimeCallKindID, _u32)
MEM_ID = _wrapped(MemID, _u64)
OP_ID = _wrapped(OpID, _u64)
PROC_ID = _wrapped(ProcID, _u64)
TASK_ID = _wrapped(TaskID, _u32)
TIMESTAMP = _wrapped(Timestamp, _u64)
VARIANT_ID = _wrapped(VariantID, _u32)
# MachineDesc writes the node as a 32-bit value.
NODE_ID = _wrapped(NodeID, _u32)


def wire(codec: Codec) -> Any:
    return field(metadata={"wire": codec})


def _plain(value: Any) -> Any:
    if isinstance(value, IDENTIFIER_TYPES):
        return int(value)
    if isinstance(value, (Array, Point)):
        return list(value.values)
    return value


@dataclass(frozen=True)
class Record:
    """Base class of every decoded record kind."""

    _layout: ClassVar[Optional[Tuple[Tuple[str, Codec], ...]]] = None

    @classmethod
    def kind(cls) -> str:
        return cls.__name__

    @classmethod
    def layout(cls) -> Tuple[Tuple[str, Codec], ...]:
        layout = cls.__dict__.get("_layout")
        if layout is None:
            layout = tuple((f.name, f.metadata["wire"]) for f in fields(cls))
            cls._layout = layout
        return layout

    @classmethod
    def decode(cls, reader: ByteReader, max_dim: Optional[int]) -> "Record":
        values = {}
        for name, codec in cls.layout():
            values[name] = codec(reader, max_dim)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind()}
        for f in fields(self):
            payload[f.name] = _plain(getattr(self, f.name))
        return payload


# --- descriptors -----------------------------------------------------------


@dataclass(frozen=True)
class MapperCallDesc(Record):
    kind_id: MapperCallKindID = wire(MAPPER_CALL_KIND_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class RuntimeCallDesc(Record):
    kind_id: RuntimeCallKindID = wire(RUNTIME_CALL_KIND_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class MetaDesc(Record):
    kind_id: VariantID = wire(VARIANT_ID)
    message: bool = wire(BOOL)
    ordered_vc: bool = wire(BOOL)
    name: str = wire(STRING)


@dataclass(frozen=True)
class OpDesc(Record):
    kind_id: int = wire(U32)
    name: str = wire(STRING)


@dataclass(frozen=True)
class MaxDimDesc(Record):
    max_dim: int = wire(I32)


@dataclass(frozen=True)
class MachineDesc(Record):
    node_id: NodeID = wire(NODE_ID)
    num_nodes: int = wire(U32)


@dataclass(frozen=True)
class ZeroTime(Record):
    zero_time: int = wire(I64)


@dataclass(frozen=True)
class ProcDesc(Record):
    proc_id: ProcID = wire(PROC_ID)
    proc_kind: int = wire(I32)


@dataclass(frozen=True)
class MemDesc(Record):
    mem_id: MemID = wire(MEM_ID)
    mem_kind: int = wire(I32)
    capacity: int = wire(U64)


@dataclass(frozen=True)
class ProcMDesc(Record):
    proc_id: ProcID = wire(PROC_ID)
    mem_id: MemID = wire(MEM_ID)
    bandwidth: int = wire(U32)
    latency: int = wire(U32)


@dataclass(frozen=True)
class IndexSpacePointDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)
    dim: int = wire(U32)
    rem: Point = wire(POINT)


@dataclass(frozen=True)
class IndexSpaceRectDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)
    dim: int = wire(U32)
    rem: Array = wire(ARRAY)


@dataclass(frozen=True)
class IndexSpaceEmptyDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)


@dataclass(frozen=True)
class FieldDesc(Record):
    fspace_id: FSpaceID = wire(FSPACE_ID)
    field_id: FieldID = wire(FIELD_ID)
    size: int = wire(U64)
    name: str = wire(STRING)


@dataclass(frozen=True)
class FieldSpaceDesc(Record):
    fspace_id: FSpaceID = wire(FSPACE_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class PartDesc(Record):
    unique_id: IPartID = wire(IPART_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class IndexSpaceDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class IndexSubSpaceDesc(Record):
    parent_id: IPartID = wire(IPART_ID)
    ispace_id: ISpaceID = wire(ISPACE_ID)


@dataclass(frozen=True)
class IndexPartitionDesc(Record):
    parent_id: ISpaceID = wire(ISPACE_ID)
    unique_id: IPartID = wire(IPART_ID)
    disjoint: bool = wire(BOOL)
    point0: int = wire(U64)


@dataclass(frozen=True)
class IndexSpaceSizeDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)
    dense_size: int = wire(U64)
    sparse_size: int = wire(U64)
    is_sparse: bool = wire(BOOL)


@dataclass(frozen=True)
class LogicalRegionDesc(Record):
    ispace_id: ISpaceID = wire(ISPACE_ID)
    fspace_id: int = wire(U32)
    tree_id: TreeID = wire(TREE_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class PhysicalInstRegionDesc(Record):
    inst_uid: InstUID = wire(INST_UID)
    ispace_id: ISpaceID = wire(ISPACE_ID)
    fspace_id: int = wire(U32)
    tree_id: TreeID = wire(TREE_ID)


@dataclass(frozen=True)
class PhysicalInstLayoutDesc(Record):
    inst_uid: InstUID = wire(INST_UID)
    field_id: FieldID = wire(FIELD_ID)
    fspace_id: int = wire(U32)
    has_align: bool = wire(BOOL)
    eqk: int = wire(U32)
    align_desc: int = wire(U32)


@dataclass(frozen=True)
class PhysicalInstDimOrderDesc(Record):
    inst_uid: InstUID = wire(INST_UID)
    dim: int = wire(U32)
    dim_kind: int = wire(U32)


@dataclass(frozen=True)
class PhysicalInstanceUsage(Record):
    inst_uid: InstUID = wire(INST_UID)
    op_id: OpID = wire(OP_ID)
    index_id: int = wire(U32)
    field_id: FieldID = wire(FIELD_ID)


@dataclass(frozen=True)
class TaskKind(Record):
    task_id: TaskID = wire(TASK_ID)
    name: str = wire(STRING)
    overwrite: bool = wire(BOOL)


@dataclass(frozen=True)
class TaskVariant(Record):
    task_id: TaskID = wire(TASK_ID)
    variant_id: VariantID = wire(VARIANT_ID)
    name: str = wire(STRING)


@dataclass(frozen=True)
class OperationInstance(Record):
    op_id: OpID = wire(OP_ID)
    parent_id: OpID = wire(OP_ID)
    kind_id: int = wire(U32)
    provenance: str = wire(STRING)


@dataclass(frozen=True)
class MultiTask(Record):
    op_id: OpID = wire(OP_ID)
    task_id: TaskID = wire(TASK_ID)


@dataclass(frozen=True)
class SliceOwner(Record):
    parent_id: int = wire(U64)
    op_id: OpID = wire(OP_ID)


# --- timed events ----------------------------------------------------------


@dataclass(frozen=True)
class TaskWaitInfo(Record):
    op_id: OpID = wire(OP_ID)
    task_id: TaskID = wire(TASK_ID)
    variant_id: VariantID = wire(VARIANT_ID)
    wait_start: Timestamp = wire(TIMESTAMP)
    wait_ready: Timestamp = wire(TIMESTAMP)
    wait_end: Timestamp = wire(TIMESTAMP)


@dataclass(frozen=True)
class MetaWaitInfo(Record):
    op_id: OpID = wire(OP_ID)
    lg_id: VariantID = wire(VARIANT_ID)
    wait_start: Timestamp = wire(TIMESTAMP)
    wait_ready: Timestamp = wire(TIMESTAMP)
    wait_end: Timestamp = wire(TIMESTAMP)


@dataclass(frozen=True)
class TaskInfo(Record):
    op_id: OpID = wire(OP_ID)
    task_id: TaskID = wire(TASK_ID)
    variant_id: VariantID = wire(VARIANT_ID)
    proc_id: ProcID = wire(PROC_ID)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class GPUTaskInfo(Record):
    op_id: OpID = wire(OP_ID)
    task_id: TaskID = wire(TASK_ID)
    variant_id: VariantID = wire(VARIANT_ID)
    proc_id: ProcID = wire(PROC_ID)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    gpu_start: Timestamp = wire(TIMESTAMP)
    gpu_stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class MetaInfo(Record):
    op_id: OpID = wire(OP_ID)
    lg_id: VariantID = wire(VARIANT_ID)
    proc_id: ProcID = wire(PROC_ID)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class CopyInfo(Record):
    op_id: OpID = wire(OP_ID)
    size: int = wire(U64)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)
    collective: int = wire(U32)


@dataclass(frozen=True)
class CopyInstInfo(Record):
    src: MemID = wire(MEM_ID)
    dst: MemID = wire(MEM_ID)
    src_fid: FieldID = wire(FIELD_ID)
    dst_fid: FieldID = wire(FIELD_ID)
    src_inst: InstUID = wire(INST_UID)
    dst_inst: InstUID = wire(INST_UID)
    fevent: EventID = wire(EVENT_ID)
    num_hops: int = wire(U32)
    indirect: bool = wire(BOOL)


@dataclass(frozen=True)
class FillInfo(Record):
    op_id: OpID = wire(OP_ID)
    size: int = wire(U64)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class FillInstInfo(Record):
    dst: MemID = wire(MEM_ID)
    fid: FieldID = wire(FIELD_ID)
    dst_inst: InstUID = wire(INST_UID)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class InstTimelineInfo(Record):
    inst_uid: InstUID = wire(INST_UID)
    inst_id: InstID = wire(INST_ID)
    mem_id: MemID = wire(MEM_ID)
    size: int = wire(U64)
    op_id: OpID = wire(OP_ID)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    destroy: Timestamp = wire(TIMESTAMP)


@dataclass(frozen=True)
class PartitionInfo(Record):
    op_id: OpID = wire(OP_ID)
    part_op: int = wire(I32)
    create: Timestamp = wire(TIMESTAMP)
    ready: Timestamp = wire(TIMESTAMP)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)


@dataclass(frozen=True)
class MapperCallInfo(Record):
    kind_id: MapperCallKindID = wire(MAPPER_CALL_KIND_ID)
    op_id: OpID = wire(OP_ID)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    proc_id: ProcID = wire(PROC_ID)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class RuntimeCallInfo(Record):
    kind_id: RuntimeCallKindID = wire(RUNTIME_CALL_KIND_ID)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    proc_id: ProcID = wire(PROC_ID)
    fevent: EventID = wire(EVENT_ID)


@dataclass(frozen=True)
class ProfTaskInfo(Record):
    proc_id: ProcID = wire(PROC_ID)
    op_id: OpID = wire(OP_ID)
    start: Timestamp = wire(TIMESTAMP)
    stop: Timestamp = wire(TIMESTAMP)
    fevent: EventID = wire(EVENT_ID)


AnyRecord = Union[
    MapperCallDesc,
    RuntimeCallDesc,
    MetaDesc,
    OpDesc,
    MaxDimDesc,
    MachineDesc,
    ZeroTime,
    ProcDesc,
    MemDesc,
    ProcMDesc,
    IndexSpacePointDesc,
    IndexSpaceRectDesc,
    IndexSpaceEmptyDesc,
    FieldDesc,
    FieldSpaceDesc,
    PartDesc,
    IndexSpaceDesc,
    IndexSubSpaceDesc,
    IndexPartitionDesc,
    IndexSpaceSizeDesc,
    LogicalRegionDesc,
    PhysicalInstRegionDesc,
    PhysicalInstLayoutDesc,
    PhysicalInstDimOrderDesc,
    PhysicalInstanceUsage,
    TaskKind,
    TaskVariant,
    OperationInstance,
    MultiTask,
    SliceOwner,
    TaskWaitInfo,
    MetaWaitInfo,
    TaskInfo,
    GPUTaskInfo,
    MetaInfo,
    CopyInfo,
    CopyInstInfo,
    FillInfo,
    FillInstInfo,
    InstTimelineInfo,
    PartitionInfo,
    MapperCallInfo,
    RuntimeCallInfo,
    ProfTaskInfo,
]

# Every kind this decoder understands, keyed by its header name, in the
# order the runtime declares them.
RECORD_TYPES: Dict[str, Type[Record]] = {cls.kind(): cls for cls in get_args(AnyRecord)}
