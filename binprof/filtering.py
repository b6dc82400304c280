"""
Visibility filter for multi-node profiles.

Every node writes its own log, but records in it can mention processors and
memories of other nodes (copy and fill partners). When only a subset of the
nodes is of interest, logs written by other nodes still contribute the cheap
global descriptors and any event that touches a visible node; node-local
execution detail is dropped.
"""

from __future__ import annotations

from typing import AbstractSet, Optional

from .ids import NodeID, NodeOwned
from .records import (
    CopyInfo,
    CopyInstInfo,
    FillInfo,
    FillInstInfo,
    GPUTaskInfo,
    InstTimelineInfo,
    MemDesc,
    MetaInfo,
    PartitionInfo,
    ProcDesc,
    ProcMDesc,
    Record,
    TaskInfo,
)

ALWAYS_VISIBLE = (ProcDesc, MemDesc, ProcMDesc, CopyInfo, FillInfo, PartitionInfo)
PROC_SCOPED = (TaskInfo, GPUTaskInfo, MetaInfo)


def is_on_visible_nodes(visible_nodes: AbstractSet[NodeID], *owned: NodeOwned) -> bool:
    return any(item.node_id() in visible_nodes for item in owned)


def filter_record(
    record: Record,
    visible_nodes: AbstractSet[NodeID],
    node_id: Optional[NodeID],
) -> bool:
    """Return True when ``record`` should be kept for ``visible_nodes``."""

    if not visible_nodes:
        raise ValueError("visible_nodes must not be empty")
    if node_id is None or node_id in visible_nodes:
        return True

    if isinstance(record, ALWAYS_VISIBLE):
        return True
    if isinstance(record, PROC_SCOPED):
        return is_on_visible_nodes(visible_nodes, record.proc_id)
    if isinstance(record, CopyInstInfo):
        return is_on_visible_nodes(visible_nodes, record.src, record.dst)
    if isinstance(record, FillInstInfo):
        return is_on_visible_nodes(visible_nodes, record.dst)
    if isinstance(record, InstTimelineInfo):
        return is_on_visible_nodes(visible_nodes, record.mem_id)
    return False
