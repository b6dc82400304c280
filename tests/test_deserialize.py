from __future__ import annotations

import pickle

import pytest

from binlog import LogBuilder, encode_values, i64, mem, proc, sample_values, u32, u64
from binprof.deserialize import (
    DecodedLog,
    ParseContext,
    decode_log,
    deserialize,
    deserialize_many,
    load_log,
    parse_log,
    record_counts,
)
from binprof.errors import (
    DimensionError,
    InvalidStringError,
    MissingRecordFormatError,
    ShortReadError,
    TrailingBytesError,
    UnknownRecordTagError,
)
from binprof.ids import NodeID
from binprof.records import IndexSpacePointDesc, MachineDesc, MaxDimDesc, ProcDesc, TaskInfo, ZeroTime

ALL_NODES = frozenset({NodeID(0)})
ZERO_TIME_ONLY = b"FileType: BinaryLegionProf v: 1.0\nZeroTime {id:0, zero_time:long long:8}\n\n"


def test_zero_time_only_log(write_log):
    path = write_log("zero.gz", ZERO_TIME_ONLY + u32(0) + i64(1234))
    records = deserialize(path, ALL_NODES, False, required={"ZeroTime"})
    assert records == [ZeroTime(zero_time=1234)]


def test_zero_time_only_log_is_incomplete_by_default():
    with pytest.raises(MissingRecordFormatError):
        parse_log(ZERO_TIME_ONLY + u32(0) + i64(1234), ALL_NODES, False)


def test_zero_time_with_full_schema(builder: LogBuilder):
    records = parse_log(builder.zero_time(1234).build(), ALL_NODES, False)
    assert records == [ZeroTime(zero_time=1234)]


def test_empty_body_yields_no_records(builder: LogBuilder):
    assert parse_log(builder.build(), ALL_NODES, False) == []


def test_every_record_is_returned_in_file_order(builder: LogBuilder):
    data = (
        builder.machine(0)
        .max_dim(2)
        .zero_time(5)
        .proc_desc(proc(0, 1))
        .task_info(proc(0, 1))
        .add("IndexSpacePointDesc", u64(9), u32(2), u64(3, 4))
        .task_kind(4, "main")
        .build()
    )
    records = parse_log(data, ALL_NODES, False)
    assert [r.kind() for r in records] == [
        "MachineDesc",
        "MaxDimDesc",
        "ZeroTime",
        "ProcDesc",
        "TaskInfo",
        "IndexSpacePointDesc",
        "TaskKind",
    ]
    assert records[5].rem.values == (3, 4)
    assert records[6].name == "main"
    assert record_counts(records)["TaskInfo"] == 1


def test_stray_trailing_byte_fails(builder: LogBuilder):
    data = builder.zero_time(1).zero_time(2).raw(b"\x00").build()
    with pytest.raises(TrailingBytesError) as excinfo:
        parse_log(data, ALL_NODES, False)
    error = excinfo.value
    assert error.remaining == 1
    assert error.offset == len(data) - 1
    assert isinstance(error.__cause__, ShortReadError)


def test_unknown_tag_is_chained_as_cause(builder: LogBuilder):
    data = builder.zero_time(1).raw(u32(9999) + i64(0)).build()
    with pytest.raises(TrailingBytesError) as excinfo:
        parse_log(data, ALL_NODES, False)
    assert excinfo.value.remaining == 12
    cause = excinfo.value.__cause__
    assert isinstance(cause, UnknownRecordTagError)
    assert cause.tag == 9999


def test_bad_string_is_chained_as_cause(builder: LogBuilder):
    data = builder.add("TaskKind", u32(1), b"\xff\x00", b"\x00").build()
    with pytest.raises(TrailingBytesError) as excinfo:
        parse_log(data, ALL_NODES, False)
    assert isinstance(excinfo.value.__cause__, InvalidStringError)


def test_composite_before_max_dim_is_fatal(builder: LogBuilder):
    data = builder.add("IndexSpacePointDesc", u64(9), u32(2), u64(3, 4)).build()
    with pytest.raises(DimensionError):
        parse_log(data, ALL_NODES, False)


def test_max_dim_zero_reads_empty_point(builder: LogBuilder):
    data = builder.max_dim(0).add("IndexSpacePointDesc", u64(9), u32(0)).build()
    records = parse_log(data, ALL_NODES, False)
    assert isinstance(records[1], IndexSpacePointDesc)
    assert records[1].rem.values == ()


def test_context_tracks_latest_max_dim_and_first_node():
    context = ParseContext()
    context.observe(MaxDimDesc(2))
    context.observe(MaxDimDesc(3))
    context.observe(MachineDesc(NodeID(4), 8))
    context.observe(MachineDesc(NodeID(5), 8))
    assert context.max_dim == 3
    assert context.node_id == NodeID(4)


def test_filter_uses_node_seen_so_far(builder: LogBuilder):
    data = (
        builder.task_info(proc(1))  # node unknown yet: kept
        .machine(1)
        .task_info(proc(1))
        .task_info(proc(0))
        .proc_desc(proc(1))
        .copy_inst(mem(1), mem(0))
        .copy_inst(mem(1), mem(2))
        .fill_inst(mem(1))
        .inst_timeline(mem(0))
        .zero_time(3)
        .build()
    )
    records = parse_log(data, ALL_NODES, True)
    assert [r.kind() for r in records] == [
        "TaskInfo",
        "TaskInfo",
        "ProcDesc",
        "CopyInstInfo",
        "InstTimelineInfo",
    ]
    assert records[1].proc_id.node_id() == NodeID(0)


def test_filter_keeps_everything_for_visible_node(builder: LogBuilder):
    data = (
        builder.machine(0)
        .task_info(proc(3))
        .zero_time(1)
        .copy_inst(mem(2), mem(3))
        .fill_inst(mem(3))
        .inst_timeline(mem(3))
        .add("MapperCallInfo", encode_values("MapperCallInfo", sample_values("MapperCallInfo", proc_id=proc(3))))
        .build()
    )
    unfiltered = parse_log(data, ALL_NODES, False)
    assert len(unfiltered) == 7
    assert parse_log(data, ALL_NODES, True) == unfiltered


def test_node_id_outlives_its_filtered_machine_record(builder: LogBuilder):
    data = builder.machine(1).max_dim(2).task_info(proc(0)).build()
    log = decode_log(data, ALL_NODES, True)
    assert [r.kind() for r in log.records] == ["TaskInfo"]
    assert log.node_id == NodeID(1)
    assert log.max_dim == 2


def test_unfiltered_ignores_visible_nodes(builder: LogBuilder):
    data = builder.machine(1).task_info(proc(1)).build()
    assert len(parse_log(data, frozenset(), False)) == 2
    with pytest.raises(ValueError):
        parse_log(data, frozenset(), True)


def test_deserialize_reads_raw_files(builder: LogBuilder, write_log):
    path = write_log("raw.bin", builder.zero_time(9).build(), raw=True)
    assert deserialize(path, ALL_NODES, False) == [ZeroTime(9)]


def test_deserialize_many_preserves_input_order(write_log):
    paths = []
    for node in (2, 0, 1):
        data = LogBuilder().machine(node).proc_desc(proc(node)).build()
        paths.append(write_log(f"node{node}.gz", data))

    for workers in (1, 2):
        results = deserialize_many(paths, ALL_NODES, False, max_workers=workers)
        assert [int(r[0].node_id) for r in results] == [2, 0, 1]
        assert all(isinstance(r[1], ProcDesc) for r in results)


def test_deserialize_many_without_inputs():
    assert deserialize_many([], ALL_NODES, False) == []


def test_format_errors_survive_pickling():
    error = TrailingBytesError(3, offset=0x40)
    clone = pickle.loads(pickle.dumps(error))
    assert type(clone) is TrailingBytesError
    assert clone.remaining == 3
    assert clone.offset == 0x40
    assert str(clone) == str(error)


def test_task_info_values_survive_round_trip(builder: LogBuilder):
    records = parse_log(builder.task_info(proc(0, 2), op_id=11).build(), ALL_NODES, False)
    (task,) = records
    assert isinstance(task, TaskInfo)
    assert int(task.op_id) == 11
    assert [int(t) for t in (task.create, task.ready, task.start, task.stop)] == [10, 20, 30, 40]


def test_deserialize_many_with_context_loader(write_log):
    path = write_log("remote.gz", LogBuilder().machine(3).task_info(proc(3)).build())
    (log,) = deserialize_many([path], ALL_NODES, True, loader=load_log)
    assert isinstance(log, DecodedLog)
    assert log.records == []
    assert log.node_id == NodeID(3)
