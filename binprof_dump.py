#!/usr/bin/env python3
"""
Summarise BinaryLegionProf logs (gzip-compressed or raw).

For each input the tool prints the owning node, a count of records per kind
and the first few decoded records, e.g.

    [+] Loaded prof_0.gz: 1532 records (node 0)
        TaskInfo             812
        ...

``--filter`` keeps only what the visualiser would need for the nodes given
with ``--visible-node``; ``--json`` dumps every decoded record.
"""

from __future__ import annotations

import argparse
import itertools
import json
import sys
from pathlib import Path
from typing import Sequence

from loguru import logger

from binprof import (
    BinprofError,
    DecodedLog,
    NodeID,
    Record,
    configure_logging,
    deserialize_many,
    file_type_info,
    load_log,
    record_counts,
)

DEFAULT_PREVIEW = 5


def describe_record(record: Record) -> str:
    payload = record.to_dict()
    kind = payload.pop("kind")
    parts = [f"{name}={value}" for name, value in payload.items()]
    return f"{kind:<22} " + " ".join(parts)


def describe_error(exc: BaseException) -> str:
    # Trailing-byte failures carry the decode error that stopped the loop.
    if exc.__cause__ is not None:
        return f"{exc} (caused by {type(exc.__cause__).__name__}: {exc.__cause__})"
    return str(exc)


def summarize(path: Path, log: DecodedLog, *, limit: int) -> None:
    records = log.records
    node_text = "unknown node" if log.node_id is None else f"node {int(log.node_id)}"
    print(f"[+] Loaded {path}: {len(records)} records ({node_text})")
    for kind, count in sorted(record_counts(records).items()):
        print(f"    {kind:<26} {count}")
    for record in itertools.islice(records, limit):
        print(f"      {describe_record(record)}")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decode and summarise BinaryLegionProf logs.")
    parser.add_argument("inputs", nargs="+", type=Path, help="Profiler logs (.gz or raw)")
    parser.add_argument(
        "--visible-node",
        dest="visible_nodes",
        type=lambda x: int(x, 0),
        action="append",
        default=[],
        help="Node to keep when filtering (repeatable)",
    )
    parser.add_argument(
        "--filter",
        action="store_true",
        help="Drop records that do not concern the visible nodes",
    )
    parser.add_argument("--json", type=Path, help="Write every decoded record to this JSON file")
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_PREVIEW,
        help=f"Number of records to preview per file (default {DEFAULT_PREVIEW})",
    )
    parser.add_argument("--jobs", type=int, default=1, help="Worker processes for multiple inputs (default 1)")
    parser.add_argument("--log-level", default="WARNING", help="loguru level for diagnostics (default WARNING)")
    parser.add_argument(
        "--type-only",
        action="store_true",
        help="Only report whether each input is a binary or ASCII log",
    )
    args = parser.parse_args(argv)
    if args.filter and not args.visible_nodes:
        parser.error("--filter requires at least one --visible-node")
    return args


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.type_only:
        for path in args.inputs:
            try:
                kind, version = file_type_info(path)
            except OSError as exc:
                print(f"[!] {path}: {exc}", file=sys.stderr)
                return 1
            suffix = "" if version is None else f" v{version[0]}.{version[1]}"
            print(f"{path}: {kind}{suffix}")
        return 0

    visible = frozenset(NodeID(node) for node in args.visible_nodes)
    try:
        results = deserialize_many(args.inputs, visible, args.filter, max_workers=args.jobs, loader=load_log)
    except (BinprofError, OSError) as exc:
        logger.opt(exception=exc).debug("decode failed")
        print(f"[!] Failed to decode: {describe_error(exc)}", file=sys.stderr)
        return 1

    for path, log in zip(args.inputs, results):
        summarize(path, log, limit=max(args.limit, 0))

    if args.json:
        payload = {
            str(path): [record.to_dict() for record in log.records]
            for path, log in zip(args.inputs, results)
        }
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"\nDecoded records written to {args.json}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
