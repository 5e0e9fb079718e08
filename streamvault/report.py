# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human readable run output.

Operators watch these lines while a run is in progress, so every per-stream
outcome is written as soon as it is known.
"""

import sys
from pathlib import Path
from typing import TextIO

from streamvault.outcome import OutcomeKind, OutcomeLedger, OutcomeRecord

_IEC_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB"]


def format_size(num_bytes: int) -> str:
    """Format a byte count with IEC units, e.g. 1536 -> '1.5 KiB'."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = float(num_bytes)
    for unit in _IEC_UNITS:
        if size < 1024 or unit == _IEC_UNITS[-1]:
            return f"{size:.1f} {unit}" if size < 10 else f"{size:.0f} {unit}"
        size /= 1024
    return f"{num_bytes} B"  # pragma: no cover


def format_count(value: int) -> str:
    return f"{value:,}"


def _stream(out: TextIO | None) -> TextIO:
    return out if out is not None else sys.stdout


def render_backup_summary(
    out: TextIO | None,
    target_dir: Path,
    stream_count: int,
    total_bytes: int,
    total_consumers: int,
) -> None:
    out = _stream(out)
    print(f"Performing backup of all streams to {target_dir}\n", file=out)
    print(f"    Streams: {format_count(stream_count)}", file=out)
    print(f"       Size: {format_size(total_bytes)}", file=out)
    print(f"  Consumers: {format_count(total_consumers)}", file=out)
    print(file=out)


def render_stream_outcome(out: TextIO | None, record: OutcomeRecord, action: str) -> None:
    out = _stream(out)
    if record.kind is OutcomeKind.SUCCESS:
        print(f"{action} of {record.stream} completed", file=out)
    else:
        print(f"{action} of {record.stream} failed: {record.reason}", file=out)
    print(file=out)


def render_ledger(out: TextIO | None, ledger: OutcomeLedger, action: str) -> None:
    """Print all warnings, then all failures, each only when present."""
    out = _stream(out)

    if ledger.warnings:
        print(f"{action} Warnings: ", file=out)
        for record in ledger.warnings:
            print(f"  {record}", file=out)
        print(file=out)

    if ledger.failures:
        print(f"{action} failures: ", file=out)
        for record in ledger.failures:
            print(f"  {record}", file=out)
        print(file=out)


def render_restore_start(out: TextIO | None, stream_count: int, source_dir: Path) -> None:
    out = _stream(out)
    print(
        f"Restoring backup of all {stream_count} streams in directory {str(source_dir)!r}\n",
        file=out,
    )
