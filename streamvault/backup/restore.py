# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Account Restore - Recreate every stream of an account backup.

The whole backup is validated before the first stream is touched: every
entry must be a complete stream backup whose stream does not exist on the
target yet. Restores then run one at a time and the first failure stops
the run, since the target account is left partially populated.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Callable, Iterable, List, Protocol, TextIO

import structlog
from ulid import ULID

from streamvault.backup.layout import read_manifest
from streamvault.config import Placement
from streamvault.errors import explain_not_a_directory, explain_stream_exists
from streamvault.exceptions import RestoreError, StreamVaultError
from streamvault.outcome import OutcomeLedger
from streamvault.report import render_restore_start, render_stream_outcome

logger = structlog.get_logger()


class StreamNameLister(Protocol):
    """Anything that can list the stream names of an account."""

    async def stream_names(self) -> List[str]:
        ...


class Restorer(Protocol):
    async def restore(self) -> Any:
        ...


RestorerFactory = Callable[[Path, Placement | None], Restorer]


@dataclass
class RestoreResult:
    """Result of an account restore run."""

    run_id: str
    source_dir: Path
    placement: Placement | None
    restored: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0


def validate_restore_source(source_dir: Path, existing_streams: Iterable[str]) -> List[Path]:
    """
    Check that every entry of a backup root can be restored.

    All problems are collected before raising so the operator can fix them
    in one go.

    Args:
        source_dir: Backup root
        existing_streams: Stream names already present on the target

    Returns:
        Stream backup directories, sorted by name

    Raises:
        RestoreError: If the root is unreadable, empty, or any entry is invalid
    """
    existing = set(existing_streams)

    try:
        entries = sorted(source_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise RestoreError(
            f"Cannot read backup directory: {e}",
            details={"source": str(source_dir)},
        ) from e

    if not entries:
        raise RestoreError(
            "no stream backups found",
            details={"source": str(source_dir)},
        )

    problems: List[str] = []

    for entry in entries:
        if not entry.is_dir():
            problems.append(explain_not_a_directory(entry.name))
            continue

        if entry.name in existing:
            problems.append(explain_stream_exists(entry.name))

        try:
            manifest = read_manifest(entry)
        except RestoreError as e:
            problems.append(e.message)
            continue

        stream_name = manifest["config"].get("name")
        if stream_name and stream_name != entry.name:
            problems.append(
                f"{entry.name}: backup.json describes stream {stream_name!r}, "
                "the directory must be named after the stream"
            )
            if stream_name in existing:
                problems.append(explain_stream_exists(stream_name))

    if problems:
        raise RestoreError(
            "backup directory failed validation",
            details={"source": str(source_dir), "errors": problems},
        )

    return entries


async def restore_account(
    manager: StreamNameLister,
    source_dir: Path,
    placement: Placement | None = None,
    *,
    restorer_factory: RestorerFactory | None = None,
    out: TextIO | None = None,
) -> RestoreResult:
    """
    Restore every stream backed up under source_dir.

    Args:
        manager: Connected stream manager
        source_dir: Backup root created by backup_account()
        placement: Cluster/tags applied to every recreated stream
        restorer_factory: Builds the single stream restorer, defaults to
            a JetStream StreamRestorer bound to manager
        out: Stream for the human readable report (default stdout)

    Returns:
        RestoreResult listing the restored streams

    Raises:
        RestoreError: On validation failure (nothing restored) or on the
            first stream that fails to restore (later streams untouched)
    """
    source_dir = Path(source_dir)

    if restorer_factory is None:
        from streamvault.jetstream.restore import StreamRestorer

        def restorer_factory(path: Path, placement: Placement | None) -> Restorer:
            return StreamRestorer(manager, path, placement)

    run_id = str(ULID())
    log = logger.bind(run_id=run_id)
    start_time = datetime.now(UTC)

    existing = await manager.stream_names()

    try:
        artifacts = validate_restore_source(source_dir, existing)
    except RestoreError as e:
        log.error("restore_validation_failed", source=str(source_dir), errors=e.details.get("errors"))
        raise

    result = RestoreResult(run_id=run_id, source_dir=source_dir, placement=placement)
    ledger = OutcomeLedger()

    render_restore_start(out, len(artifacts), source_dir)
    log.info("restore_run_started", source=str(source_dir), streams=len(artifacts))

    for artifact in artifacts:
        restorer = restorer_factory(artifact, placement)

        try:
            await restorer.restore()
        except Exception as e:
            reason = e.message if isinstance(e, StreamVaultError) else str(e)
            render_stream_outcome(out, ledger.failure(artifact.name, reason), "Restore")
            log.error(
                "stream_restore_failed",
                stream=artifact.name,
                error=reason,
                restored=list(ledger.succeeded),
            )
            raise RestoreError(
                f"restore for {artifact.name} failed",
                details={"error": reason, "restored": list(ledger.succeeded)},
            ) from e

        render_stream_outcome(out, ledger.success(artifact.name), "Restore")

    result.restored = list(ledger.succeeded)
    result.duration_seconds = (datetime.now(UTC) - start_time).total_seconds()

    log.info(
        "restore_run_completed",
        restored=len(result.restored),
        duration=result.duration_seconds,
    )

    return result
