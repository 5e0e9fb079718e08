# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Account Backup - Back up every stream of an account into one directory.

Streams are backed up one at a time. A stream that cannot be backed up does
not stop the run: memory streams are skipped with a warning, any other error
is recorded as a failure, and the run moves on to the next stream. The
verdict is given once every stream has been attempted.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from functools import partial
from pathlib import Path
from typing import Any, List, Protocol, TextIO

import structlog
from ulid import ULID

from streamvault.backup.layout import MANIFEST_FILENAME, artifact_path, is_complete_artifact
from streamvault.config import BackupOptions
from streamvault.confirm import AskFunc, ask_confirmation, confirm
from streamvault.exceptions import (
    BackupError,
    BackupErrorKind,
    StreamBackupError,
    StreamVaultError,
)
from streamvault.outcome import OutcomeLedger, OutcomeRecord
from streamvault.report import render_backup_summary, render_ledger, render_stream_outcome

logger = structlog.get_logger()


class StreamLister(Protocol):
    """Anything that can enumerate the streams of an account."""

    async def list_streams(self) -> List[Any]:
        ...


class BackupPrimitive(Protocol):
    """Backs up a single stream into its own directory."""

    async def __call__(
        self,
        stream: Any,
        target_dir: Path,
        *,
        health_check: bool,
        include_consumers: bool,
        show_progress: bool,
    ) -> Any:
        ...


@dataclass
class BackupReport:
    """Result of an account backup run."""

    run_id: str
    target_dir: Path
    streams: List[str]
    total_bytes: int
    total_consumers: int
    fail_on_warning: bool
    ledger: OutcomeLedger = field(default_factory=OutcomeLedger)
    cancelled: bool = False
    duration_seconds: float = 0.0

    @property
    def warnings(self) -> List[OutcomeRecord]:
        return self.ledger.warnings

    @property
    def failures(self) -> List[OutcomeRecord]:
        return self.ledger.failures

    @property
    def failed(self) -> bool:
        if self.cancelled:
            return False
        return self.ledger.is_failed(self.fail_on_warning)

    def raise_for_failure(self) -> None:
        """
        Raises:
            BackupError: If the run failed
        """
        if self.failed:
            raise BackupError("backup failed", details=self.ledger.as_details())


def _reason(e: Exception) -> str:
    if isinstance(e, StreamVaultError):
        return e.message
    return str(e) or type(e).__name__


async def _gather_totals(streams: List[Any], log: Any) -> tuple[int, int]:
    """
    Sum bytes and consumers over all streams.

    Best effort: a stream whose state cannot be read counts as empty.
    """
    total_bytes = 0
    total_consumers = 0

    for stream in streams:
        try:
            state = await stream.latest_state()
        except Exception as e:
            log.warning("stream_state_unavailable", stream=stream.name, error=str(e))
            continue

        total_bytes += state.bytes
        total_consumers += state.consumers

    return total_bytes, total_consumers


async def _backup_one(
    stream: Any,
    target_dir: Path,
    options: BackupOptions,
    backup_stream: BackupPrimitive,
    ledger: OutcomeLedger,
    log: Any,
) -> OutcomeRecord:
    name = stream.name

    try:
        artifact_dir = artifact_path(target_dir, name)
        await backup_stream(
            stream,
            artifact_dir,
            health_check=options.health_check,
            include_consumers=options.include_consumers,
            show_progress=False,
        )
    except StreamBackupError as e:
        if e.kind is BackupErrorKind.STORAGE_NOT_SUPPORTED:
            log.warning("stream_backup_skipped", stream=name, reason=e.message)
            return ledger.warning(name, _reason(e))
        log.error("stream_backup_failed", stream=name, kind=e.kind.value, error=e.message)
        return ledger.failure(name, _reason(e))
    except Exception as e:
        log.error("stream_backup_failed", stream=name, error=str(e))
        return ledger.failure(name, _reason(e))

    if not is_complete_artifact(artifact_dir):
        log.error("stream_backup_incomplete", stream=name, target=str(artifact_dir))
        return ledger.failure(name, f"backup of {name} left no {MANIFEST_FILENAME}")

    log.info("stream_backup_completed", stream=name)
    return ledger.success(name)


async def backup_account(
    manager: StreamLister,
    target_dir: Path,
    options: BackupOptions | None = None,
    *,
    ask: AskFunc = ask_confirmation,
    backup_stream: BackupPrimitive | None = None,
    out: TextIO | None = None,
) -> BackupReport:
    """
    Back up all streams of the connected account.

    This is the main entry point for account backups. It:
    1. Lists the streams and summarises their size for confirmation
    2. Creates the target directory
    3. Backs up each stream into <target_dir>/<stream name>
    4. Reports warnings and failures once all streams were attempted

    Args:
        manager: Connected stream manager
        target_dir: Backup root, created if missing
        options: Backup flags
        ask: Confirmation prompt, not consulted when options.force is set
        backup_stream: Single stream backup, defaults to a JetStream snapshot
        out: Stream for the human readable report (default stdout)

    Returns:
        BackupReport; check ``failed`` or call ``raise_for_failure()``

    Raises:
        BackupError: If there are no streams or the target cannot be created
        ConfirmationError: If the confirmation prompt could not be answered
    """
    options = options or BackupOptions()
    target_dir = Path(target_dir)

    if backup_stream is None:
        from streamvault.jetstream.snapshot import snapshot_stream

        backup_stream = partial(snapshot_stream, chunk_size=options.chunk_size)

    run_id = str(ULID())
    log = logger.bind(run_id=run_id)
    start_time = datetime.now(UTC)

    streams = await manager.list_streams()
    if not streams:
        raise BackupError("no streams found")

    total_bytes, total_consumers = await _gather_totals(streams, log)

    report = BackupReport(
        run_id=run_id,
        target_dir=target_dir,
        streams=[s.name for s in streams],
        total_bytes=total_bytes,
        total_consumers=total_consumers,
        fail_on_warning=options.fail_on_warning,
    )

    render_backup_summary(out, target_dir, len(streams), total_bytes, total_consumers)

    if not confirm("Perform backup", False, force=options.force, ask=ask):
        log.info("backup_run_cancelled", target=str(target_dir))
        report.cancelled = True
        return report

    try:
        target_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise BackupError(
            f"Failed to create backup directory: {e}",
            details={"target": str(target_dir)},
        ) from e

    log.info(
        "backup_run_started",
        target=str(target_dir),
        streams=len(streams),
        consumers=options.include_consumers,
        health_check=options.health_check,
    )

    for stream in streams:
        record = await _backup_one(stream, target_dir, options, backup_stream, report.ledger, log)
        render_stream_outcome(out, record, "Backup")

    render_ledger(out, report.ledger, "Backup")

    report.duration_seconds = (datetime.now(UTC) - start_time).total_seconds()

    log.info(
        "backup_run_completed",
        processed=report.ledger.processed,
        succeeded=len(report.ledger.succeeded),
        warnings=len(report.warnings),
        failures=len(report.failures),
        failed=report.failed,
        duration=report.duration_seconds,
    )

    return report
