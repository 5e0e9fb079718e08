# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stream Snapshot - Back up a single stream into a directory.

The server streams a snapshot of the stream (and optionally its consumers)
to an inbox in chunks. Chunks carrying a reply subject are flow control and
must be acknowledged; an empty message ends the transfer. The payload is
stored as received, the manifest is written once the payload is complete.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from pathlib import Path
from typing import Any

import aiofiles
import nats.errors
import structlog

from streamvault.backup.layout import (
    DATA_FILENAME,
    MANIFEST_FILENAME,
    remove_partial_artifact,
    write_manifest,
)
from streamvault.config import DEFAULT_CHUNK_SIZE
from streamvault.exceptions import (
    BackupError,
    BackupErrorKind,
    ServiceError,
    StreamBackupError,
)
from streamvault.jetstream.api import status_error
from streamvault.jetstream.client import StreamHandle

logger = structlog.get_logger()

# Log progress every this many chunks when progress is requested
PROGRESS_EVERY = 64


@dataclass
class SnapshotResult:
    """Result of a single stream snapshot."""

    stream: str
    artifact_dir: Path
    bytes_received: int
    chunks: int
    manifest_path: Path


async def _receive_chunks(
    sub: Any,
    data_path: Path,
    stream: str,
    timeout: float,
    show_progress: bool,
) -> tuple[int, int]:
    received = 0
    chunks = 0

    async with aiofiles.open(data_path, "wb") as f:
        while True:
            try:
                msg = await sub.next_msg(timeout=timeout)
            except nats.errors.TimeoutError as e:
                raise StreamBackupError(
                    "Snapshot stalled: no data received",
                    kind=BackupErrorKind.REMOTE,
                    details={"stream": stream, "bytes_received": received},
                ) from e

            if not msg.data:
                error = status_error(msg.headers)
                if error:
                    raise StreamBackupError(
                        f"Snapshot failed: {error}",
                        kind=BackupErrorKind.REMOTE,
                        details={"stream": stream},
                    )
                return received, chunks

            await f.write(msg.data)
            received += len(msg.data)
            chunks += 1

            if msg.reply:
                await msg.respond(b"")

            if show_progress and chunks % PROGRESS_EVERY == 0:
                logger.info("snapshot_progress", stream=stream, bytes_received=received)


async def snapshot_stream(
    stream: StreamHandle,
    target_dir: Path,
    *,
    health_check: bool = False,
    include_consumers: bool = True,
    show_progress: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> SnapshotResult:
    """
    Snapshot one stream into target_dir.

    On success target_dir holds the payload and backup.json. On failure
    no manifest is left behind.

    Args:
        stream: Stream to back up
        target_dir: Directory to create for this stream
        health_check: Have the server verify the stream while snapshotting
        include_consumers: Include consumer state in the snapshot
        show_progress: Log transfer progress
        chunk_size: Requested chunk size

    Raises:
        StreamBackupError: kind STORAGE_NOT_SUPPORTED for memory streams,
            REMOTE when the server fails, LOCAL_IO when writing fails
    """
    manager = stream.manager
    name = stream.name

    try:
        info = await stream.info(refresh=True)
    except ServiceError as e:
        raise StreamBackupError(str(e), kind=BackupErrorKind.REMOTE, details={"stream": name}) from e

    if (info.get("config") or {}).get("storage") == "memory":
        raise StreamBackupError(
            "memory streams do not support snapshots",
            kind=BackupErrorKind.STORAGE_NOT_SUPPORTED,
            details={"stream": name},
        )

    inbox = manager.nc.new_inbox()
    sub = await manager.nc.subscribe(inbox)

    try:
        try:
            response = await manager.request(
                f"STREAM.SNAPSHOT.{name}",
                {
                    "deliver_subject": inbox,
                    "no_consumers": not include_consumers,
                    "chunk_size": chunk_size,
                    "jsck": health_check,
                },
            )
        except ServiceError as e:
            raise StreamBackupError(str(e), kind=BackupErrorKind.REMOTE, details={"stream": name}) from e

        logger.info(
            "snapshot_started",
            stream=name,
            target=str(target_dir),
            consumers=include_consumers,
            health_check=health_check,
        )

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            # An older manifest must not vouch for the payload being replaced
            (target_dir / MANIFEST_FILENAME).unlink(missing_ok=True)

            received, chunks = await _receive_chunks(
                sub, target_dir / DATA_FILENAME, name, manager.timeout, show_progress
            )

            manifest_path = await write_manifest(
                target_dir,
                {
                    "config": response.get("config") or info.get("config"),
                    "state": response.get("state") or info.get("state") or {},
                    "consumers_included": include_consumers,
                    "created": datetime.now(UTC).isoformat(),
                    "data_file": DATA_FILENAME,
                    "size": received,
                },
            )
        except StreamBackupError:
            remove_partial_artifact(target_dir)
            raise
        except nats.errors.Error as e:
            remove_partial_artifact(target_dir)
            raise StreamBackupError(
                f"Snapshot interrupted: {e}",
                kind=BackupErrorKind.REMOTE,
                details={"stream": name},
            ) from e
        except (BackupError, OSError) as e:
            remove_partial_artifact(target_dir)
            raise StreamBackupError(
                f"Failed to write backup: {e}",
                kind=BackupErrorKind.LOCAL_IO,
                details={"stream": name, "target": str(target_dir)},
            ) from e

    finally:
        await sub.unsubscribe()

    logger.info("snapshot_completed", stream=name, bytes=received, chunks=chunks)

    return SnapshotResult(
        stream=name,
        artifact_dir=target_dir,
        bytes_received=received,
        chunks=chunks,
        manifest_path=manifest_path,
    )
