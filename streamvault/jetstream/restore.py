# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stream Restore - Recreate a single stream from its backup directory.

The server is asked to start a restore for the stream described in the
manifest and answers with a subject to upload the snapshot to. Every chunk
is sent as a request and acknowledged; an empty request finishes the upload
and the reply to it reports the recreated stream.
"""

import copy
from pathlib import Path
from typing import Any, Dict

import aiofiles
import structlog

from streamvault.backup.layout import DATA_FILENAME, read_manifest
from streamvault.config import DEFAULT_CHUNK_SIZE, Placement
from streamvault.errors import explain_stream_exists
from streamvault.exceptions import RestoreError, ServiceError
from streamvault.jetstream.api import parse_api_response
from streamvault.jetstream.client import StreamManager

logger = structlog.get_logger()

# The server rebuilds the stream before answering the final upload request
FINALIZE_TIMEOUT = 60.0


def apply_placement(config: Dict[str, Any], placement: Placement | None) -> Dict[str, Any]:
    """Return a copy of a stream configuration with placement overrides applied."""
    config = copy.deepcopy(config)
    if placement is None or placement.is_empty:
        return config

    merged = dict(config.get("placement") or {})
    merged.update(placement.as_api())
    config["placement"] = merged
    return config


class StreamRestorer:
    """Restores one backup directory onto the connected account."""

    def __init__(
        self,
        manager: StreamManager,
        artifact_dir: Path,
        placement: Placement | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.manager = manager
        self.artifact_dir = Path(artifact_dir)
        self.placement = placement
        self.chunk_size = chunk_size

    async def restore(self) -> Dict[str, Any]:
        """
        Recreate the stream and, when present in the backup, its consumers.

        Returns:
            Stream info reported by the server after the restore

        Raises:
            RestoreError: If the backup is unusable, the stream exists
                or the server rejects the restore
        """
        manifest = read_manifest(self.artifact_dir)
        config = apply_placement(manifest["config"], self.placement)
        name = config.get("name") or self.artifact_dir.name

        data_path = self.artifact_dir / (manifest.get("data_file") or DATA_FILENAME)
        if not data_path.is_file():
            raise RestoreError(
                f"{name}: snapshot data {data_path.name} is missing",
                details={"path": str(data_path)},
            )

        try:
            if await self.manager.stream_exists(name):
                raise RestoreError(explain_stream_exists(name), details={"stream": name})

            response = await self.manager.request(
                f"STREAM.RESTORE.{name}",
                {"config": config, "state": manifest.get("state") or {}},
            )
            deliver_subject = response.get("deliver_subject")
            if not deliver_subject:
                raise RestoreError(
                    f"{name}: server did not provide an upload subject",
                    details={"stream": name},
                )

            logger.info(
                "stream_restore_started",
                stream=name,
                source=str(self.artifact_dir),
                placement=config.get("placement"),
            )

            sent = await self._upload(deliver_subject, data_path)

            reply = await self.manager.request_raw(
                deliver_subject, b"", timeout=max(self.manager.timeout, FINALIZE_TIMEOUT)
            )
            result = parse_api_response(reply.data, deliver_subject)

        except ServiceError as e:
            raise RestoreError(
                f"{name}: {e.message}",
                details={"stream": name, "code": e.code, "err_code": e.err_code},
            ) from e
        except OSError as e:
            raise RestoreError(
                f"{name}: could not read snapshot data: {e}",
                details={"path": str(data_path)},
            ) from e

        logger.info("stream_restored", stream=name, bytes=sent)

        return result

    async def _upload(self, deliver_subject: str, data_path: Path) -> int:
        sent = 0

        async with aiofiles.open(data_path, "rb") as f:
            while True:
                chunk = await f.read(self.chunk_size)
                if not chunk:
                    return sent

                ack = await self.manager.request_raw(deliver_subject, chunk)
                if ack.data:
                    parse_api_response(ack.data, deliver_subject)
                sent += len(chunk)
