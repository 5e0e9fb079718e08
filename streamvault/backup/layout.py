# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Layout - On-disk structure of an account backup.

    <root>/
        <stream name>/
            backup.json      manifest, written last
            stream.tar.s2    snapshot payload as produced by the server

A stream backup is complete only when its manifest exists and parses.
The manifest is written atomically after the payload, so a crash or a
failed snapshot can never leave a directory that looks restorable.
"""

import json
import shutil
from pathlib import Path
from typing import Any, Dict

import aiofiles
import structlog

from streamvault.errors import explain_missing_manifest
from streamvault.exceptions import BackupError, RestoreError

logger = structlog.get_logger()

MANIFEST_FILENAME = "backup.json"
DATA_FILENAME = "stream.tar.s2"


def artifact_path(root: Path, stream_name: str) -> Path:
    """
    Directory holding the backup of one stream.

    Stream names are used verbatim; the server only allows names that are
    already safe as a single path component.
    """
    if not stream_name or "/" in stream_name or "\\" in stream_name or stream_name in (".", ".."):
        raise BackupError(
            f"Stream name cannot be used as a directory name: {stream_name!r}",
            details={"stream": stream_name},
        )
    return root / stream_name


async def write_manifest(artifact_dir: Path, manifest: Dict[str, Any]) -> Path:
    """
    Write the manifest of a stream backup.

    The file is written atomically (write to temp, then rename) to
    prevent partial manifests.

    Args:
        artifact_dir: Directory of the stream backup
        manifest: JSON serialisable manifest

    Returns:
        Path to the written manifest
    """
    manifest_path = artifact_dir / MANIFEST_FILENAME
    temp_path = manifest_path.with_suffix(".json.tmp")

    try:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(manifest, indent=2, sort_keys=True))

        # Rename to final path (atomic on most filesystems)
        temp_path.replace(manifest_path)

    except Exception as e:
        raise BackupError(
            f"Failed to write manifest: {e}",
            details={"artifact_dir": str(artifact_dir)},
        ) from e

    logger.debug("manifest_written", path=str(manifest_path))

    return manifest_path


def read_manifest(artifact_dir: Path) -> Dict[str, Any]:
    """
    Read and sanity check the manifest of a stream backup.

    Raises:
        RestoreError: If the manifest is missing or malformed
    """
    manifest_path = artifact_dir / MANIFEST_FILENAME

    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest = json.load(f)
    except FileNotFoundError as e:
        raise RestoreError(
            explain_missing_manifest(artifact_dir.name),
            details={"path": str(manifest_path)},
        ) from e
    except (OSError, ValueError) as e:
        raise RestoreError(
            f"{artifact_dir.name}: unreadable {MANIFEST_FILENAME}: {e}",
            details={"path": str(manifest_path)},
        ) from e

    if not isinstance(manifest, dict) or not isinstance(manifest.get("config"), dict):
        raise RestoreError(
            f"{artifact_dir.name}: {MANIFEST_FILENAME} has no stream configuration",
            details={"path": str(manifest_path)},
        )

    name = manifest["config"].get("name")
    if name is not None and not (isinstance(name, str) and name):
        raise RestoreError(
            f"{artifact_dir.name}: {MANIFEST_FILENAME} has no valid stream name",
            details={"path": str(manifest_path), "name": name},
        )

    return manifest


def is_complete_artifact(artifact_dir: Path) -> bool:
    """True when the directory holds a readable manifest."""
    try:
        read_manifest(artifact_dir)
    except RestoreError:
        return False
    return True


def remove_partial_artifact(artifact_dir: Path) -> None:
    """
    Remove what a failed snapshot left behind.

    Errors are logged, not raised: the snapshot failure is what the caller
    needs to see.
    """
    if not artifact_dir.exists():
        return

    try:
        shutil.rmtree(artifact_dir)
        logger.debug("partial_artifact_removed", path=str(artifact_dir))
    except OSError as e:
        logger.warning(
            "partial_artifact_remove_failed",
            path=str(artifact_dir),
            error=str(e),
        )
