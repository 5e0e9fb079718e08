# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Engine - Account wide backup and restore runs.
"""

from streamvault.backup.layout import (
    DATA_FILENAME,
    MANIFEST_FILENAME,
    artifact_path,
    is_complete_artifact,
    read_manifest,
    write_manifest,
)

from streamvault.backup.manager import (
    backup_account,
    BackupReport,
)

from streamvault.backup.restore import (
    restore_account,
    validate_restore_source,
    RestoreResult,
)

__all__ = [
    # Layout
    "DATA_FILENAME",
    "MANIFEST_FILENAME",
    "artifact_path",
    "is_complete_artifact",
    "read_manifest",
    "write_manifest",
    # Backup
    "backup_account",
    "BackupReport",
    # Restore
    "restore_account",
    "validate_restore_source",
    "RestoreResult",
]
