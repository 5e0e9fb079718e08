# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stream Vault - Account backup and restore for NATS JetStream.

Backs up every stream of an account into one directory per stream, and
restores such a backup onto a (possibly different) account, refusing to
overwrite streams that already exist. Package name: streamvault.
"""

__version__ = "0.1.0"

# Configuration
from streamvault.config import BackupOptions, ConnectionConfig, Placement
from streamvault.env import create_connection_config_from_env

# Orchestration
from streamvault.backup import (
    backup_account,
    restore_account,
    validate_restore_source,
    BackupReport,
    RestoreResult,
)

# Connection
from streamvault.jetstream import open_stream_manager

__all__ = [
    # Version
    "__version__",
    # Configuration
    "BackupOptions",
    "ConnectionConfig",
    "Placement",
    "create_connection_config_from_env",
    # Orchestration
    "backup_account",
    "restore_account",
    "validate_restore_source",
    "BackupReport",
    "RestoreResult",
    # Connection
    "open_stream_manager",
]
