# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stream Vault Exceptions - Custom exceptions for the streamvault package.
"""

from enum import Enum


class StreamVaultError(Exception):
    """Base exception for all streamvault errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(StreamVaultError):
    """Raised when configuration is invalid."""

    pass


class ServiceError(StreamVaultError):
    """Raised when the JetStream API answers a request with an error."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        err_code: int | None = None,
        details: dict | None = None,
    ):
        self.code = code
        self.err_code = err_code
        super().__init__(message, details)


class ConfirmationError(StreamVaultError):
    """Raised when an operator decision could not be obtained."""

    pass


class BackupError(StreamVaultError):
    """Raised when a backup run aborts or finishes with failures."""

    pass


class BackupErrorKind(str, Enum):
    """Distinguished reasons a single stream could not be backed up."""

    STORAGE_NOT_SUPPORTED = "storage_not_supported"  # memory streams cannot be snapshotted
    REMOTE = "remote"  # the server refused or aborted the snapshot
    LOCAL_IO = "local_io"  # writing the artifact failed


class StreamBackupError(BackupError):
    """Raised by the single stream snapshot primitive."""

    def __init__(
        self,
        message: str,
        kind: BackupErrorKind = BackupErrorKind.REMOTE,
        details: dict | None = None,
    ):
        self.kind = kind
        super().__init__(message, details)


class RestoreError(StreamVaultError):
    """Raised when restore validation or a stream restore fails."""

    pass
