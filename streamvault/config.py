# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Stream Vault Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation so that a backup or
restore run sees the same settings from its first stream to its last.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple
import re

from streamvault.errors import explain_invalid_server_url, explain_missing_creds_file

DEFAULT_SERVER = "nats://127.0.0.1:4222"

# Chunk size requested from the server when snapshotting, and used when
# uploading a snapshot during restore
DEFAULT_CHUNK_SIZE = 128 * 1024

# The scheme is optional; nats-py assumes nats:// for a bare host[:port]
_URL_RE = re.compile(r"^(?:(?:nats|tls|ws|wss)://)?[^\s/]+/?$")


def _validate_server_url(url: str) -> bool:
    """Validate a single NATS server URL ([scheme://]host[:port][/])."""
    if not url:
        return False
    return bool(_URL_RE.match(url))


def _raise_if_errors(errors: List[str]) -> None:
    if errors:
        from streamvault.exceptions import ConfigurationError

        raise ConfigurationError(
            "Configuration validation failed",
            details={"errors": errors},
        )


@dataclass(frozen=True)
class ConnectionConfig:
    """
    How to reach the JetStream enabled NATS service.

    The connection itself is opened by the caller for the duration of one
    command and handed to the orchestrators.
    """

    # Server URLs, tried in order
    servers: Tuple[str, ...] = (DEFAULT_SERVER,)

    # Optional path to a NATS .creds file
    creds_file: Path | None = None

    # Per request deadline in seconds
    timeout: float = 5.0

    # JetStream domain, changes the API prefix when set
    js_domain: str | None = None

    # Connection name reported to the server
    name: str = "streamvault"

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not self.servers:
            errors.append("At least one server URL is required")
        for url in self.servers:
            if not _validate_server_url(url):
                errors.append(explain_invalid_server_url(url))

        if self.timeout <= 0:
            errors.append(f"timeout must be > 0, got {self.timeout}")

        if self.creds_file is not None and not Path(self.creds_file).is_file():
            errors.append(explain_missing_creds_file(str(self.creds_file)))

        if self.js_domain is not None and (not self.js_domain or "." in self.js_domain):
            errors.append(f"Invalid JetStream domain: {self.js_domain!r}")

        _raise_if_errors(errors)

    @property
    def api_prefix(self) -> str:
        """Subject prefix of the JetStream API for this account/domain."""
        if self.js_domain:
            return f"$JS.{self.js_domain}.API"
        return "$JS.API"


@dataclass(frozen=True)
class BackupOptions:
    """Flags controlling an account backup run."""

    # Snapshot consumers together with their streams
    include_consumers: bool = True

    # Ask the server to check stream health while snapshotting
    health_check: bool = False

    # Skip the confirmation prompt
    force: bool = False

    # Treat warnings (skipped streams) as failures
    fail_on_warning: bool = False

    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        errors: List[str] = []

        if self.chunk_size < 1024:
            errors.append(f"chunk_size must be >= 1024, got {self.chunk_size}")

        _raise_if_errors(errors)


@dataclass(frozen=True)
class Placement:
    """
    Placement constraint applied to every stream recreated by a restore.

    An empty placement keeps whatever placement the backup recorded.
    """

    cluster: str | None = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        errors: List[str] = []

        if self.cluster is not None and not self.cluster.strip():
            errors.append("cluster must not be blank")
        for tag in self.tags:
            if not isinstance(tag, str) or not tag.strip():
                errors.append(f"Invalid placement tag: {tag!r}")

        _raise_if_errors(errors)

    @property
    def is_empty(self) -> bool:
        return not self.cluster and not self.tags

    def as_api(self) -> Dict[str, Any]:
        """Render as the `placement` object of a stream configuration."""
        placement: Dict[str, Any] = {}
        if self.cluster:
            placement["cluster"] = self.cluster
        if self.tags:
            placement["tags"] = list(self.tags)
        return placement
