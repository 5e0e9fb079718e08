# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
JetStream Layer - Connection, stream enumeration and single stream snapshots.
"""

from streamvault.jetstream.client import (
    StreamHandle,
    StreamManager,
    StreamState,
    open_stream_manager,
)
from streamvault.jetstream.restore import StreamRestorer, apply_placement
from streamvault.jetstream.snapshot import SnapshotResult, snapshot_stream

__all__ = [
    "StreamHandle",
    "StreamManager",
    "StreamState",
    "open_stream_manager",
    "StreamRestorer",
    "apply_placement",
    "SnapshotResult",
    "snapshot_stream",
]
