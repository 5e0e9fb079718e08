# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for streamvault tests.

Provides an in-memory stand-in for a JetStream account, fake single stream
primitives, and a fake NATS connection for the JetStream layer.
"""

import json
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Dict, Generator, List

import nats.errors
import pytest

from streamvault.backup.layout import DATA_FILENAME, MANIFEST_FILENAME
from streamvault.config import ConnectionConfig
from streamvault.jetstream.client import StreamManager, StreamState


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Account stand-ins used by the orchestrator tests
# ============================================================================

class FakeStream:
    """A stream with a fixed state, or a state lookup that fails."""

    def __init__(self, name: str, size: int = 0, consumers: int = 0, storage: str = "file", state_error: Exception | None = None):
        self.name = name
        self.size = size
        self.consumers = consumers
        self.storage = storage
        self.state_error = state_error

    async def latest_state(self) -> StreamState:
        if self.state_error:
            raise self.state_error
        return StreamState(bytes=self.size, consumers=self.consumers, messages=0, storage=self.storage)


class FakeAccount:
    """Streams visible on an account."""

    def __init__(self, streams: List[FakeStream] | None = None, names: List[str] | None = None):
        self.streams = streams or []
        self.names = names if names is not None else [s.name for s in self.streams]

    async def list_streams(self) -> List[FakeStream]:
        return list(self.streams)

    async def stream_names(self) -> List[str]:
        return list(self.names)


class FakeBackup:
    """
    Backup primitive that writes a minimal artifact, or raises the error
    configured for a stream.
    """

    def __init__(self, errors: Dict[str, Exception] | None = None, on_call: Callable[[str], None] | None = None):
        self.errors = errors or {}
        self.on_call = on_call
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, stream, target_dir: Path, *, health_check: bool, include_consumers: bool, show_progress: bool):
        self.calls.append(
            {
                "stream": stream.name,
                "target_dir": target_dir,
                "health_check": health_check,
                "include_consumers": include_consumers,
                "show_progress": show_progress,
            }
        )
        if self.on_call:
            self.on_call(stream.name)
        if stream.name in self.errors:
            raise self.errors[stream.name]

        write_artifact(target_dir.parent, stream.name)

    @property
    def streams(self) -> List[str]:
        return [c["stream"] for c in self.calls]


class FakeRestorer:
    def __init__(self, log: List[Any], path: Path, placement, error: Exception | None):
        self.log = log
        self.path = path
        self.placement = placement
        self.error = error

    async def restore(self):
        self.log.append((self.path.name, self.placement))
        if self.error:
            raise self.error
        return {"config": {"name": self.path.name}}


class FakeRestorerFactory:
    """Builds restorers that record what they restored."""

    def __init__(self, errors: Dict[str, Exception] | None = None):
        self.errors = errors or {}
        self.restored: List[Any] = []
        self.created: List[str] = []

    def __call__(self, path: Path, placement):
        self.created.append(path.name)
        return FakeRestorer(self.restored, path, placement, self.errors.get(path.name))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.restored]


def write_artifact(root: Path, name: str, manifest: Any = None, data: bytes = b"snapshot") -> Path:
    """Write a complete stream backup directory."""
    artifact = root / name
    artifact.mkdir(parents=True, exist_ok=True)
    (artifact / DATA_FILENAME).write_bytes(data)
    if manifest is None:
        manifest = {
            "config": {"name": name, "subjects": [f"{name}.>"], "storage": "file"},
            "state": {"messages": 1, "bytes": len(data)},
            "data_file": DATA_FILENAME,
        }
    (artifact / MANIFEST_FILENAME).write_text(json.dumps(manifest))
    return artifact


@pytest.fixture
def make_account() -> Callable[..., FakeAccount]:
    return FakeAccount


@pytest.fixture
def never_ask() -> Callable[[str, bool], bool]:
    def ask(prompt: str, default: bool) -> bool:
        raise AssertionError(f"unexpected confirmation prompt: {prompt}")

    return ask


# ============================================================================
# Fake NATS connection for the JetStream layer
# ============================================================================

def api_response(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload).encode()


def api_error(code: int, err_code: int, description: str) -> bytes:
    return api_response({"error": {"code": code, "err_code": err_code, "description": description}})


class FakeMsg:
    def __init__(self, data: bytes = b"", reply: str = "", headers: Dict[str, str] | None = None):
        self.data = data
        self.reply = reply
        self.headers = headers
        self.responses: List[bytes] = []

    async def respond(self, data: bytes) -> None:
        self.responses.append(data)


class FakeSubscription:
    def __init__(self, messages: List[FakeMsg]):
        self.messages = list(messages)
        self.unsubscribed = False

    async def next_msg(self, timeout: float = 1.0) -> FakeMsg:
        if not self.messages:
            raise nats.errors.TimeoutError
        return self.messages.pop(0)

    async def unsubscribe(self) -> None:
        self.unsubscribed = True


class FakeNATS:
    """
    Answers requests from a table of subject -> reply bytes (or a callable
    taking the request data), and delivers queued messages to subscribers.
    """

    def __init__(self, replies: Dict[str, Any] | None = None, deliveries: List[FakeMsg] | None = None):
        self.replies = replies or {}
        self.deliveries = deliveries or []
        self.requests: List[SimpleNamespace] = []
        self.subscriptions: List[FakeSubscription] = []

    def new_inbox(self) -> str:
        return "_INBOX.test"

    async def subscribe(self, subject: str) -> FakeSubscription:
        sub = FakeSubscription(self.deliveries)
        self.subscriptions.append(sub)
        return sub

    async def request(self, subject: str, data: bytes, timeout: float = 1.0) -> SimpleNamespace:
        self.requests.append(SimpleNamespace(subject=subject, data=data, timeout=timeout))
        if subject not in self.replies:
            raise nats.errors.NoRespondersError
        reply = self.replies[subject]
        if callable(reply):
            reply = reply(data)
        return SimpleNamespace(data=reply)

    def requests_to(self, subject: str) -> List[SimpleNamespace]:
        return [r for r in self.requests if r.subject == subject]


@pytest.fixture
def connection_config() -> ConnectionConfig:
    return ConnectionConfig(servers=("nats://localhost:4222",), timeout=0.5)


@pytest.fixture
def make_manager(connection_config: ConnectionConfig) -> Callable[[FakeNATS], StreamManager]:
    def make(nc: FakeNATS) -> StreamManager:
        return StreamManager(nc, connection_config)

    return make
