# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
JetStream Client - Connection and stream enumeration.

A StreamManager wraps one NATS connection for the duration of a single
command. Orchestrators receive it as an argument; nothing here is global.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List

import nats
import nats.errors
import structlog

from streamvault.config import ConnectionConfig
from streamvault.exceptions import ServiceError
from streamvault.jetstream.api import (
    ERR_STREAM_NOT_FOUND,
    encode_request,
    parse_api_response,
    translate_request_error,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class StreamState:
    """Point-in-time usage of a stream."""

    bytes: int
    consumers: int
    messages: int
    storage: str

    @classmethod
    def from_info(cls, info: Dict[str, Any]) -> "StreamState":
        state = info.get("state") or {}
        config = info.get("config") or {}
        return cls(
            bytes=int(state.get("bytes") or 0),
            consumers=int(state.get("consumer_count") or 0),
            messages=int(state.get("messages") or 0),
            storage=config.get("storage") or "file",
        )


class StreamHandle:
    """Transient reference to one remote stream."""

    def __init__(self, manager: "StreamManager", name: str, info: Dict[str, Any] | None = None):
        self.manager = manager
        self._name = name
        self._info = info

    @property
    def name(self) -> str:
        return self._name

    async def info(self, refresh: bool = False) -> Dict[str, Any]:
        if self._info is None or refresh:
            self._info = await self.manager.stream_info(self._name)
        return self._info

    async def latest_state(self) -> StreamState:
        """Fetch the current state from the server."""
        return StreamState.from_info(await self.info(refresh=True))

    def __repr__(self) -> str:
        return f"StreamHandle({self._name!r})"


class StreamManager:
    """JetStream management operations over one connection."""

    def __init__(self, nc: Any, config: ConnectionConfig):
        self.nc = nc
        self.config = config

    @property
    def timeout(self) -> float:
        return self.config.timeout

    def api_subject(self, suffix: str) -> str:
        return f"{self.config.api_prefix}.{suffix}"

    async def request_raw(self, subject: str, data: bytes, timeout: float | None = None) -> Any:
        """Send a request and return the reply message."""
        try:
            return await self.nc.request(subject, data, timeout=timeout or self.timeout)
        except nats.errors.Error as e:
            raise translate_request_error(e, subject) from e

    async def request(
        self,
        suffix: str,
        payload: Dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Dict[str, Any]:
        """Call the JetStream API and decode its response."""
        subject = self.api_subject(suffix)
        msg = await self.request_raw(subject, encode_request(payload), timeout)
        return parse_api_response(msg.data, subject)

    async def _paged(self, suffix: str, key: str, payload: Dict[str, Any]) -> List[Any]:
        items: List[Any] = []
        offset = 0

        while True:
            response = await self.request(suffix, {**payload, "offset": offset})
            page = response.get(key) or []
            items.extend(page)
            offset += len(page)

            total = int(response.get("total") or 0)
            if not page or offset >= total:
                return items

    async def stream_names(self, subject_filter: str | None = None) -> List[str]:
        """Names of all streams on the account, optionally filtered by subject."""
        payload: Dict[str, Any] = {}
        if subject_filter:
            payload["subject"] = subject_filter
        return await self._paged("STREAM.NAMES", "streams", payload)

    async def list_streams(self) -> List[StreamHandle]:
        """Handles for every stream on the account, in server order."""
        infos = await self._paged("STREAM.LIST", "streams", {})
        streams = [StreamHandle(self, info["config"]["name"], info) for info in infos]
        logger.debug("streams_listed", count=len(streams))
        return streams

    async def stream_info(self, name: str) -> Dict[str, Any]:
        return await self.request(f"STREAM.INFO.{name}")

    async def stream_exists(self, name: str) -> bool:
        try:
            await self.stream_info(name)
        except ServiceError as e:
            if e.err_code == ERR_STREAM_NOT_FOUND or e.code == 404:
                return False
            raise
        return True


@asynccontextmanager
async def open_stream_manager(config: ConnectionConfig) -> AsyncIterator[StreamManager]:
    """
    Connect to NATS and yield a StreamManager, closing the connection on exit.

    Raises:
        ServiceError: If no server can be reached
    """
    options: Dict[str, Any] = {
        "servers": list(config.servers),
        "name": config.name,
        "connect_timeout": config.timeout,
        "allow_reconnect": False,
    }
    if config.creds_file:
        options["user_credentials"] = str(config.creds_file)

    try:
        nc = await nats.connect(**options)
    except (nats.errors.Error, OSError) as e:
        raise ServiceError(
            f"Could not connect to NATS: {e}",
            details={"servers": list(config.servers)},
        ) from e

    logger.debug("nats_connected", server=str(nc.connected_url))

    try:
        yield StreamManager(nc, config)
    finally:
        await nc.close()
