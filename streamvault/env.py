# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.

Builds a ConnectionConfig from the environment variables the NATS tooling
conventionally uses, so the CLI and library callers agree on defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Tuple

from streamvault.config import DEFAULT_SERVER, ConnectionConfig
from streamvault.errors import explain_invalid_timeout_env
from streamvault.exceptions import ConfigurationError


def _parse_servers(value: str | None) -> Tuple[str, ...]:
    if not value:
        return (DEFAULT_SERVER,)
    servers = tuple(s.strip() for s in value.split(",") if s.strip())
    return servers or (DEFAULT_SERVER,)


def _parse_timeout(value: str | None) -> float:
    if not value:
        return 5.0
    try:
        timeout = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_timeout_env(value)) from exc
    if timeout <= 0:
        raise ConfigurationError(explain_invalid_timeout_env(value))
    return timeout


def create_connection_config_from_env(
    environ: Mapping[str, str] | None = None,
    **overrides,
) -> ConnectionConfig:
    """
    Create a ConnectionConfig from environment variables.

    Explicit keyword overrides (for example values given on the command
    line) win over the environment when they are not None.

    Environment variables:
        - NATS_URL: Comma-separated server URLs (default: nats://127.0.0.1:4222)
        - NATS_CREDS: Path to a .creds file
        - NATS_TIMEOUT: Per request timeout in seconds (default: 5)
        - NATS_JS_DOMAIN: JetStream domain
    """

    env = os.environ if environ is None else environ

    creds = env.get("NATS_CREDS")
    values = {
        "servers": _parse_servers(env.get("NATS_URL")),
        "creds_file": Path(creds) if creds else None,
        "timeout": _parse_timeout(env.get("NATS_TIMEOUT")),
        "js_domain": env.get("NATS_JS_DOMAIN") or None,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    return ConnectionConfig(**values)
