# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for streamvault.

These helpers centralize wording for common configuration and validation
errors so that all modules present consistent, actionable messages.
"""


def explain_invalid_server_url(value: str | None) -> str:
    """
    Explain that a NATS server URL is invalid.
    """

    return (
        f"Invalid NATS server URL: {value!r}. "
        "Expected host[:port] with an optional nats://, tls://, ws:// or wss:// scheme, "
        "for example 'localhost:4222' or 'tls://host:4222'."
    )


def explain_invalid_timeout_env(value: str | None) -> str:
    """
    Explain that NATS_TIMEOUT is invalid.
    """

    return (
        f"Invalid NATS_TIMEOUT value: {value!r}. "
        "It must be a positive number of seconds."
    )


def explain_missing_creds_file(path: str) -> str:
    """
    Explain that the configured credentials file does not exist.
    """

    return (
        f"Credentials file {path!r} does not exist. "
        "Set NATS_CREDS or pass --creds with the path to a valid .creds file."
    )


def explain_stream_exists(name: str) -> str:
    """
    Explain that a backup cannot be restored over an existing stream.
    """

    return (
        f"stream {name!r} exists already. "
        "Remove it from the target account or drop its directory from the backup."
    )


def explain_missing_manifest(name: str) -> str:
    """
    Explain that a backup directory has no manifest.
    """

    return (
        f"{name}: expected backup.json. "
        "The backup of this stream is incomplete and cannot be restored."
    )


def explain_not_a_directory(name: str) -> str:
    """
    Explain that the backup root holds something other than a stream backup.
    """

    return (
        f"{name}: expected a directory. "
        "A backup root may only contain one directory per stream."
    )
