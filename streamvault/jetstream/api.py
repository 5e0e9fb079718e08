# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
JetStream API helpers - request/response handling for the JSON API.
"""

import json
from typing import Any, Dict

import nats.errors

from streamvault.exceptions import ServiceError

# err_code values reported by the server
ERR_STREAM_NOT_FOUND = 10059

# Header keys nats-py uses for inline status messages
STATUS_HDR = "Status"
DESCRIPTION_HDR = "Description"


def encode_request(payload: Dict[str, Any] | None) -> bytes:
    if payload is None:
        return b""
    return json.dumps(payload).encode()


def parse_api_response(data: bytes, subject: str) -> Dict[str, Any]:
    """
    Decode a JetStream API response.

    Raises:
        ServiceError: If the response is not JSON or carries an error
    """
    try:
        response = json.loads(data)
    except ValueError as e:
        raise ServiceError(
            f"Invalid JetStream API response: {e}",
            details={"subject": subject},
        ) from e

    if not isinstance(response, dict):
        raise ServiceError(
            "Invalid JetStream API response: expected an object",
            details={"subject": subject},
        )

    error = response.get("error")
    if error:
        raise ServiceError(
            error.get("description") or "unknown JetStream error",
            code=error.get("code"),
            err_code=error.get("err_code"),
            details={"subject": subject},
        )

    return response


def translate_request_error(e: Exception, subject: str) -> ServiceError:
    """Map nats-py request failures onto ServiceError."""
    if isinstance(e, nats.errors.NoRespondersError):
        return ServiceError(
            "JetStream is not supported in this account",
            details={"subject": subject},
        )
    if isinstance(e, nats.errors.TimeoutError):
        return ServiceError(
            "No response from JetStream server",
            details={"subject": subject},
        )
    return ServiceError(f"JetStream request failed: {e}", details={"subject": subject})


def status_error(headers: Dict[str, str] | None) -> str | None:
    """Return the error carried by a status message, if any."""
    if not headers or not headers.get(STATUS_HDR):
        return None
    description = headers.get(DESCRIPTION_HDR) or "no description"
    return f"{headers[STATUS_HDR]} {description}"
