"""JSON output utilities for cloudauth."""

from __future__ import annotations

import sys
from datetime import datetime

import msgspec

from cloudauth.errors.types import CloudAuthError

__all__ = [
    "ErrorResponse",
    "ErrorData",
    "output_json",
    "output_json_pretty",
    "output_json_error",
    "from_cloudauth_error",
    "encode_json",
]


class ErrorData(msgspec.Struct, frozen=True, omit_defaults=True):
    """Error data with category and remediation."""

    message: str
    category: str
    remediation: str | None = None
    details: dict | None = None
    timestamp: str = msgspec.field(
        default_factory=lambda: datetime.now().astimezone().isoformat()
    )


class ErrorResponse(msgspec.Struct, frozen=True):
    """Structured error response for JSON output."""

    error: ErrorData


def from_cloudauth_error(error: CloudAuthError) -> ErrorResponse:
    """Convert a CloudAuthError into a JSON error response."""
    return ErrorResponse(
        error=ErrorData(
            message=error.message,
            category=str(error.category),
            remediation=error.remediation,
            details=error.details or None,
        )
    )


def encode_json(data: object) -> bytes:
    """Encode data as compact JSON."""
    return msgspec.json.encode(data)


def output_json(data: object) -> None:
    """Write compact JSON to stdout."""
    sys.stdout.write(encode_json(data).decode())
    sys.stdout.write("\n")


def output_json_pretty(data: object) -> None:
    """Write indented JSON to stdout."""
    sys.stdout.write(msgspec.json.format(encode_json(data), indent=2).decode())
    sys.stdout.write("\n")


def output_json_error(error: CloudAuthError) -> None:
    """Write a CloudAuthError as a JSON error response to stdout."""
    output_json_pretty(from_cloudauth_error(error))
