"""Output formatting for cloudauth."""

from __future__ import annotations

from cloudauth.display.json import ErrorData
from cloudauth.display.json import ErrorResponse
from cloudauth.display.json import encode_json
from cloudauth.display.json import from_cloudauth_error
from cloudauth.display.json import output_json
from cloudauth.display.json import output_json_error
from cloudauth.display.json import output_json_pretty

__all__ = [
    "ErrorData",
    "ErrorResponse",
    "encode_json",
    "from_cloudauth_error",
    "output_json",
    "output_json_error",
    "output_json_pretty",
]
