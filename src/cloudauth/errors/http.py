"""HTTP error-body handling for token endpoints."""

from __future__ import annotations

import httpx

from cloudauth.errors.types import RefreshError, RefreshStep


def extract_error_message(response: httpx.Response) -> str:
    """Extract a meaningful error message from an HTTP response.

    OAuth2 endpoints answer with ``{"error": ..., "error_description": ...}``;
    other Google APIs nest the message under ``error.message``.

    Args:
        response: HTTP response with error status

    Returns:
        Extracted error message
    """
    status = response.status_code

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        description = body.get("error_description")
        if isinstance(error, str) and isinstance(description, str):
            return f"{error}: {description}"
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and "message" in error:
            return str(error["message"])
        for key in ("message", "detail"):
            if isinstance(body.get(key), str):
                return body[key]

    text = response.text.strip()
    if text and len(text) < 200:
        return text

    return f"HTTP {status}"


def endpoint_refresh_error(response: httpx.Response, provider: str) -> RefreshError:
    """Build a refresh error for a non-success token endpoint response."""
    status = response.status_code
    remediation = None
    if status in (400, 401):
        remediation = "The stored credential may be revoked or invalid. Re-create it and try again."
    elif status == 403:
        remediation = "The account may lack permission for the requested scopes."
    elif status == 404:
        remediation = "The token endpoint was not found. Check the token_uri."
    elif status >= 500:
        remediation = "The token endpoint is experiencing issues. Try again later."

    return RefreshError(
        f"HTTP {status}: {extract_error_message(response)}",
        step=RefreshStep.ENDPOINT,
        provider=provider,
        status_code=status,
        remediation=remediation,
    )
