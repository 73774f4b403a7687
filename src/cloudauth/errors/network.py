"""Network error classification utilities.

Translates httpx transport failures into ``RefreshError`` instances with a
readable message and remediation.
"""

from __future__ import annotations

import httpx

from cloudauth.errors.types import RefreshError, RefreshStep


def describe_network_error(error: Exception) -> tuple[str, str]:
    """Describe a network-related exception.

    Args:
        error: Network exception to describe

    Returns:
        Tuple of (message, remediation)
    """
    if isinstance(error, httpx.ConnectTimeout):
        return (
            "Connection timed out",
            "Check your network connection and try again.",
        )

    if isinstance(error, httpx.ReadTimeout):
        return (
            "Request timed out waiting for response",
            "The token endpoint may be slow. Try again later.",
        )

    if isinstance(error, httpx.WriteTimeout):
        return (
            "Request timed out while sending data",
            "Check your network connection and try again.",
        )

    if isinstance(error, httpx.TimeoutException):
        return (
            "Request timed out",
            "Check your network connection and try again.",
        )

    if isinstance(error, httpx.ConnectError):
        message = str(error).lower()
        if "connection refused" in message:
            return (
                "Connection refused by server",
                "The token endpoint may be down or blocked by a firewall.",
            )
        if "dns" in message or "name or service" in message or "hostname" in message:
            return (
                "Could not resolve server address",
                "Check your DNS settings and the configured endpoint host.",
            )
        return (
            "Failed to connect to server",
            "Check your network connection and try again.",
        )

    return (
        f"Network error: {error}",
        "Check your network connection and try again.",
    )


def network_refresh_error(error: Exception, provider: str) -> RefreshError:
    """Wrap a transport exception raised during a token request."""
    message, remediation = describe_network_error(error)
    return RefreshError(
        message,
        step=RefreshStep.NETWORK,
        provider=provider,
        remediation=remediation,
    )

