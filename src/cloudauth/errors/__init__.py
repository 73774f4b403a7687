"""Error handling for cloudauth."""

from cloudauth.errors.http import endpoint_refresh_error, extract_error_message
from cloudauth.errors.network import (
    describe_network_error,
    network_refresh_error,
)
from cloudauth.errors.types import (
    CloudAuthError,
    ConfigurationError,
    CredentialParseError,
    ErrorCategory,
    NotFoundError,
    RefreshError,
    RefreshStep,
)

__all__ = [
    # Core types
    "ErrorCategory",
    "RefreshStep",
    "CloudAuthError",
    "ConfigurationError",
    "NotFoundError",
    "CredentialParseError",
    "RefreshError",
    # HTTP utilities
    "extract_error_message",
    "endpoint_refresh_error",
    # Network utilities
    "describe_network_error",
    "network_refresh_error",
]
