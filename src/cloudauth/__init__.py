"""cloudauth: Resolve Google Cloud credentials and mint bearer tokens."""

from __future__ import annotations

__version__ = "0.1.0"

from cloudauth.auth import AuthProvider
from cloudauth.auth import FixedTokenProvider
from cloudauth.auth import GceMetadataProvider
from cloudauth.auth import OAuth2Provider
from cloudauth.auth import ServiceAccountProvider
from cloudauth.auth import Token
from cloudauth.core.resolver import ResolutionContext
from cloudauth.core.resolver import get_provider
from cloudauth.core.resolver import resolve
from cloudauth.errors import CloudAuthError
from cloudauth.errors import CredentialParseError
from cloudauth.errors import NotFoundError
from cloudauth.errors import RefreshError

__all__ = [
    "__version__",
    "get_provider",
    "resolve",
    "ResolutionContext",
    "Token",
    "AuthProvider",
    "FixedTokenProvider",
    "OAuth2Provider",
    "ServiceAccountProvider",
    "GceMetadataProvider",
    "CloudAuthError",
    "NotFoundError",
    "CredentialParseError",
    "RefreshError",
]


def main() -> None:
    """Entry point for the cloudauth CLI."""
    from cloudauth.cli.app import run_app

    run_app()
