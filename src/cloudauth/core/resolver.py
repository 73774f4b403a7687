"""Credential source resolution.

Picks exactly one provider by walking a fixed chain:

1. ``GOOGLE_AUTH_TOKEN_FOR_TESTING`` - a fixed token, for tests.
2. A credential file: ``GOOGLE_APPLICATION_CREDENTIALS``, then
   ``application_default_credentials.json`` in the gcloud config directory
   (``CLOUDSDK_CONFIG`` or its platform default).
3. The GCE metadata server at ``GCE_METADATA_ROOT`` (default
   ``metadata.google.internal``), if it answers a probe.

The first applicable source wins; later sources are never consulted.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import msgspec

from cloudauth.auth.base import AuthProvider
from cloudauth.auth.fixed import FixedTokenProvider
from cloudauth.auth.gce import DEFAULT_METADATA_ROOT, GceMetadataProvider, probe_metadata_server
from cloudauth.auth.oauth2 import OAuth2Provider
from cloudauth.auth.service_account import ServiceAccountProvider
from cloudauth.config.credentials import (
    AuthorizedUserCredentials,
    ServiceAccountCredentials,
    load_credential_file,
)
from cloudauth.config.paths import well_known_credentials_file
from cloudauth.config.settings import get_config
from cloudauth.errors.types import NotFoundError

logger = logging.getLogger(__name__)

TOKEN_FOR_TESTING_ENV = "GOOGLE_AUTH_TOKEN_FOR_TESTING"
APPLICATION_CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"
CLOUDSDK_CONFIG_ENV = "CLOUDSDK_CONFIG"
METADATA_ROOT_ENV = "GCE_METADATA_ROOT"


class ResolutionContext(msgspec.Struct, frozen=True):
    """Read-only snapshot of the inputs to one resolution.

    Empty environment values are treated as unset.
    """

    environ: dict[str, str] = {}
    platform: str = sys.platform

    @classmethod
    def from_environ(cls) -> ResolutionContext:
        """Snapshot the current process environment."""
        return cls(environ=dict(os.environ), platform=sys.platform)

    def get(self, name: str) -> str | None:
        return self.environ.get(name) or None

    def credential_file_candidates(self) -> list[tuple[str, Path]]:
        """Credential file locations to try, in priority order."""
        candidates = []
        if explicit := self.get(APPLICATION_CREDENTIALS_ENV):
            candidates.append((f"${APPLICATION_CREDENTIALS_ENV}", Path(explicit)))

        if well_known := well_known_credentials_file(self.environ, self.platform):
            label = (
                f"${CLOUDSDK_CONFIG_ENV}"
                if self.get(CLOUDSDK_CONFIG_ENV)
                else "gcloud default credentials"
            )
            candidates.append((label, well_known))
        return candidates

    @property
    def metadata_root(self) -> str:
        return self.get(METADATA_ROOT_ENV) or DEFAULT_METADATA_ROOT


def provider_from_file(path: Path) -> AuthProvider:
    """Build the provider matching the credential file at ``path``.

    Raises:
        CredentialParseError: If the file is malformed or of unknown kind
    """
    credentials = load_credential_file(path)
    config = get_config()
    margin = config.tokens.expiration_margin

    if isinstance(credentials, AuthorizedUserCredentials):
        return OAuth2Provider(credentials, source=str(path), margin=margin)
    if isinstance(credentials, ServiceAccountCredentials):
        return ServiceAccountProvider(
            credentials,
            source=str(path),
            scopes=config.tokens.scopes,
            margin=margin,
        )
    raise TypeError(f"Unhandled credential type: {type(credentials).__name__}")


async def resolve(context: ResolutionContext | None = None) -> AuthProvider:
    """Pick the credential source for ``context`` and build its provider.

    Args:
        context: Inputs to resolve against; defaults to the process environment

    Returns:
        The provider for the first applicable source

    Raises:
        NotFoundError: If no credential source is available
        CredentialParseError: If the selected credential file is unusable
    """
    if context is None:
        context = ResolutionContext.from_environ()

    attempted: list[str] = []

    if token := context.get(TOKEN_FOR_TESTING_ENV):
        logger.info("Using fixed token from $%s", TOKEN_FOR_TESTING_ENV)
        return FixedTokenProvider(token, source=f"${TOKEN_FOR_TESTING_ENV}")
    attempted.append(f"${TOKEN_FOR_TESTING_ENV}: not set")
    if not context.get(APPLICATION_CREDENTIALS_ENV):
        attempted.append(f"${APPLICATION_CREDENTIALS_ENV}: not set")

    for label, path in context.credential_file_candidates():
        if not path.is_file():
            logger.debug("Skipping %s: %s does not exist", label, path)
            attempted.append(f"{label}: {path} does not exist")
            continue
        provider = provider_from_file(path)
        logger.info("Using %s credentials from %s (%s)", provider.name, path, label)
        return provider

    root = context.metadata_root
    if await probe_metadata_server(root):
        logger.info("Using GCE metadata server at %s", root)
        return GceMetadataProvider(root, margin=get_config().tokens.expiration_margin)
    attempted.append(f"GCE metadata server at {root}: unreachable")

    raise NotFoundError(attempted)


async def get_provider() -> AuthProvider:
    """Resolve a provider from the current process environment."""
    return await resolve(ResolutionContext.from_environ())
