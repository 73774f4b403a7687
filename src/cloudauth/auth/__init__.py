"""Bearer token providers for cloudauth."""
from __future__ import annotations

from cloudauth.auth.base import EXPIRATION_MARGIN
from cloudauth.auth.base import AuthProvider
from cloudauth.auth.base import RefreshableAuthProvider
from cloudauth.auth.base import Token
from cloudauth.auth.base import ensure_fresh
from cloudauth.auth.fixed import FixedTokenProvider
from cloudauth.auth.gce import GceMetadataProvider
from cloudauth.auth.gce import probe_metadata_server
from cloudauth.auth.oauth2 import OAuth2Provider
from cloudauth.auth.service_account import ServiceAccountProvider

__all__ = [
    "Token",
    "AuthProvider",
    "RefreshableAuthProvider",
    "ensure_fresh",
    "EXPIRATION_MARGIN",
    "FixedTokenProvider",
    "OAuth2Provider",
    "ServiceAccountProvider",
    "GceMetadataProvider",
    "probe_metadata_server",
]
