"""Service account provider: signed JWT assertions exchanged for tokens."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from cloudauth.auth.base import EXPIRATION_MARGIN, RefreshableAuthProvider, Token, request_token
from cloudauth.config.credentials import ServiceAccountCredentials
from cloudauth.config.settings import DEFAULT_SCOPES
from cloudauth.errors.types import RefreshError, RefreshStep

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"

# Lifetime of a signed assertion; Google rejects anything longer than an hour
ASSERTION_LIFETIME = timedelta(hours=1)


class ServiceAccountProvider(RefreshableAuthProvider):
    """Authenticate as a service account using its private key."""

    name = "service_account"

    def __init__(
        self,
        credentials: ServiceAccountCredentials,
        source: str | None = None,
        *,
        scopes: list[str] | None = None,
        margin: timedelta = EXPIRATION_MARGIN,
    ) -> None:
        super().__init__(source, margin=margin)
        self.credentials = credentials
        self.scopes = list(scopes) if scopes is not None else list(DEFAULT_SCOPES)

    def _signing_key(self) -> rsa.RSAPrivateKey:
        """Load the PEM private key from the credentials.

        Raises:
            RefreshError: If the key is not an RSA private key
        """
        try:
            key = serialization.load_pem_private_key(
                self.credentials.private_key.encode(), password=None
            )
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise self._signing_error(str(e)) from e

        if not isinstance(key, rsa.RSAPrivateKey):
            raise self._signing_error(f"expected an RSA private key, got {type(key).__name__}")
        return key

    def _signing_error(self, reason: str) -> RefreshError:
        return RefreshError(
            f"could not sign assertion with the service account key: {reason}",
            step=RefreshStep.SIGNING,
            provider=self.name,
            remediation="The private_key in the credential file is malformed. Download a new key.",
        )

    def build_assertion(self, now: datetime | None = None) -> str:
        """Build the RS256-signed JWT assertion for the token exchange.

        Raises:
            RefreshError: If the private key cannot be used for signing
        """
        key = self._signing_key()
        issued_at = now or datetime.now(UTC)
        claims = {
            "iss": self.credentials.client_email,
            "scope": " ".join(self.scopes),
            "aud": self.credentials.token_uri,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ASSERTION_LIFETIME).timestamp()),
        }
        headers = None
        if self.credentials.private_key_id:
            headers = {"kid": self.credentials.private_key_id}

        try:
            return jwt.encode(claims, key, algorithm="RS256", headers=headers)
        except jwt.PyJWTError as e:
            raise self._signing_error(str(e)) from e

    async def refresh(self) -> Token:
        assertion = self.build_assertion()
        logger.debug(
            "Exchanging assertion for %s at %s",
            self.credentials.client_email,
            self.credentials.token_uri,
        )
        return await request_token(
            "POST",
            self.credentials.token_uri,
            provider=self.name,
            data={
                "grant_type": JWT_BEARER_GRANT_TYPE,
                "assertion": assertion,
            },
        )

    def describe(self) -> dict[str, str]:
        details = super().describe()
        details["client_email"] = self.credentials.client_email
        if self.credentials.project_id:
            details["project_id"] = self.credentials.project_id
        return details
