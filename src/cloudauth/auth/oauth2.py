"""OAuth2 refresh-token provider for authorized-user credentials."""

from __future__ import annotations

import logging
from datetime import timedelta

from cloudauth.auth.base import EXPIRATION_MARGIN, RefreshableAuthProvider, Token, request_token
from cloudauth.config.credentials import AuthorizedUserCredentials

logger = logging.getLogger(__name__)


class OAuth2Provider(RefreshableAuthProvider):
    """Exchange a stored refresh token for short-lived access tokens.

    The credential comes from ``gcloud auth application-default login`` (or
    any file of the same shape); the consent flow has already happened.
    """

    name = "oauth2"

    def __init__(
        self,
        credentials: AuthorizedUserCredentials,
        source: str | None = None,
        *,
        margin: timedelta = EXPIRATION_MARGIN,
    ) -> None:
        super().__init__(source, margin=margin)
        self.credentials = credentials

    async def refresh(self) -> Token:
        """Refresh the OAuth access token."""
        logger.debug("Requesting OAuth2 access token from %s", self.credentials.token_uri)
        return await request_token(
            "POST",
            self.credentials.token_uri,
            provider=self.name,
            data={
                "grant_type": "refresh_token",
                "refresh_token": self.credentials.refresh_token,
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
            },
        )

    def describe(self) -> dict[str, str]:
        details = super().describe()
        details["client_id"] = self.credentials.client_id
        return details
