"""Provider returning a fixed, never-expiring token."""

from __future__ import annotations

from cloudauth.auth.base import AuthProvider, Token


class FixedTokenProvider(AuthProvider):
    """Always returns the same token.

    Used for tests and for callers that already hold a bearer token.
    """

    name = "fixed"

    def __init__(self, token: str, source: str | None = None) -> None:
        super().__init__(source)
        self._token = Token(value=token)

    async def get_token(self) -> Token:
        return self._token
