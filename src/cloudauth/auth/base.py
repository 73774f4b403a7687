"""Authentication base classes: tokens, providers and the refresh contract."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

import httpx
import msgspec

from cloudauth.core.http import get_http_client
from cloudauth.errors.http import endpoint_refresh_error
from cloudauth.errors.network import network_refresh_error
from cloudauth.errors.types import RefreshError, RefreshStep

logger = logging.getLogger(__name__)


# Refresh margin - a token this close to expiry is treated as stale
EXPIRATION_MARGIN: timedelta = timedelta(seconds=60)


class Token(msgspec.Struct, frozen=True):
    """A bearer token, with an optional expiration time.

    A token without an expiration never goes stale.
    """

    value: str
    expiration: datetime | None = None

    def needs_refresh(self, margin: timedelta = EXPIRATION_MARGIN) -> bool:
        """Check if the token expires within ``margin`` from now."""
        if self.expiration is None:
            return False
        return datetime.now(self.expiration.tzinfo) >= self.expiration - margin

    def to_headers(self) -> dict[str, str]:
        """Return Authorization header."""
        return {"Authorization": f"Bearer {self.value}"}


class TokenResponse(msgspec.Struct):
    """Token endpoint response body shared by OAuth2 and the metadata server."""

    access_token: str
    expires_in: int
    token_type: str = "Bearer"


async def ensure_fresh(
    current: Token | None,
    refresh: Callable[[], Awaitable[Token]],
    *,
    margin: timedelta = EXPIRATION_MARGIN,
) -> Token:
    """Return ``current`` if still fresh, otherwise the result of ``refresh``.

    Exactly one ``refresh`` call is made per stale detection. Errors from
    ``refresh`` propagate; a stale token is never returned in their place.
    """
    if current is not None and not current.needs_refresh(margin):
        return current
    return await refresh()


def parse_token_response(content: bytes, provider: str) -> Token:
    """Decode a token endpoint response into a ``Token``.

    Raises:
        RefreshError: If the body is not a valid token response
    """
    try:
        data = msgspec.json.decode(content, type=TokenResponse)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise RefreshError(
            f"malformed token response: {e}",
            step=RefreshStep.PARSING,
            provider=provider,
        ) from e

    if not data.access_token:
        raise RefreshError(
            "token response contains an empty access_token",
            step=RefreshStep.PARSING,
            provider=provider,
        )

    if data.token_type.lower() != "bearer":
        raise RefreshError(
            f"unexpected token_type {data.token_type!r}",
            step=RefreshStep.PARSING,
            provider=provider,
        )

    expiration = datetime.now(UTC) + timedelta(seconds=data.expires_in)
    return Token(value=data.access_token, expiration=expiration)


async def request_token(
    method: str,
    url: str,
    *,
    provider: str,
    **kwargs,
) -> Token:
    """Call a token endpoint and parse the response.

    Transport failures (including timeouts), non-success responses and
    malformed bodies are all raised as ``RefreshError``.
    """
    try:
        async with get_http_client() as client:
            response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise network_refresh_error(e, provider) from e

    if response.status_code != 200:
        raise endpoint_refresh_error(response, provider)

    return parse_token_response(response.content, provider)


def _retrieve_exception(task: asyncio.Future) -> None:
    # Every caller may have been cancelled before the refresh failed
    if not task.cancelled():
        task.exception()


class AuthProvider(ABC):
    """Base class for bearer token providers."""

    # Provider identifier (e.g., 'oauth2', 'gce')
    name: str = ""

    def __init__(self, source: str | None = None) -> None:
        self.source = source

    @abstractmethod
    async def get_token(self) -> Token:
        """Return a valid bearer token, refreshing it if needed."""
        ...

    async def auth_header(self) -> dict[str, str]:
        """Return the Authorization header for the current token."""
        token = await self.get_token()
        return token.to_headers()

    def describe(self) -> dict[str, str]:
        """Return non-secret details about this provider for diagnostics."""
        details = {"provider": self.name}
        if self.source:
            details["source"] = self.source
        return details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source!r})"


class RefreshableAuthProvider(AuthProvider):
    """Provider that caches a token and refreshes it when stale.

    Concurrent ``get_token`` callers share a single in-flight refresh and all
    observe its result, token or error.
    """

    def __init__(
        self,
        source: str | None = None,
        *,
        margin: timedelta = EXPIRATION_MARGIN,
    ) -> None:
        super().__init__(source)
        self.margin = margin
        self._token: Token | None = None
        self._inflight: asyncio.Future[Token] | None = None

    @property
    def cached_token(self) -> Token | None:
        return self._token

    @abstractmethod
    async def refresh(self) -> Token:
        """Acquire a brand new token using this provider's protocol."""
        ...

    async def get_token(self) -> Token:
        return await ensure_fresh(self._token, self._refresh_shared, margin=self.margin)

    async def _refresh_shared(self) -> Token:
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run_refresh())
            self._inflight.add_done_callback(_retrieve_exception)
        return await asyncio.shield(self._inflight)

    async def _run_refresh(self) -> Token:
        try:
            token = await self.refresh()
        except Exception:
            self._token = None
            raise
        else:
            self._token = token
            logger.info("Refreshed %s token, expires at %s", self.name, token.expiration)
            return token
        finally:
            self._inflight = None
