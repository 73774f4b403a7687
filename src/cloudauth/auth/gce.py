"""Provider backed by the GCE metadata server."""

from __future__ import annotations

import logging
from datetime import timedelta

import httpx
import msgspec

from cloudauth.auth.base import EXPIRATION_MARGIN, RefreshableAuthProvider, Token, request_token
from cloudauth.core.http import get_http_client, get_probe_timeout
from cloudauth.errors.http import endpoint_refresh_error
from cloudauth.errors.network import network_refresh_error
from cloudauth.errors.types import RefreshError, RefreshStep

logger = logging.getLogger(__name__)

DEFAULT_METADATA_ROOT = "metadata.google.internal"

METADATA_HEADERS = {"Metadata-Flavor": "Google"}

SERVICE_ACCOUNT_PATH = "/computeMetadata/v1/instance/service-accounts/default/"


class ServiceAccountInfo(msgspec.Struct, frozen=True):
    """Default service account attached to the instance."""

    email: str
    scopes: list[str] = []


def metadata_url(root: str, path: str = "/") -> str:
    """Build a metadata server URL for ``root`` (a host, optionally with port)."""
    root = root.rstrip("/")
    if not root.startswith(("http://", "https://")):
        root = f"http://{root}"
    return f"{root}{path}"


async def probe_metadata_server(root: str = DEFAULT_METADATA_ROOT) -> bool:
    """Check whether a metadata server answers at ``root``.

    A single GET with a short timeout; any transport failure, non-200 status
    or missing ``Metadata-Flavor: Google`` response header means unreachable.
    """
    url = metadata_url(root)
    try:
        async with get_http_client() as client:
            response = await client.get(
                url, headers=METADATA_HEADERS, timeout=get_probe_timeout()
            )
    except httpx.HTTPError as e:
        logger.debug("Metadata server at %s is unreachable: %s", url, e)
        return False

    if response.status_code != 200:
        logger.debug("Metadata server at %s answered HTTP %s", url, response.status_code)
        return False

    return response.headers.get("Metadata-Flavor") == "Google"


class GceMetadataProvider(RefreshableAuthProvider):
    """Fetch tokens for the instance's default service account."""

    name = "gce"

    def __init__(
        self,
        metadata_root: str = DEFAULT_METADATA_ROOT,
        *,
        margin: timedelta = EXPIRATION_MARGIN,
    ) -> None:
        super().__init__(metadata_root, margin=margin)
        self.metadata_root = metadata_root

    @property
    def token_url(self) -> str:
        return metadata_url(self.metadata_root, SERVICE_ACCOUNT_PATH + "token")

    async def refresh(self) -> Token:
        logger.debug("Requesting token from metadata server %s", self.metadata_root)
        return await request_token(
            "GET",
            self.token_url,
            provider=self.name,
            headers=METADATA_HEADERS,
        )

    async def service_account_info(self) -> ServiceAccountInfo:
        """Fetch the email and scopes of the default service account.

        Raises:
            RefreshError: If the metadata server cannot be queried
        """
        url = metadata_url(self.metadata_root, SERVICE_ACCOUNT_PATH)
        try:
            async with get_http_client() as client:
                response = await client.get(
                    url, headers=METADATA_HEADERS, params={"recursive": "true"}
                )
        except httpx.HTTPError as e:
            raise network_refresh_error(e, self.name) from e

        if response.status_code != 200:
            raise endpoint_refresh_error(response, self.name)

        try:
            return msgspec.json.decode(response.content, type=ServiceAccountInfo)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            raise RefreshError(
                f"malformed service account info: {e}",
                step=RefreshStep.PARSING,
                provider=self.name,
            ) from e
