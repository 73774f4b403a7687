"""Credential file reading and classification."""

from __future__ import annotations

import logging
from pathlib import Path

import msgspec

from cloudauth.errors.types import CredentialParseError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

AUTHORIZED_USER = "authorized_user"
SERVICE_ACCOUNT = "service_account"

# Fields that identify a legacy authorized-user file without a "type" key
_AUTHORIZED_USER_FIELDS = ("client_id", "client_secret", "refresh_token")
_SERVICE_ACCOUNT_FIELDS = ("client_email", "private_key")


class AuthorizedUserCredentials(msgspec.Struct, frozen=True):
    """OAuth2 user credential written by ``gcloud auth application-default login``."""

    client_id: str
    client_secret: str
    refresh_token: str
    token_uri: str = DEFAULT_TOKEN_URI
    quota_project_id: str | None = None


class ServiceAccountCredentials(msgspec.Struct, frozen=True):
    """Service account private-key credential."""

    client_email: str
    private_key: str
    private_key_id: str = ""
    token_uri: str = DEFAULT_TOKEN_URI
    project_id: str | None = None


CredentialFile = AuthorizedUserCredentials | ServiceAccountCredentials


def _require_fields(
    data: dict, fields: tuple[str, ...], kind: str, path: Path | None
) -> None:
    for field in fields:
        value = data.get(field)
        if value is None:
            raise CredentialParseError(
                f"{kind} credentials are missing required field '{field}'",
                path=path,
                field=field,
            )
        if not isinstance(value, str) or not value:
            raise CredentialParseError(
                f"{kind} credentials field '{field}' must be a non-empty string",
                path=path,
                field=field,
            )


def _convert(data: dict, kind: type[CredentialFile], path: Path | None) -> CredentialFile:
    try:
        return msgspec.convert(data, type=kind)
    except msgspec.ValidationError as e:
        raise CredentialParseError(str(e), path=path) from e


def parse_credentials(content: bytes, path: Path | None = None) -> CredentialFile:
    """Parse and classify a credential file.

    A file with ``"type": "service_account"`` is a service account key. A file
    with ``"type": "authorized_user"``, or with no ``type`` at all but carrying
    ``client_id``/``client_secret``/``refresh_token``, is a user credential.

    Args:
        content: Raw file content
        path: File the content came from, used in error messages

    Returns:
        The parsed credential variant

    Raises:
        CredentialParseError: If the content is malformed or of unknown kind
    """
    try:
        data = msgspec.json.decode(content)
    except msgspec.DecodeError as e:
        raise CredentialParseError(f"invalid JSON: {e}", path=path) from e

    if not isinstance(data, dict):
        raise CredentialParseError("expected a JSON object", path=path)

    cred_type = data.get("type")

    if cred_type is None:
        if all(field in data for field in _AUTHORIZED_USER_FIELDS):
            _require_fields(data, _AUTHORIZED_USER_FIELDS, AUTHORIZED_USER, path)
            return _convert(data, AuthorizedUserCredentials, path)
        raise CredentialParseError(
            "missing 'type' field and not an OAuth2 client credential",
            path=path,
            field="type",
        )

    if cred_type == AUTHORIZED_USER:
        _require_fields(data, _AUTHORIZED_USER_FIELDS, AUTHORIZED_USER, path)
        return _convert(data, AuthorizedUserCredentials, path)

    if cred_type == SERVICE_ACCOUNT:
        _require_fields(data, _SERVICE_ACCOUNT_FIELDS, SERVICE_ACCOUNT, path)
        return _convert(data, ServiceAccountCredentials, path)

    raise CredentialParseError(
        f"unsupported credential type {cred_type!r}",
        path=path,
        field="type",
    )


def read_credential(path: Path) -> bytes | None:
    """Read credential file if it exists and is a regular file."""
    if not path.is_file():
        return None
    return path.read_bytes()


def load_credential_file(path: Path) -> CredentialFile:
    """Read and classify the credential file at ``path``.

    Raises:
        CredentialParseError: If the file cannot be read or parsed
    """
    try:
        content = read_credential(path)
    except OSError as e:
        raise CredentialParseError(f"could not read file: {e}", path=path) from e

    if content is None:
        raise CredentialParseError("file does not exist", path=path)

    try:
        credentials = parse_credentials(content, path)
    except CredentialParseError as e:
        logger.debug("Rejected credential file %s: %s", path, e)
        raise
    logger.debug("Loaded %s credentials from %s", type(credentials).__name__, path)
    return credentials

