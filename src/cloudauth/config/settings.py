"""Settings for cloudauth, read from ``config.toml`` with environment overrides.

Example ``config.toml``::

    [http]
    timeout = 30.0
    connect_timeout = 10.0

    [metadata]
    probe_timeout = 2.0

    [tokens]
    expiration_margin_seconds = 60
    scopes = ["https://www.googleapis.com/auth/cloud-platform"]
"""

import os
import tomllib
from datetime import timedelta
from pathlib import Path

import msgspec

from cloudauth.errors.types import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_PROBE_TIMEOUT = 2.0
DEFAULT_EXPIRATION_MARGIN_SECONDS = 60
DEFAULT_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

TIMEOUT_ENV = "CLOUDAUTH_TIMEOUT"
SCOPES_ENV = "CLOUDAUTH_SCOPES"


class HTTPConfig(msgspec.Struct, omit_defaults=True):
    """Timeouts for token endpoint requests, in seconds."""

    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT


class MetadataConfig(msgspec.Struct, omit_defaults=True):
    """Metadata server probing."""

    probe_timeout: float = DEFAULT_PROBE_TIMEOUT


class TokenConfig(msgspec.Struct, omit_defaults=True):
    """Token freshness and the scopes requested by service accounts."""

    expiration_margin_seconds: int = DEFAULT_EXPIRATION_MARGIN_SECONDS
    scopes: list[str] = msgspec.field(default_factory=lambda: list(DEFAULT_SCOPES))

    @property
    def expiration_margin(self) -> timedelta:
        return timedelta(seconds=self.expiration_margin_seconds)


class Config(msgspec.Struct, omit_defaults=True):
    """All cloudauth settings; every section is optional in the file."""

    http: HTTPConfig = msgspec.field(default_factory=HTTPConfig)
    metadata: MetadataConfig = msgspec.field(default_factory=MetadataConfig)
    tokens: TokenConfig = msgspec.field(default_factory=TokenConfig)


def _read_toml(path: Path) -> dict:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def convert_config(data: dict) -> Config:
    """Validate a raw settings table into a ``Config``.

    Raises:
        msgspec.ValidationError: If a value has the wrong type
    """
    return msgspec.convert(data, type=Config)


def _with_env_overrides(config: Config) -> Config:
    """Return ``config`` with ``CLOUDAUTH_*`` environment overrides applied.

    CLOUDAUTH_TIMEOUT: Token endpoint timeout in seconds
    CLOUDAUTH_SCOPES: Comma-separated list of OAuth2 scopes
    """
    if raw_timeout := os.environ.get(TIMEOUT_ENV):
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"{TIMEOUT_ENV} must be a number of seconds, got {raw_timeout!r}",
                remediation=f"Unset {TIMEOUT_ENV} or set it to a number.",
            ) from None
        config = msgspec.structs.replace(
            config, http=msgspec.structs.replace(config.http, timeout=timeout)
        )

    if raw_scopes := os.environ.get(SCOPES_ENV):
        scopes = [s.strip() for s in raw_scopes.split(",") if s.strip()]
        config = msgspec.structs.replace(
            config, tokens=msgspec.structs.replace(config.tokens, scopes=scopes)
        )

    return config


def load_config(path: Path | None = None) -> Config:
    """Read settings from ``path`` (default: the user config file).

    A missing file yields the defaults.

    Raises:
        ConfigurationError: If the file or an environment override is invalid
    """
    from cloudauth.config.paths import config_file

    config_path = path or config_file()
    try:
        data = _read_toml(config_path)
        config = convert_config(data) if data else Config()
    except (OSError, tomllib.TOMLDecodeError, msgspec.ValidationError) as e:
        raise ConfigurationError(
            f"Invalid configuration in {config_path}: {e}",
            remediation="Fix or remove the file; `cloudauth config path` shows its location.",
            details={"path": str(config_path)},
        ) from e
    return _with_env_overrides(config)


# Process-wide settings, loaded lazily
_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Discard cached settings and read them again."""
    global _config
    _config = load_config()
    return _config
