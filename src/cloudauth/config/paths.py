"""Platform-specific paths for cloudauth configuration and gcloud credentials."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_config_dir

PACKAGE_NAME = "cloudauth"

# Filename gcloud writes application default credentials to
ADC_FILENAME = "application_default_credentials.json"


def _get_env_path(env_var: str, fallback: Path) -> Path:
    """Get path from environment variable or fallback."""
    if env_value := os.environ.get(env_var):
        return Path(env_value)
    return fallback


def config_dir() -> Path:
    """Get user config directory.

    Respects CLOUDAUTH_CONFIG_DIR environment variable.
    """
    base_dir = Path(user_config_dir(PACKAGE_NAME))
    return _get_env_path("CLOUDAUTH_CONFIG_DIR", base_dir)


def config_file() -> Path:
    """Get main config.toml path."""
    return config_dir() / "config.toml"


def gcloud_config_dir(environ: Mapping[str, str], platform: str) -> Path | None:
    """Get the gcloud SDK configuration directory.

    ``CLOUDSDK_CONFIG`` wins when set. Otherwise gcloud keeps its config under
    ``%APPDATA%\\gcloud`` on Windows and ``~/.config/gcloud`` everywhere else.
    Returns None when the environment does not say where home is.
    """
    if override := environ.get("CLOUDSDK_CONFIG"):
        return Path(override)

    if platform == "win32":
        if appdata := environ.get("APPDATA"):
            return Path(appdata) / "gcloud"
        return None

    if home := environ.get("HOME"):
        return Path(home) / ".config" / "gcloud"
    return None


def well_known_credentials_file(
    environ: Mapping[str, str], platform: str
) -> Path | None:
    """Get the application default credentials file gcloud writes."""
    directory = gcloud_config_dir(environ, platform)
    if directory is None:
        return None
    return directory / ADC_FILENAME
