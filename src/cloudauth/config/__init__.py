"""Configuration and credential file handling for cloudauth."""

from __future__ import annotations

from cloudauth.config.credentials import AuthorizedUserCredentials
from cloudauth.config.credentials import CredentialFile
from cloudauth.config.credentials import ServiceAccountCredentials
from cloudauth.config.credentials import load_credential_file
from cloudauth.config.credentials import parse_credentials
from cloudauth.config.paths import config_dir
from cloudauth.config.paths import config_file
from cloudauth.config.paths import well_known_credentials_file
from cloudauth.config.settings import Config
from cloudauth.config.settings import get_config
from cloudauth.config.settings import load_config
from cloudauth.config.settings import reload_config

__all__ = [
    "AuthorizedUserCredentials",
    "ServiceAccountCredentials",
    "CredentialFile",
    "parse_credentials",
    "load_credential_file",
    "config_dir",
    "config_file",
    "well_known_credentials_file",
    "Config",
    "get_config",
    "load_config",
    "reload_config",
]
