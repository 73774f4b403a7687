"""Pytest configuration and shared fixtures for cloudauth tests."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

import cloudauth.config.settings
import cloudauth.core.http
from cloudauth.config.settings import Config

RESOLVER_ENV_VARS = (
    "GOOGLE_AUTH_TOKEN_FOR_TESTING",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "CLOUDSDK_CONFIG",
    "GCE_METADATA_ROOT",
    "CLOUDAUTH_CONFIG_DIR",
    "CLOUDAUTH_TIMEOUT",
    "CLOUDAUTH_SCOPES",
)


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> Config:
    """Use default settings instead of the user's config file."""
    config = Config()
    monkeypatch.setattr(cloudauth.config.settings, "_config", config)
    return config


@pytest.fixture(autouse=True)
def reset_shared_state() -> Generator[None, None, None]:
    """Drop the shared HTTP client and CLI logging setup between tests."""
    yield
    cloudauth.core.http._client = None
    cloudauth.core.http._client_loop = None
    logger = logging.getLogger("cloudauth")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Unset resolver variables and point HOME at an empty directory."""
    for name in RESOLVER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """RSA key for signing service account assertions."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """PEM encoded private key, as found in service account files."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def authorized_user_data() -> dict:
    """Application default credentials written by gcloud."""
    return {
        "client_id": "fake-client-id.apps.googleusercontent.com",
        "client_secret": "fake-client-secret",
        "refresh_token": "fake-refresh-token",
        "type": "authorized_user",
    }


@pytest.fixture
def service_account_data(private_key_pem: str) -> dict:
    """Service account key file content."""
    return {
        "type": "service_account",
        "project_id": "fake_project_id",
        "private_key_id": "fake_key_id",
        "private_key": private_key_pem,
        "client_email": "fake-test-project.iam.gserviceaccount.com",
        "client_id": "fake_client_id",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://accounts.google.com/o/oauth2/token",
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "client_x509_cert_url": "https://www.googleapis.com/robot/v1/metadata/x509/fake-test-project.iam.gserviceaccount.com",
    }


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, dict], Path]:
    """Factory writing a JSON document to a file under tmp_path."""

    def _write(name: str, data: dict) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def mock_httpx_client() -> httpx.AsyncClient:
    """Mock httpx.AsyncClient."""
    client = MagicMock(spec=httpx.AsyncClient)
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.request = AsyncMock()
    client.is_closed = False
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def patched_http_client(mock_httpx_client: MagicMock) -> Generator[MagicMock, None, None]:
    """Route every provider request through ``mock_httpx_client``."""

    @asynccontextmanager
    async def fake_get_http_client():
        yield mock_httpx_client

    with patch("cloudauth.auth.base.get_http_client", fake_get_http_client), patch(
        "cloudauth.auth.gce.get_http_client", fake_get_http_client
    ):
        yield mock_httpx_client


@pytest.fixture
def token_response() -> Callable[..., httpx.Response]:
    """Factory for successful token endpoint responses."""

    def _response(
        access_token: str = "ya29.fresh-token", expires_in: int = 3600, **extra
    ) -> httpx.Response:
        body = {"access_token": access_token, "expires_in": expires_in, "token_type": "Bearer"}
        body.update(extra)
        return httpx.Response(200, json=body)

    return _response
