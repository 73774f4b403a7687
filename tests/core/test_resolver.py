"""Tests for core/resolver.py (credential source resolution)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock
from unittest.mock import patch

import pytest

import cloudauth.config.settings
from cloudauth.auth.fixed import FixedTokenProvider
from cloudauth.auth.gce import GceMetadataProvider
from cloudauth.auth.oauth2 import OAuth2Provider
from cloudauth.auth.service_account import ServiceAccountProvider
from cloudauth.config.paths import ADC_FILENAME
from cloudauth.core.resolver import ResolutionContext
from cloudauth.core.resolver import get_provider
from cloudauth.core.resolver import resolve
from cloudauth.errors.types import ConfigurationError
from cloudauth.errors.types import CredentialParseError
from cloudauth.errors.types import NotFoundError


@pytest.fixture
def unreachable_metadata():
    """Metadata server probe that always fails."""
    with patch(
        "cloudauth.core.resolver.probe_metadata_server",
        AsyncMock(return_value=False),
    ) as probe:
        yield probe


@pytest.fixture
def reachable_metadata():
    """Metadata server probe that always succeeds."""
    with patch(
        "cloudauth.core.resolver.probe_metadata_server",
        AsyncMock(return_value=True),
    ) as probe:
        yield probe


@pytest.fixture
def sdk_config_dir(tmp_path: Path, write_json, authorized_user_data, service_account_data) -> Path:
    """gcloud config directory holding both kinds of credential file."""
    write_json("sdk/service_account_credentials.json", service_account_data)
    write_json(f"sdk/{ADC_FILENAME}", authorized_user_data)
    return tmp_path / "sdk"


def context(**environ: str) -> ResolutionContext:
    return ResolutionContext(environ=environ, platform="linux")


class TestResolutionContext:
    """Tests for ResolutionContext."""

    def test_from_environ_snapshots(self, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_AUTH_TOKEN_FOR_TESTING", "abc")
        ctx = ResolutionContext.from_environ()
        monkeypatch.setenv("GOOGLE_AUTH_TOKEN_FOR_TESTING", "changed")

        assert ctx.get("GOOGLE_AUTH_TOKEN_FOR_TESTING") == "abc"

    def test_empty_values_are_unset(self) -> None:
        assert context(GOOGLE_APPLICATION_CREDENTIALS="").get(
            "GOOGLE_APPLICATION_CREDENTIALS"
        ) is None

    def test_candidates_order(self) -> None:
        ctx = context(GOOGLE_APPLICATION_CREDENTIALS="/a.json", CLOUDSDK_CONFIG="/sdk")
        assert [path for _, path in ctx.credential_file_candidates()] == [
            Path("/a.json"),
            Path("/sdk") / ADC_FILENAME,
        ]

    def test_metadata_root(self) -> None:
        assert context().metadata_root == "metadata.google.internal"
        assert context(GCE_METADATA_ROOT="localhost:8080").metadata_root == "localhost:8080"


class TestResolve:
    """Tests for resolve."""

    @pytest.mark.asyncio
    async def test_token_for_testing(self, unreachable_metadata) -> None:
        provider = await resolve(context(GOOGLE_AUTH_TOKEN_FOR_TESTING="abc"))

        assert isinstance(provider, FixedTokenProvider)
        token = await provider.get_token()
        assert token.value == "abc"
        assert token.expiration is None
        unreachable_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_for_testing_beats_everything(
        self, write_json, service_account_data, sdk_config_dir, reachable_metadata
    ) -> None:
        path = write_json("sa.json", service_account_data)

        provider = await resolve(
            context(
                GOOGLE_AUTH_TOKEN_FOR_TESTING="abc",
                GOOGLE_APPLICATION_CREDENTIALS=str(path),
                CLOUDSDK_CONFIG=str(sdk_config_dir),
            )
        )

        assert isinstance(provider, FixedTokenProvider)
        assert (await provider.get_token()).value == "abc"

    @pytest.mark.asyncio
    async def test_nothing_available(self, unreachable_metadata) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await resolve(context(GCE_METADATA_ROOT="invalidmetadata.google.internal"))

        unreachable_metadata.assert_awaited_once_with("invalidmetadata.google.internal")
        attempted = "\n".join(exc_info.value.attempted)
        assert "GOOGLE_AUTH_TOKEN_FOR_TESTING" in attempted
        assert "GOOGLE_APPLICATION_CREDENTIALS" in attempted
        assert "invalidmetadata.google.internal" in attempted

    @pytest.mark.asyncio
    async def test_application_credentials_authorized_user(
        self, write_json, authorized_user_data, unreachable_metadata
    ) -> None:
        path = write_json(ADC_FILENAME, authorized_user_data)

        provider = await resolve(context(GOOGLE_APPLICATION_CREDENTIALS=str(path)))

        assert isinstance(provider, OAuth2Provider)
        assert provider.source == str(path)
        unreachable_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sdk_config_authorized_user(
        self, sdk_config_dir, unreachable_metadata
    ) -> None:
        provider = await resolve(context(CLOUDSDK_CONFIG=str(sdk_config_dir)))

        assert isinstance(provider, OAuth2Provider)
        assert provider.source == str(sdk_config_dir / ADC_FILENAME)

    @pytest.mark.asyncio
    async def test_application_credentials_service_account(
        self, write_json, service_account_data, unreachable_metadata
    ) -> None:
        path = write_json("service_account_credentials.json", service_account_data)

        provider = await resolve(context(GOOGLE_APPLICATION_CREDENTIALS=str(path)))

        assert isinstance(provider, ServiceAccountProvider)
        assert provider.credentials.client_email == "fake-test-project.iam.gserviceaccount.com"

    @pytest.mark.asyncio
    async def test_explicit_path_beats_sdk_config(
        self, write_json, service_account_data, sdk_config_dir, unreachable_metadata
    ) -> None:
        path = write_json("sa.json", service_account_data)

        provider = await resolve(
            context(
                GOOGLE_APPLICATION_CREDENTIALS=str(path),
                CLOUDSDK_CONFIG=str(sdk_config_dir),
            )
        )

        assert isinstance(provider, ServiceAccountProvider)

    @pytest.mark.asyncio
    async def test_missing_explicit_file_falls_through(
        self, tmp_path, sdk_config_dir, unreachable_metadata
    ) -> None:
        provider = await resolve(
            context(
                GOOGLE_APPLICATION_CREDENTIALS=str(tmp_path / "nope.json"),
                CLOUDSDK_CONFIG=str(sdk_config_dir),
            )
        )

        assert isinstance(provider, OAuth2Provider)

    @pytest.mark.asyncio
    async def test_empty_explicit_path_is_skipped(
        self, sdk_config_dir, unreachable_metadata
    ) -> None:
        provider = await resolve(
            context(GOOGLE_APPLICATION_CREDENTIALS="", CLOUDSDK_CONFIG=str(sdk_config_dir))
        )

        assert isinstance(provider, OAuth2Provider)

    @pytest.mark.asyncio
    async def test_home_default_location(
        self, tmp_path, write_json, authorized_user_data, unreachable_metadata
    ) -> None:
        write_json(f"home/.config/gcloud/{ADC_FILENAME}", authorized_user_data)

        provider = await resolve(context(HOME=str(tmp_path / "home")))

        assert isinstance(provider, OAuth2Provider)

    @pytest.mark.asyncio
    async def test_malformed_file_aborts_resolution(
        self, write_json, reachable_metadata
    ) -> None:
        path = write_json("bad.json", {"type": "external_account"})

        with pytest.raises(CredentialParseError) as exc_info:
            await resolve(context(GOOGLE_APPLICATION_CREDENTIALS=str(path)))

        assert exc_info.value.path == path
        reachable_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_metadata_server(self, reachable_metadata) -> None:
        provider = await resolve(context(GCE_METADATA_ROOT="localhost:8080"))

        assert isinstance(provider, GceMetadataProvider)
        assert provider.metadata_root == "localhost:8080"
        reachable_metadata.assert_awaited_once_with("localhost:8080")

    @pytest.mark.asyncio
    async def test_uses_configured_margin_and_scopes(
        self, write_json, service_account_data, default_config, unreachable_metadata
    ) -> None:
        default_config.tokens.expiration_margin_seconds = 300
        default_config.tokens.scopes = ["scope-x"]
        path = write_json("sa.json", service_account_data)

        provider = await resolve(context(GOOGLE_APPLICATION_CREDENTIALS=str(path)))

        assert provider.scopes == ["scope-x"]
        assert provider.margin.total_seconds() == 300

    @pytest.mark.asyncio
    async def test_invalid_settings_are_configuration_error(
        self, tmp_path, clean_env, monkeypatch, write_json, authorized_user_data
    ) -> None:
        monkeypatch.setattr(cloudauth.config.settings, "_config", None)
        monkeypatch.setenv("CLOUDAUTH_CONFIG_DIR", str(tmp_path / "settings"))
        monkeypatch.setenv("CLOUDAUTH_TIMEOUT", "soon")
        path = write_json(ADC_FILENAME, authorized_user_data)

        with pytest.raises(ConfigurationError, match="CLOUDAUTH_TIMEOUT"):
            await resolve(context(GOOGLE_APPLICATION_CREDENTIALS=str(path)))

    @pytest.mark.asyncio
    async def test_each_resolution_returns_new_instance(self, unreachable_metadata) -> None:
        ctx = context(GOOGLE_AUTH_TOKEN_FOR_TESTING="abc")
        assert await resolve(ctx) is not await resolve(ctx)


class TestGetProvider:
    """Tests for get_provider, which reads the process environment."""

    @pytest.mark.asyncio
    async def test_token_for_testing(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_AUTH_TOKEN_FOR_TESTING", "abc")

        provider = await get_provider()

        assert isinstance(provider, FixedTokenProvider)
        assert (await provider.get_token()).value == "abc"

    @pytest.mark.asyncio
    async def test_application_credentials(
        self, clean_env, monkeypatch, write_json, authorized_user_data
    ) -> None:
        path = write_json(ADC_FILENAME, authorized_user_data)
        monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(path))

        assert isinstance(await get_provider(), OAuth2Provider)

    @pytest.mark.asyncio
    async def test_invalid_metadata_host(self, clean_env, monkeypatch) -> None:
        """Unset variables fall back to GCE detection, which fails here."""
        monkeypatch.setenv("GCE_METADATA_ROOT", "invalidmetadata.google.internal")

        with pytest.raises(NotFoundError):
            await get_provider()
