"""Tests for vlens.clients.factory module."""

import logging

import pytest

from vlens.clients.factory import UnsupportedProviderError, create_package_client, list_providers
from vlens.clients.transport import HttpxJsonTransport
from vlens.config.schemas import CachingOptions, NpmConfig, VlensConfig
from vlens.providers.composer import ComposerPackageClient
from vlens.providers.dotnet import NuGetPackageClient
from vlens.providers.dub import DubPackageClient
from vlens.providers.npm import NpmPackageClient


class TestListProviders:
    """Tests for list_providers()."""

    def test_lists_builtin_providers(self):
        assert list_providers() == ["composer", "dotnet", "dub", "npm"]


class TestCreatePackageClient:
    """Tests for create_package_client()."""

    @pytest.mark.parametrize(
        ("provider", "cls"),
        [
            ("npm", NpmPackageClient),
            ("composer", ComposerPackageClient),
            ("dub", DubPackageClient),
            ("dotnet", NuGetPackageClient),
        ],
    )
    def test_creates_registered_client(self, provider, cls, transport):
        client = create_package_client(provider, VlensConfig(), transport)

        assert isinstance(client, cls)
        assert client.provider_name == provider
        assert client.transport is transport

    def test_default_transport_is_httpx(self):
        client = create_package_client("dub", VlensConfig())

        assert isinstance(client.transport, HttpxJsonTransport)

    def test_default_logger_name(self, transport):
        client = create_package_client("npm", VlensConfig(), transport)

        assert client.logger.name == "vlens.providers.npm"

    def test_custom_logger(self, transport):
        custom = logging.getLogger("custom")

        client = create_package_client("npm", VlensConfig(), transport, custom)

        assert client.logger is custom

    def test_cache_built_from_provider_options(self, transport):
        config = VlensConfig(npm=NpmConfig(caching=CachingOptions(duration=0.5)))

        client = create_package_client("npm", config, transport)

        assert client.cache.duration == 30
        assert len(client.cache) == 0

    def test_each_client_owns_its_cache(self, transport):
        first = create_package_client("npm", VlensConfig(), transport)
        second = create_package_client("npm", VlensConfig(), transport)

        assert first.cache is not second.cache

    def test_unknown_provider(self, transport):
        with pytest.raises(UnsupportedProviderError, match="Unknown provider: pypi") as exc_info:
            create_package_client("pypi", VlensConfig(), transport)

        assert "npm" in exc_info.value.available
