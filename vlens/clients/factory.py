"""Package client registration and construction.

Provider modules register their client class with ``register_client``; the
factory imports them on first use.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from vlens.clients.transport import HttpxJsonTransport, JsonTransport

if TYPE_CHECKING:
    from vlens.clients.base import PackageClient
    from vlens.config.schemas import VlensConfig

logger = logging.getLogger(__name__)

_CLIENTS: dict[str, type[PackageClient]] = {}
_LOADED = False

# Known provider modules - add new providers here
_PROVIDER_MODULES = [
    "vlens.providers.composer",
    "vlens.providers.dotnet",
    "vlens.providers.dub",
    "vlens.providers.npm",
]


class UnsupportedProviderError(Exception):
    """Error when no client is registered for a provider."""

    def __init__(self, provider: str, available: list[str]):
        self.provider = provider
        self.available = available
        names = ", ".join(available) or "none"
        super().__init__(f"Unknown provider: {provider}. Available providers: {names}")


def register_client(
    name: str,
) -> Callable[[type[PackageClient]], type[PackageClient]]:
    """Decorator for client registration.

    Usage:
        @register_client("npm")
        class NpmPackageClient(PackageClient):
            ...
    """

    def decorator(cls: type[PackageClient]) -> type[PackageClient]:
        _CLIENTS[name] = cls
        return cls

    return decorator


def _load_providers() -> None:
    """Load all provider modules to trigger registration."""
    global _LOADED
    if _LOADED:
        return

    for module_name in _PROVIDER_MODULES:
        importlib.import_module(module_name)

    _LOADED = True


def list_providers() -> list[str]:
    """List all registered provider names."""
    _load_providers()
    return sorted(_CLIENTS.keys())


def create_package_client(
    provider: str,
    config: VlensConfig,
    transport: JsonTransport | None = None,
    client_logger: logging.Logger | None = None,
) -> PackageClient:
    """Create the package client for a provider.

    Args:
        provider: Provider name (npm, composer, dub, dotnet)
        config: Loaded configuration
        transport: Transport to inject (defaults to an httpx transport built
            from the provider's HTTP options)
        client_logger: Optional logger for the client

    Returns:
        A client with its own empty cache

    Raises:
        UnsupportedProviderError: If no client is registered for the provider
    """
    _load_providers()

    if provider not in _CLIENTS:
        raise UnsupportedProviderError(provider, sorted(_CLIENTS.keys()))

    provider_config = config.provider(provider)
    if transport is None:
        transport = HttpxJsonTransport(provider_config.http)

    logger.debug("Creating %s client for %s", provider, provider_config.api_url)
    return _CLIENTS[provider](provider_config, transport, client_logger)
