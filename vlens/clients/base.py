"""Abstract base class for package clients."""

import logging
from abc import ABC, abstractmethod

from vlens.clients.cache import ResponseCache
from vlens.clients.transport import JsonTransport
from vlens.config.schemas import ProviderConfig
from vlens.core.models import PackageDocument, PackageRequest


class PackageClient(ABC):
    """Abstract base class for package clients.

    A package client resolves one request against its registry and turns the
    payload into a ``PackageDocument``. Each client owns its own response
    cache and receives its transport from the caller.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: JsonTransport,
        logger: logging.Logger | None = None,
    ):
        """Initialize the client.

        Args:
            config: Provider configuration (name, registry URL, caching)
            transport: Transport used for every registry call
            logger: Logger for request tracing (defaults to vlens.providers.<name>)
        """
        self.config = config
        self.transport = transport
        self.logger = logger or logging.getLogger(f"vlens.providers.{config.provider_name}")
        self.cache = ResponseCache.from_options(config.caching)

    @property
    def provider_name(self) -> str:
        """Get the provider name this client answers for."""
        return self.config.provider_name

    @abstractmethod
    async def fetch_package(
        self, request: PackageRequest
    ) -> PackageDocument | list[PackageDocument]:
        """Resolve a request against the registry.

        Args:
            request: The request to resolve

        Returns:
            A document, or several when the dependency maps to more than one
            registry resource. Missing packages and unmatched tags come back
            as documents too.

        Raises:
            PackageClientError: On transport failures other than "not found"
        """
        ...
