"""NuGet clients for .NET project files.

Resolution happens in two steps. ``NuGetResourceClient`` reads each feed's
service index to find its autocomplete endpoint; the resulting URLs travel in
``PackageClientContext.client_data`` to ``NuGetPackageClient``, which asks
them for a package's versions.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

from vlens.clients.base import PackageClient
from vlens.clients.cache import create_cache_key, fetch_with_cache
from vlens.clients.factory import register_client
from vlens.clients.transport import JsonTransport
from vlens.config.schemas import DotNetConfig, NuGetSource
from vlens.core.errors import PackageClientError, TransportError
from vlens.core.factories import create_not_found, create_response_status
from vlens.core.models import PackageDocument, PackageNameVersion, PackageRequest, PackageSource
from vlens.core.suggestions import create_suggestion_tags
from vlens.core.versions import filter_semver_versions, sort_versions, split_releases_from_array
from vlens.providers.specifiers import SemverSpec, normalize_nuget_version, parse_nuget_spec

logger = logging.getLogger(__name__)

AUTOCOMPLETE_RESOURCE_TYPE = "SearchAutocompleteService"


class NuGetResourceError(PackageClientError):
    """No autocomplete resource could be obtained for a feed."""

    def __init__(self, message: str = "Could not obtain a nuget resource", url: str | None = None):
        self.url = url
        super().__init__(message)


@dataclass(frozen=True)
class NuGetClientData:
    """Autocomplete endpoints to query, in priority order."""

    service_urls: tuple[str, ...]


def _resource_types(resource: dict[str, Any]) -> list[str]:
    types = resource.get("@type") or []
    return [types] if isinstance(types, str) else [t for t in types if isinstance(t, str)]


class NuGetResourceClient:
    """Looks up the autocomplete endpoint advertised by a NuGet feed."""

    def __init__(self, config: DotNetConfig, transport: JsonTransport):
        self._config = config
        self._transport = transport

    async def fetch_resource(self, source: NuGetSource) -> str:
        """Get the autocomplete URL for a feed.

        Falls back to the configured ``fallback_source`` when the service
        index cannot be read or advertises no autocomplete resource.

        Raises:
            NuGetResourceError: If neither the feed nor the fallback yields a URL
        """
        logger.debug("Requesting NuGet service index %s", source.url)
        try:
            response = await self._transport.get_json(source.url)
        except TransportError as error:
            logger.error("Could not read NuGet service index %s: %s", source.url, error)
        else:
            data = response.data if isinstance(response.data, dict) else {}
            for resource in data.get("resources") or []:
                if not isinstance(resource, dict):
                    continue
                types = _resource_types(resource)
                if any(t.split("/")[0] == AUTOCOMPLETE_RESOURCE_TYPE for t in types):
                    return str(resource["@id"])
            logger.debug("No %s resource in %s", AUTOCOMPLETE_RESOURCE_TYPE, source.url)

        if self._config.fallback_source:
            logger.info("Using fallback NuGet source %s", self._config.fallback_source)
            return self._config.fallback_source

        raise NuGetResourceError(url=source.url)

    async def fetch_client_data(self, sources: list[NuGetSource] | None = None) -> NuGetClientData:
        """Resolve autocomplete URLs for every enabled feed.

        Args:
            sources: Feeds to resolve (defaults to the configured sources)

        Returns:
            Client data for ``NuGetPackageClient``, duplicates removed
        """
        enabled = [s for s in (sources or self._config.sources) if s.enabled]
        urls = await asyncio.gather(*(self.fetch_resource(s) for s in enabled))
        return NuGetClientData(service_urls=tuple(dict.fromkeys(urls)))


@register_client("dotnet")
class NuGetPackageClient(PackageClient):
    """Client for NuGet autocomplete endpoints.

    Feeds are queried in order and the first feed that knows the package
    answers. With ``query_all_sources`` every feed that knows the package
    contributes its own document.
    """

    config: DotNetConfig

    async def fetch_package(
        self, request: PackageRequest
    ) -> PackageDocument | list[PackageDocument]:
        spec = parse_nuget_spec(request.package.version)
        service_urls = self._service_urls(request)
        fetcher = partial(self._fetch_sources, request, spec, service_urls)
        return await fetch_with_cache(self.cache, create_cache_key(request.package), fetcher)

    def _service_urls(self, request: PackageRequest) -> tuple[str, ...]:
        client_data = request.client_data
        if isinstance(client_data, NuGetClientData) and client_data.service_urls:
            return client_data.service_urls
        if self.config.fallback_source:
            return (self.config.fallback_source,)
        raise NuGetResourceError("No NuGet service urls to query")

    async def _fetch_sources(
        self,
        request: PackageRequest,
        spec: SemverSpec,
        service_urls: tuple[str, ...],
    ) -> PackageDocument | list[PackageDocument]:
        documents: list[PackageDocument] = []
        not_found: TransportError | None = None

        for url in service_urls:
            try:
                document = await self._fetch_source(request, spec, url)
            except TransportError as error:
                if error.status != 404:
                    raise
                self.logger.debug("%s not found at %s", request.package.name, url)
                not_found = error
                continue

            if not self.config.query_all_sources:
                return document
            documents.append(document)

        if documents:
            return documents

        assert not_found is not None
        return create_not_found(
            self.provider_name,
            request.package,
            None,
            create_response_status(not_found.source, 404),
        )

    async def _fetch_source(
        self,
        request: PackageRequest,
        spec: SemverSpec,
        url: str,
    ) -> PackageDocument:
        name = request.package.name
        query = {"id": name, "prerelease": "true", "semVerLevel": "2.0.0"}
        self.logger.debug("Fetching NuGet versions for %s from %s", name, url)

        http_response = await self.transport.get_json(url, query=query)
        data = http_response.data if isinstance(http_response.data, dict) else {}
        raw_versions = [v for v in data.get("data") or [] if isinstance(v, str)]
        if not raw_versions:
            # autocomplete answers unknown ids with an empty list
            raise TransportError(
                f"Package {name} not found at {url}",
                status=404,
                source=http_response.source,
                url=url,
            )

        normalized = [normalize_nuget_version(v) for v in raw_versions]
        versions = sort_versions(filter_semver_versions(normalized))
        split = split_releases_from_array(versions)

        suggestions = create_suggestion_tags(spec.range, split.releases, split.prereleases)

        return PackageDocument(
            provider_name=self.provider_name,
            source=PackageSource.REGISTRY,
            response=create_response_status(http_response.source, http_response.status),
            type=spec.type,
            requested=request.package,
            resolved=PackageNameVersion(name, spec.raw_version),
            suggestions=tuple(suggestions),
            releases=tuple(split.releases),
            prereleases=tuple(split.prereleases),
        )
