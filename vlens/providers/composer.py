"""Composer (Packagist) client."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from urllib.parse import quote

from vlens.clients.base import PackageClient
from vlens.clients.cache import create_cache_key, fetch_with_cache
from vlens.clients.factory import register_client
from vlens.config.parser import load_json
from vlens.config.schemas import ComposerConfig
from vlens.core.errors import TransportError
from vlens.core.factories import create_not_found, create_response_status
from vlens.core.models import (
    PackageDocument,
    PackageNameVersion,
    PackageRequest,
    PackageSource,
)
from vlens.core.suggestions import create_suggestion_tags
from vlens.core.versions import (
    extract_versions_from_map,
    filter_semver_versions,
    sort_versions,
    split_releases_from_array,
)
from vlens.providers.specifiers import SemverSpec, parse_composer_spec


@register_client("composer")
class ComposerPackageClient(PackageClient):
    """Client for Packagist package metadata (``{api_url}/{vendor}/{name}.json``)."""

    config: ComposerConfig

    async def fetch_package(self, request: PackageRequest) -> PackageDocument:
        spec = parse_composer_spec(request.package.version)
        fetcher = partial(self._fetch_remote, request, spec)

        try:
            document = await fetch_with_cache(
                self.cache, create_cache_key(request.package), fetcher
            )
        except TransportError as error:
            if error.status == 404:
                return create_not_found(
                    self.provider_name,
                    request.package,
                    None,
                    create_response_status(error.source, error.status),
                )
            raise

        assert isinstance(document, PackageDocument)
        return document

    async def _fetch_remote(self, request: PackageRequest, spec: SemverSpec) -> PackageDocument:
        name = request.package.name
        url = f"{self.config.api_url}/{quote(name, safe='/')}.json"
        self.logger.debug("Fetching composer metadata %s", url)

        http_response = await self.transport.get_json(url)
        data = http_response.data if isinstance(http_response.data, dict) else {}
        packages = data.get("packages") or {}
        if name not in packages:
            raise TransportError(
                f"Package {name} missing from {url}",
                status=404,
                source=http_response.source,
                url=url,
            )

        entries = packages[name]
        if isinstance(entries, dict):
            raw_versions = extract_versions_from_map(entries)
        else:
            # p2 metadata lists version objects instead of keying them
            raw_versions = [e["version"] for e in entries if isinstance(e, dict) and "version" in e]
        versions = sort_versions(filter_semver_versions(raw_versions))
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


def read_composer_selections(path: Path) -> dict[str, str]:
    """Read the locked package versions from a composer.lock file.

    Args:
        path: Path to composer.lock

    Returns:
        Mapping of package name to locked version (dev packages included)

    Raises:
        ConfigError: If the file is missing or not valid JSON
    """
    lock = load_json(path)
    selections: dict[str, str] = {}
    for section in ("packages", "packages-dev"):
        for package in lock.get(section) or []:
            if isinstance(package, dict) and "name" in package and "version" in package:
                selections[package["name"]] = package["version"]
    return selections
