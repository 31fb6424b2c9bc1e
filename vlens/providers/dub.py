"""Dub (code.dlang.org) client."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any
from urllib.parse import quote

from vlens.clients.base import PackageClient
from vlens.clients.cache import create_cache_key, fetch_with_cache
from vlens.clients.factory import register_client
from vlens.config.parser import load_json
from vlens.config.schemas import DubConfig
from vlens.core.errors import TransportError, UnknownFileVersionError
from vlens.core.factories import create_not_found, create_response_status
from vlens.core.models import PackageDocument, PackageNameVersion, PackageRequest, PackageSource
from vlens.core.suggestions import create_suggestion_tags
from vlens.core.versions import (
    extract_versions_from_map,
    filter_semver_versions,
    sort_versions,
    split_releases_from_array,
)
from vlens.providers.specifiers import SemverSpec, parse_dub_spec

SUPPORTED_SELECTIONS_VERSION = 1


def _extract_versions(versions: Any) -> list[str]:
    if isinstance(versions, dict):
        return extract_versions_from_map(versions)
    if isinstance(versions, list):
        return [v["version"] for v in versions if isinstance(v, dict) and "version" in v]
    return []


@register_client("dub")
class DubPackageClient(PackageClient):
    """Client for the dub package registry."""

    config: DubConfig

    async def fetch_package(self, request: PackageRequest) -> PackageDocument:
        spec = parse_dub_spec(request.package.version)
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
        url = f"{self.config.api_url}/{quote(name, safe='')}/info"
        self.logger.debug("Fetching dub package info %s", url)

        http_response = await self.transport.get_json(url, query={"minimize": "true"})
        info = http_response.data if isinstance(http_response.data, dict) else {}

        # branch versions such as "~master" are not semver and drop out here
        versions = sort_versions(filter_semver_versions(_extract_versions(info.get("versions"))))
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


def read_dub_selections(path: Path) -> dict[str, Any]:
    """Read a dub.selections.json file.

    Args:
        path: Path to dub.selections.json

    Returns:
        The parsed selections document

    Raises:
        ConfigError: If the file is missing or not valid JSON
        UnknownFileVersionError: If ``fileVersion`` is not 1
    """
    selections = load_json(path)
    file_version = selections.get("fileVersion")
    if file_version != SUPPORTED_SELECTIONS_VERSION:
        raise UnknownFileVersionError(str(path), file_version)
    return selections
