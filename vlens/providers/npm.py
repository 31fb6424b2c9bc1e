"""npm registry client."""

from __future__ import annotations

import logging
from functools import partial
from urllib.parse import quote

from vlens.clients.base import PackageClient
from vlens.clients.cache import create_cache_key, fetch_with_cache
from vlens.clients.factory import register_client
from vlens.clients.transport import JsonTransport
from vlens.config.schemas import NpmConfig
from vlens.core.errors import InvalidSpecifierError, TransportError
from vlens.core.factories import (
    create_no_match,
    create_not_found,
    create_response_status,
    create_unsupported,
)
from vlens.core.models import (
    PackageDocument,
    PackageNameVersion,
    PackageRequest,
    PackageSource,
    VersionType,
)
from vlens.core.suggestions import create_suggestion_tags
from vlens.core.versions import (
    extract_versions_from_map,
    filter_semver_versions,
    format_with_existing_leading,
    lte_from_array,
    sort_versions,
    split_releases_from_array,
)
from vlens.providers.github import GitHubClient
from vlens.providers.specifiers import NpmSpecifier, parse_npm_spec

# Abbreviated packument: versions and dist-tags only
PACKUMENT_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"


@register_client("npm")
class NpmPackageClient(PackageClient):
    """Client for the npm registry.

    Handles plain versions and ranges, dist-tag specifiers (``next``),
    aliases (``npm:other@^1``) and GitHub-hosted dependencies.
    """

    config: NpmConfig

    def __init__(
        self,
        config: NpmConfig,
        transport: JsonTransport,
        logger: logging.Logger | None = None,
    ):
        super().__init__(config, transport, logger)
        self.github = GitHubClient(config.github, transport)

    async def fetch_package(self, request: PackageRequest) -> PackageDocument:
        try:
            spec = parse_npm_spec(request.package.name, request.package.version)
        except InvalidSpecifierError as error:
            self.logger.debug("%s", error)
            return create_unsupported(self.provider_name, request.package)

        cache_key = create_cache_key(request.package)

        if spec.github is not None:
            fetcher = partial(self.github.fetch_github, request, spec)
        else:
            fetcher = partial(self._fetch_packument, request, spec)

        try:
            document = await fetch_with_cache(self.cache, cache_key, fetcher)
        except TransportError as error:
            if error.status == 404:
                self.logger.debug("Package not found: %s", request.package.name)
                return create_not_found(
                    self.provider_name,
                    request.package,
                    None,
                    create_response_status(error.source, error.status),
                )
            raise

        assert isinstance(document, PackageDocument)
        return document

    def _packument_url(self, name: str) -> str:
        # scoped names keep their "@" but escape the "/"
        return f"{self.config.api_url}/{quote(name, safe='@')}"

    async def _fetch_packument(self, request: PackageRequest, spec: NpmSpecifier) -> PackageDocument:
        target = spec.target
        url = self._packument_url(target.name)
        self.logger.debug("Fetching packument %s", url)

        http_response = await self.transport.get_json(url, headers={"Accept": PACKUMENT_ACCEPT})
        packument = http_response.data if isinstance(http_response.data, dict) else {}

        source = PackageSource.REGISTRY
        response = create_response_status(http_response.source, http_response.status)
        version_range = target.raw_spec
        resolved = PackageNameVersion(target.name, version_range)

        raw_versions = extract_versions_from_map(packument.get("versions") or {})
        versions = sort_versions(filter_semver_versions(raw_versions))
        split = split_releases_from_array(versions)
        releases = split.releases

        dist_tags = packument.get("dist-tags") or {}
        latest_tagged = dist_tags.get("latest")
        if latest_tagged:
            # some packages publish versions newer than what the author tags latest
            releases = lte_from_array(releases, latest_tagged)

        latest_hint = latest_tagged or (releases[-1] if releases else None)

        if target.type is VersionType.TAG:
            tagged_version = dist_tags.get(target.raw_spec)
            if not tagged_version:
                return create_no_match(
                    self.provider_name,
                    source,
                    spec.type,
                    request.package,
                    response,
                    latest_hint,
                )
            version_range = tagged_version

        suggestions = create_suggestion_tags(
            version_range,
            releases,
            split.prereleases,
            latest_hint,
        )

        return PackageDocument(
            provider_name=self.provider_name,
            source=source,
            response=response,
            type=spec.type,
            requested=request.package,
            resolved=resolved,
            suggestions=tuple(suggestions),
            releases=tuple(releases),
            prereleases=tuple(split.prereleases),
        )


def npm_replace_version(document: PackageDocument, new_version: str) -> str:
    """Rewrite a dependency's specifier to a new version, keeping its style.

    GitHub specifiers swap the ref in place, aliases keep their
    ``npm:name@`` prefix, and everything else keeps its leading operator.

    Args:
        document: Document describing the current specifier
        new_version: Version chosen from the suggestions

    Returns:
        The specifier to write back into package.json
    """
    requested = document.requested.version

    if document.source is PackageSource.GITHUB and document.resolved is not None:
        return requested.replace(document.resolved.version, new_version)

    if document.type is VersionType.ALIAS and document.resolved is not None:
        leading = format_with_existing_leading(document.resolved.version, new_version)
        return f"npm:{document.resolved.name}@{leading}"

    return format_with_existing_leading(requested, new_version)
