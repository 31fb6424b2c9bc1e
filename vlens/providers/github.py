"""GitHub tags/commits lookups for github: dependencies."""

from __future__ import annotations

import logging
from typing import Any

from vlens.clients.transport import JsonTransport
from vlens.config.schemas import GitHubOptions
from vlens.core.factories import create_response_status
from vlens.core.models import (
    PackageDocument,
    PackageNameVersion,
    PackageRequest,
    PackageSource,
    VersionType,
)
from vlens.core.suggestions import create_suggestion_tags
from vlens.core.versions import filter_semver_versions, sort_versions, split_releases_from_array
from vlens.providers.specifiers import NpmSpecifier

logger = logging.getLogger(__name__)

SHORT_SHA_LENGTH = 8


class GitHubClient:
    """Resolves GitHub-hosted dependencies against the GitHub REST API.

    Semver refs (``#semver:^2``) and version-like refs (``#v2.0.0``) are
    matched against the repository's tags; anything else is treated as a
    commit-ish and matched against recent commits.
    """

    def __init__(self, options: GitHubOptions, transport: JsonTransport):
        self._options = options
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "vlens",
        }
        if self._options.access_token:
            headers["Authorization"] = f"token {self._options.access_token}"
        return headers

    def _repo_url(self, spec: NpmSpecifier, resource: str) -> str:
        assert spec.github is not None
        api_url = self._options.api_url.rstrip("/")
        return f"{api_url}/repos/{spec.github.owner}/{spec.github.repo}/{resource}"

    async def fetch_github(self, request: PackageRequest, spec: NpmSpecifier) -> PackageDocument:
        """Build a document for a github: specifier.

        Raises:
            TransportError: If the GitHub API call fails
        """
        if spec.type is VersionType.COMMITTISH:
            return await self._fetch_commits(request, spec)
        return await self._fetch_tags(request, spec)

    async def _fetch_tags(self, request: PackageRequest, spec: NpmSpecifier) -> PackageDocument:
        assert spec.github is not None
        url = self._repo_url(spec, "tags")
        logger.debug("Fetching GitHub tags from %s", url)
        response = await self._transport.get_json(url, headers=self._headers())

        names = [tag["name"] for tag in _as_list(response.data) if "name" in tag]
        versions = sort_versions(filter_semver_versions(names))
        split = split_releases_from_array(versions)

        version_range = (
            spec.github.semver_range if spec.github.semver_range is not None else spec.github.ref
        )
        suggestions = create_suggestion_tags(version_range, split.releases, split.prereleases)

        return PackageDocument(
            provider_name=request.provider_name,
            source=PackageSource.GITHUB,
            response=create_response_status(response.source, response.status),
            type=spec.type,
            requested=request.package,
            resolved=PackageNameVersion(request.package.name, version_range),
            suggestions=tuple(suggestions),
            releases=tuple(split.releases),
            prereleases=tuple(split.prereleases),
        )

    async def _fetch_commits(self, request: PackageRequest, spec: NpmSpecifier) -> PackageDocument:
        assert spec.github is not None
        url = self._repo_url(spec, "commits")
        logger.debug("Fetching GitHub commits from %s", url)
        response = await self._transport.get_json(url, headers=self._headers())

        shas = [commit["sha"] for commit in _as_list(response.data) if "sha" in commit]
        short_shas = [sha[:SHORT_SHA_LENGTH] for sha in shas]

        ref = spec.github.ref
        committish = ref
        if ref:
            committish = next(
                (sha[:SHORT_SHA_LENGTH] for sha in shas if sha.startswith(ref[:SHORT_SHA_LENGTH])),
                ref,
            )

        # newest commit first, so it stands in for "latest"
        latest = short_shas[0] if short_shas else None
        suggestions = create_suggestion_tags(committish, short_shas, [], latest)

        return PackageDocument(
            provider_name=request.provider_name,
            source=PackageSource.GITHUB,
            response=create_response_status(response.source, response.status),
            type=VersionType.COMMITTISH,
            requested=request.package,
            resolved=PackageNameVersion(request.package.name, committish),
            suggestions=tuple(suggestions),
        )


def _as_list(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]
