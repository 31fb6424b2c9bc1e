"""Version list helpers used by every package client.

Registries hand back raw version strings in whatever order they like. These
helpers filter them down to semantic versions, sort them, and partition them
into releases and prereleases before suggestions are computed.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

from vlens.utils.version import SemVer, compare_loose, is_valid_range, is_valid_version

_LEADING_SYMBOL = re.compile(r"^([^0-9]*)")


@dataclass(frozen=True)
class VersionSplit:
    """Releases and prereleases, both in ascending order."""

    releases: list[str]
    prereleases: list[str]


def filter_semver_versions(raw: Iterable[str]) -> list[str]:
    """Drop strings that are not semantic versions, preserving order.

    Args:
        raw: Version strings as returned by a registry

    Returns:
        Only the entries that loosely parse as semver
    """
    return [v for v in raw if is_valid_version(v)]


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Sort semver strings ascending by precedence (build metadata ignored).

    Raises:
        ValueError: If any entry is not a semantic version
    """
    return sorted(versions, key=cmp_to_key(compare_loose))


def split_releases_from_array(versions: Iterable[str]) -> VersionSplit:
    """Partition ascending-sorted versions into releases and prereleases.

    A version is a prerelease when it carries a prerelease component
    (e.g. ``1.0.0-rc.1``). Everything else, including strings that are not
    semver at all, is treated as a release.
    """
    releases: list[str] = []
    prereleases: list[str] = []
    for version in versions:
        try:
            is_prerelease = SemVer.parse_loose(version).is_prerelease
        except ValueError:
            is_prerelease = False
        (prereleases if is_prerelease else releases).append(version)
    return VersionSplit(releases=releases, prereleases=prereleases)


def lte_from_array(releases: Iterable[str], ceiling: str) -> list[str]:
    """Keep only versions less than or equal to ``ceiling``.

    Used to cap releases at a registry's author-declared "latest" tag.
    An unparsable ceiling leaves the list as is.
    """
    releases = list(releases)
    try:
        limit = SemVer.parse_loose(ceiling)
    except ValueError:
        return releases

    capped = []
    for version in releases:
        try:
            if SemVer.parse_loose(version) <= limit:
                capped.append(version)
        except ValueError:
            continue
    return capped


def extract_versions_from_map(versions: Mapping[str, Any]) -> list[str]:
    """Return the keys of a version-keyed mapping as the raw version list."""
    return list(versions.keys())


def format_with_existing_leading(existing: str, new_version: str) -> str:
    """Apply the leading range operator of ``existing`` to ``new_version``.

    >>> format_with_existing_leading("^1.2.3", "1.5.0")
    '^1.5.0'
    >>> format_with_existing_leading("1.2.3", "1.5.0")
    '1.5.0'
    """
    match = _LEADING_SYMBOL.match(existing)
    leading = match.group(1) if match else ""
    if not leading:
        return new_version

    formatted = f"{leading}{new_version}"
    if not is_valid_range(formatted):
        return new_version
    return formatted
